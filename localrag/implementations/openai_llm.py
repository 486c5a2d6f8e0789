# implementations/openai_llm.py

"""
OpenAI-compatible LLM provider implementation with retry logic.

This module implements the LLMProvider interface using the chat completions
API of a local inference server. Includes model warm-up with progress
reporting and automatic retries for transient failures.
"""

import asyncio
import logging
from typing import List, Dict, Optional
from openai import (
    AsyncOpenAI,
    APIConnectionError,
    APITimeoutError,
    RateLimitError,
    APIStatusError,
)
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from ..abstractions.llm_provider import LLMProvider, ProgressCallback
from ..utils.tokens_utils import TokenTracker


class OpenAICompatibleLLM(LLMProvider):
    """
    LLMProvider backed by an OpenAI-compatible chat completions endpoint.

    Includes automatic retry logic for common transient errors:
    - Connection errors (linear backoff)
    - Rate limit errors (longer backoff)
    - API status errors (server still loading the model, 5xx)

    Example:
        >>> llm = OpenAICompatibleLLM(
        ...     base_url="http://localhost:11434/v1",
        ...     api_key="local",
        ...     model="llama3.2:3b",
        ... )
        >>> await llm.initialize(lambda p: print(f"{p:.0f}%"))
        >>> response = await llm.generate([{"role": "user", "content": "Hello!"}])
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        timeout: float = 120.0,
        retries: int = 3,
        token_tracker: Optional[TokenTracker] = None,
    ):
        """
        Initialize the LLM client.

        Args:
            base_url: Base URL of the OpenAI-compatible server
            api_key: API key (local servers accept any non-empty value)
            model: Chat model name
            timeout: Timeout in seconds for API calls
            retries: Number of attempts for transient errors
            token_tracker: Optional tracker fed from response usage
        """
        self.model = model
        self.timeout = timeout
        self.retries = retries
        self.token_tracker = token_tracker
        self._initialized = False
        self._init_lock = asyncio.Lock()

        self.client = AsyncOpenAI(
            base_url=base_url,
            api_key=api_key,
            timeout=timeout,
        )

    @retry(
        stop=stop_after_attempt(5),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((APIConnectionError, APITimeoutError)),
        reraise=True,
    )
    async def _list_models(self) -> List[str]:
        page = await self.client.models.list()
        return [m.id for m in page.data]

    async def initialize(self, on_progress: Optional[ProgressCallback] = None) -> None:
        """
        Make sure the server is reachable and the model is loaded.

        Progress: 0% on start, 25% once the server answers, 100% after a
        one-token warm-up completion (which forces the server to load weights).
        Only the first call does any work.
        """
        def report(percent: float) -> None:
            if on_progress:
                on_progress(percent)

        async with self._init_lock:
            if self._initialized:
                report(100.0)
                return

            report(0.0)
            available = await self._list_models()
            if self.model not in available:
                # Ollama lists tags like "llama3.2:3b"; others may alias names
                logging.warning(
                    f"Model '{self.model}' not listed by server (available: {available})"
                )
            report(25.0)

            await self.generate(
                [{"role": "user", "content": "ping"}],
                temperature=0.0,
                max_tokens=1,
                stage="warmup",
                allow_empty=True,
            )
            self._initialized = True
            logging.info(f"Model '{self.model}' is ready")
            report(100.0)

    async def generate(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        *,
        stage: str = "generation",
        allow_empty: bool = False,
    ) -> str:
        """
        Generate a chat completion with automatic retry logic.

        Args:
            messages: List of message dicts with "role" and "content" keys
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate (None = model default)
            stage: Pipeline stage name for usage tracking
            allow_empty: Accept an empty completion (used by warm-up)

        Returns:
            Generated text content from the assistant

        Raises:
            RuntimeError: If all retry attempts fail
        """
        last_error: Optional[Exception] = None

        for attempt in range(1, self.retries + 1):
            try:
                response = await asyncio.wait_for(
                    self.client.chat.completions.create(
                        model=self.model,
                        messages=messages,
                        temperature=temperature,
                        max_tokens=max_tokens,
                    ),
                    timeout=self.timeout,
                )

                content = (
                    response.choices[0].message.content
                    if response and response.choices
                    else ""
                ) or ""

                if self.token_tracker and getattr(response, "usage", None):
                    self.token_tracker.add_llm_usage(
                        response.usage.prompt_tokens or 0,
                        response.usage.completion_tokens or 0,
                        stage=stage,
                    )

                if not content.strip() and not allow_empty:
                    raise ValueError("LLM returned empty content")

                return content.strip()

            except APIConnectionError as e:
                last_error = e
                logging.error(
                    f"Inference server connection failed (attempt {attempt}/{self.retries}): {e}"
                )
                await asyncio.sleep(0.6 * attempt)

            except RateLimitError as e:
                last_error = e
                logging.warning(
                    f"Inference server rate limited (attempt {attempt}/{self.retries}): {e}"
                )
                await asyncio.sleep(1.5 * attempt)

            except APIStatusError as e:
                last_error = e
                logging.warning(
                    f"Inference server status error (attempt {attempt}/{self.retries}): {e}"
                )
                await asyncio.sleep(0.8 * attempt)

            except Exception as e:
                last_error = e
                logging.warning(
                    f"Unexpected LLM error (attempt {attempt}/{self.retries}): {e}"
                )
                await asyncio.sleep(0.6 * attempt)

        raise RuntimeError(
            f"LLM generation failed after {self.retries} retries"
        ) from last_error

    async def close(self) -> None:
        """
        Close the underlying HTTP client.

        Safe to call multiple times.
        """
        try:
            await self.client.close()
        except Exception as e:
            logging.debug(f"Error closing LLM client: {e}")

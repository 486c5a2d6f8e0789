# implementations/openai_embedder.py

"""
OpenAI-compatible embedding provider implementation.

This module implements the EmbeddingProvider interface against any server
exposing the OpenAI embeddings API (Ollama, llama.cpp server, vLLM, LM Studio).
"""

import logging
from typing import List
from openai import AsyncOpenAI, APIConnectionError, APITimeoutError, RateLimitError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from ..abstractions.embedding_provider import EmbeddingProvider, EmbeddingMatrix


class OpenAICompatibleEmbedder(EmbeddingProvider):
    """
    EmbeddingProvider backed by an OpenAI-compatible embeddings endpoint.

    Transient failures (connection drops, timeouts, rate limits) are retried
    with exponential backoff; anything else is raised immediately.

    Example:
        >>> embedder = OpenAICompatibleEmbedder(
        ...     base_url="http://localhost:11434/v1",
        ...     api_key="local",
        ...     model="nomic-embed-text",
        ... )
        >>> embeddings = await embedder.embed(["hello", "world"])
        >>> await embedder.close()
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        timeout: float = 60.0,
    ):
        """
        Initialize the embedder.

        Args:
            base_url: Base URL of the OpenAI-compatible server
            api_key: API key (local servers accept any non-empty value)
            model: Embedding model name
            timeout: Timeout in seconds for API calls
        """
        self.model = model

        self.client = AsyncOpenAI(
            base_url=base_url,
            api_key=api_key,
            timeout=timeout,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type((APIConnectionError, APITimeoutError, RateLimitError)),
        reraise=True,
    )
    async def embed(self, texts: List[str]) -> EmbeddingMatrix:
        """
        Generate embeddings for a batch of texts.

        The response is re-ordered by its `index` field, so the output always
        lines up with the input even if a server answers out of order.
        """
        if not texts:
            return []

        try:
            response = await self.client.embeddings.create(
                model=self.model,
                input=list(texts),
            )
            data = sorted(response.data, key=lambda d: d.index)
            embeddings = [d.embedding for d in data]

            logging.debug(f"Generated {len(embeddings)} embeddings with '{self.model}'")
            return embeddings

        except Exception as e:
            logging.error(f"Embedding generation failed: {e}")
            raise

    async def close(self) -> None:
        """
        Close the underlying HTTP client.

        Safe to call multiple times.
        """
        try:
            await self.client.close()
        except Exception as e:
            # Log but don't raise - cleanup should be silent
            logging.debug(f"Error closing embedder: {e}")

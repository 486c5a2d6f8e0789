# abstractions/llm_provider.py

"""
Abstract interface for Large Language Model services.

This module defines the inference capability the pipeline consumes: a one-time
initialization that reports progress, and chat completion from a message list.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Dict, Optional

# Receives a completion percentage in [0, 100]
ProgressCallback = Callable[[float], None]


class LLMProvider(ABC):
    """
    Abstract base class for Large Language Model services.

    Implementations must provide:
    1. initialize() to load / warm up the model, reporting progress
    2. generate() method to produce completions from message history
    3. close() method to cleanup resources
    """

    async def initialize(self, on_progress: Optional[ProgressCallback] = None) -> None:
        """
        Prepare the model for first use.

        Progress is advisory: callers display it, they cannot cancel through it.
        Providers with nothing to load just report completion.
        """
        if on_progress:
            on_progress(100.0)

    @abstractmethod
    async def generate(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        *,
        stage: str = "generation",
    ) -> str:
        """
        Generate a completion from a conversation history.

        Messages follow the standard chat format:
        [
            {"role": "system", "content": "You are a helpful assistant."},
            {"role": "user", "content": "What is RAG?"},
        ]

        Args:
            messages: List of message dictionaries with "role" and "content" keys
            temperature: Sampling temperature (0.0 = deterministic, 1.0 = creative)
            max_tokens: Maximum tokens to generate (None = use model default)
            stage: Pipeline stage name, used for usage accounting

        Returns:
            Generated text content from the assistant

        Raises:
            Exception: If generation fails (connection error, model error, invalid input, etc.)
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Cleanup resources (close connections, etc.).

        Should handle errors gracefully and not raise exceptions.
        """
        pass

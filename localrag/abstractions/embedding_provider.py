# abstractions/embedding_provider.py

"""
Abstract interface for embedding service providers.

This module defines the contract that all embedding providers must implement,
allowing the index to work with any embedding backend (Ollama, llama.cpp server,
vLLM, a hosted OpenAI-compatible API, a test double...).
"""

from abc import ABC, abstractmethod
from typing import List

# Type aliases for clarity
EmbeddingVector = List[float]   # Single embedding (e.g., [0.1, 0.2, ..., 0.9])
EmbeddingMatrix = List[EmbeddingVector] # Multiple embeddings (e.g., [[0.1, 0.2], [0.3, 0.4], ...]

class EmbeddingProvider(ABC):
    """
    Abstract base class for embedding generation services.

    Implementations must provide:
    1. embed() method to convert text into vector embeddings
    2. close() method to cleanup resources

    Vectors do not need to be normalised; the vector index normalises them
    before computing cosine similarity.
    """

    @abstractmethod
    async def embed(self, texts: List[str]) -> EmbeddingMatrix:

        """
        Generate embeddings for a list of text strings.

        Embeddings are returned in the same order as the input texts, and
        every vector produced by one provider has the same length.

        Args:
            texts: List of text strings to embed

        Returns:
            List of embedding vectors, one per input text

        Raises:
            Exception: If embedding generation fails (connection error, model not loaded, etc.)

        Example:
            >>> embedder = OpenAICompatibleEmbedder(...)
            >>> embeddings = await embedder.embed(["hello", "world"])
            >>> len(embeddings)  # Should equal len(texts)
            2
            >>> len(embeddings[0])  # Depends on model (e.g., 768 for nomic-embed-text)
            768
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Cleanup resources (close connections, free memory, etc.).

        Should handle errors gracefully and not raise exceptions.
        """
        pass

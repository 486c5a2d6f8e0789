# abstractions/vector_store_provider.py

"""
Abstract interface for vector index services.

This module defines the contract the ingestion path and the retrieval stage
rely on: append embedded chunks, and retrieve chunks for a query with
diversity-aware re-ranking.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..models.types import Chunk, SearchResult

class VectorStoreProvider(ABC):
    """
    Abstract base class for vector storage and retrieval.

    Implementations must provide:
    1. add_documents() to embed and store chunks (all-or-nothing)
    2. retrieve_with_scores() to select chunks for a query
    3. get_document_count() to get the number of indexed chunks
    4. close() to cleanup resources
    """

    @abstractmethod
    async def add_documents(self, chunks: Sequence[Chunk]) -> int:
        """
        Embed and append chunks to the index.

        Either every chunk is appended or none is: a failed embedding call
        must leave the index exactly as it was.

        Args:
            chunks: Chunks to index

        Returns:
            Number of chunks appended

        Raises:
            IngestionError: If embedding fails or produces inconsistent vectors
        """
        pass

    @abstractmethod
    async def retrieve_with_scores(
        self,
        query: str,
        k: int = 10,
        diversity_weight: float = 0.75,
        fetch_k: Optional[int] = None,
    ) -> List[SearchResult]:
        """
        Select up to k chunks for the query, best first.

        Args:
            query: Natural language query
            k: Maximum number of chunks to return
            diversity_weight: 1.0 = pure relevance, 0.0 = pure diversity
            fetch_k: Optional size of the relevance-ranked candidate pool

        Returns:
            Selected chunks with their relevance and selection scores.
            An empty index yields an empty list.

        Raises:
            SearchError: If the query cannot be embedded or compared
        """
        pass

    async def retrieve(
        self,
        query: str,
        k: int = 10,
        diversity_weight: float = 0.75,
        fetch_k: Optional[int] = None,
    ) -> List[Chunk]:
        """Same selection as retrieve_with_scores(), chunks only."""
        results = await self.retrieve_with_scores(
            query, k=k, diversity_weight=diversity_weight, fetch_k=fetch_k
        )
        return [r.chunk for r in results]

    @abstractmethod
    async def get_document_count(self) -> int:
        """
        Get the total number of chunks in the index.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Cleanup resources.

        Should handle errors gracefully and not raise exceptions.
        """
        pass

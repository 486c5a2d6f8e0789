# core/context_retriever.py

"""
RETRIEVE stage: fetch context chunks for the current query.
"""

import logging
from typing import Optional

from ..abstractions.vector_store_provider import VectorStoreProvider
from ..models import ConversationState, JsonDict, SearchError


class ContextRetriever:
    """
    RETRIEVE stage: Queries the vector index with the rephrased question
    (or the raw user message when rephrasing did not produce one).

    Dependencies:
    - VectorStoreProvider: in-memory index with diversity-aware ranking
    """

    def __init__(
        self,
        index: VectorStoreProvider,
        k: int = 10,
        diversity_weight: float = 0.75,
        fetch_k: Optional[int] = None,
    ):
        self.index = index
        self.k = k
        self.diversity_weight = diversity_weight
        self.fetch_k = fetch_k

    async def run(self, state: ConversationState) -> JsonDict:
        """
        Retrieve context for state.search_query.

        Returns:
            {"retrieved_context": [...]} in rank order; empty when the index is empty

        Raises:
            SearchError: If retrieval itself fails
        """
        query = state.search_query
        try:
            chunks = await self.index.retrieve(
                query,
                k=self.k,
                diversity_weight=self.diversity_weight,
                fetch_k=self.fetch_k,
            )
        except SearchError:
            raise
        except Exception as e:
            raise SearchError(f"Retrieval failed: {e}") from e

        logging.info(f"Retrieved {len(chunks)} chunks for query {query!r}")
        return {"retrieved_context": list(chunks)}

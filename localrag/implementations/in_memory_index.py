# implementations/in_memory_index.py

"""
In-memory vector index with diversity-aware retrieval.

The index lives for the lifetime of the process. Writes are serialized with
an asyncio lock and publish a new immutable snapshot; reads grab the current
snapshot once, so a reader sees either the index before an append or after
it, never a half-appended state.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..abstractions.embedding_provider import EmbeddingProvider
from ..abstractions.vector_store_provider import VectorStoreProvider
from ..models.exceptions import IngestionError, SearchError
from ..models.types import Chunk, EmbeddedChunk, SearchResult
from ..utils.batching_utils import batched
from ..utils.similarity_utils import cosine_scores, maximal_marginal_relevance, normalize_rows


@dataclass(frozen=True)
class _Snapshot:
    entries: Tuple[EmbeddedChunk, ...] = ()
    matrix: Optional[np.ndarray] = None  # normalised rows, aligned with entries

    @property
    def dimension(self) -> Optional[int]:
        return None if self.matrix is None else int(self.matrix.shape[1])


class InMemoryVectorIndex(VectorStoreProvider):
    """
    Append-only vector index held in process memory.

    Responsibilities:
    - Embed chunks through the EmbeddingProvider (batched)
    - Enforce a single dimensionality D across all entries
    - Rank entries for a query with maximal-marginal-relevance re-ranking

    Example:
        >>> index = InMemoryVectorIndex(embedder)
        >>> await index.add_documents(chunks)
        >>> context = await index.retrieve("What is covered?", k=10, diversity_weight=0.75)
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        batch_size: int = 16,
        dimension: Optional[int] = None,
    ):
        """
        Initialize an empty index.

        Args:
            embedder: Embedding provider used for chunks and queries
            batch_size: Number of chunks embedded per request
            dimension: Expected vector size; inferred from the first batch if None
        """
        self.embedder = embedder
        self.batch_size = batch_size
        self.expected_dimension = dimension
        self._snapshot = _Snapshot()
        self._write_lock = asyncio.Lock()

    @property
    def dimension(self) -> Optional[int]:
        return self._snapshot.dimension or self.expected_dimension

    async def _embed_chunks(self, chunks: Sequence[Chunk]) -> Tuple[List[List[float]], np.ndarray]:
        texts = [c.text for c in chunks]
        vectors: List[List[float]] = []
        try:
            for batch in batched(texts, self.batch_size):
                batch_vectors = await self.embedder.embed(list(batch))
                if len(batch_vectors) != len(batch):
                    raise IngestionError(
                        f"Embedding count mismatch: expected {len(batch)}, got {len(batch_vectors)}"
                    )
                vectors.extend(batch_vectors)
            rows = normalize_rows(vectors)
        except IngestionError:
            raise
        except Exception as e:
            logging.error(f"Embedding generation failed: {e}")
            raise IngestionError(f"Embedding generation failed: {e}") from e

        if rows.shape[1] == 0:
            raise IngestionError("Embedder returned zero-length vectors")
        return vectors, rows

    async def add_documents(self, chunks: Sequence[Chunk]) -> int:
        """
        Embed and append chunks; all-or-nothing.

        Embedding happens before the write lock is taken, so a slow batch
        does not block readers. Nothing is published unless every chunk was
        embedded and every vector has the index dimensionality.
        """
        chunks = list(chunks)
        if not chunks:
            return 0

        vectors, rows = await self._embed_chunks(chunks)

        async with self._write_lock:
            current = self._snapshot
            expected = current.dimension or self.expected_dimension
            if expected is not None and rows.shape[1] != expected:
                raise IngestionError(
                    f"Embedding dimension mismatch: index uses {expected}, got {rows.shape[1]}"
                )

            new_entries = tuple(
                EmbeddedChunk(chunk=c, vector=tuple(float(x) for x in v))
                for c, v in zip(chunks, vectors)
            )
            matrix = rows if current.matrix is None else np.vstack([current.matrix, rows])
            self._snapshot = _Snapshot(entries=current.entries + new_entries, matrix=matrix)

        logging.info(f"Indexed {len(chunks)} chunks (total {len(self._snapshot.entries)})")
        return len(chunks)

    async def retrieve_with_scores(
        self,
        query: str,
        k: int = 10,
        diversity_weight: float = 0.75,
        fetch_k: Optional[int] = None,
    ) -> List[SearchResult]:
        """
        Embed the query and select up to k chunks with MMR re-ranking.

        Returns [] for an empty index without calling the embedder; raises
        SearchError when the query cannot be embedded.
        """
        if not 0.0 <= diversity_weight <= 1.0:
            raise ValueError(f"diversity_weight must be within [0, 1], got {diversity_weight}")

        snapshot = self._snapshot
        if not snapshot.entries or k <= 0:
            logging.info("Vector index is empty, no context to retrieve")
            return []

        try:
            query_vectors = await self.embedder.embed([query])
            if len(query_vectors) != 1:
                raise SearchError(f"Expected one query embedding, got {len(query_vectors)}")
            query_vector = normalize_rows(query_vectors)[0]
        except SearchError:
            raise
        except Exception as e:
            logging.error(f"Query embedding failed: {e}")
            raise SearchError(f"Query embedding failed: {e}") from e

        if query_vector.shape[0] != snapshot.dimension:
            raise SearchError(
                f"Query dimension {query_vector.shape[0]} does not match index dimension {snapshot.dimension}"
            )

        relevance = cosine_scores(snapshot.matrix, query_vector)
        picks = maximal_marginal_relevance(
            relevance,
            snapshot.matrix,
            k=k,
            diversity_weight=diversity_weight,
            fetch_k=fetch_k,
        )

        results = [
            SearchResult(
                chunk=snapshot.entries[i].chunk,
                relevance=float(relevance[i]),
                score=score,
            )
            for i, score in picks
        ]
        logging.debug(
            f"Retrieved {len(results)} chunks: "
            + ", ".join(f"{r.chunk.document_id}@{r.chunk.start_offset} ({r.relevance:.3f})" for r in results)
        )
        return results

    async def get_document_count(self) -> int:
        return len(self._snapshot.entries)

    async def close(self) -> None:
        # The embedder is shared with the pipeline, which closes it
        logging.debug("In-memory index closed")

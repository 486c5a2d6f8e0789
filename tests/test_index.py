"""Unit tests for the in-memory vector index."""

import asyncio

import pytest

from conftest import KeywordEmbedder
from localrag.implementations import InMemoryVectorIndex
from localrag.models import Chunk, IngestionError, SearchError
from localrag.utils import chunk_text


def make_chunks(*texts):
    return [Chunk(text=t, start_offset=0, length=len(t), document_id=f"doc-{i}") for i, t in enumerate(texts)]


CHUNKS = make_chunks(
    "The cat sat next to the dog.",
    "The car engine needs oil.",
    "The contract sets the payment terms.",
    "A river flows past a tree.",
)


class TestInMemoryVectorIndex:
    @pytest.mark.asyncio
    async def test_empty_index_returns_nothing_without_embedding(self, embedder):
        index = InMemoryVectorIndex(embedder)

        results = await index.retrieve("anything about a cat", k=5)

        assert results == []
        assert embedder.calls == []

    @pytest.mark.asyncio
    async def test_most_relevant_chunk_first(self, embedder):
        index = InMemoryVectorIndex(embedder)
        await index.add_documents(CHUNKS)

        results = await index.retrieve_with_scores("what is in the contract about payment", k=2, diversity_weight=1.0)

        assert results[0].chunk.document_id == "doc-2"
        assert results[0].relevance >= results[1].relevance

    @pytest.mark.asyncio
    async def test_respects_k(self, embedder):
        index = InMemoryVectorIndex(embedder)
        await index.add_documents(CHUNKS)

        assert len(await index.retrieve("cat", k=3)) == 3
        assert len(await index.retrieve("cat", k=10)) == len(CHUNKS)
        assert await index.retrieve("cat", k=0) == []

    @pytest.mark.asyncio
    async def test_embeds_in_batches(self, embedder):
        index = InMemoryVectorIndex(embedder, batch_size=3)

        added = await index.add_documents(CHUNKS)

        assert added == 4
        assert [len(call) for call in embedder.calls] == [3, 1]
        assert await index.get_document_count() == 4

    @pytest.mark.asyncio
    async def test_failed_batch_leaves_index_unchanged(self):
        embedder = KeywordEmbedder(fail_on_calls={2})
        index = InMemoryVectorIndex(embedder, batch_size=2)

        with pytest.raises(IngestionError):
            await index.add_documents(CHUNKS)

        assert await index.get_document_count() == 0
        # later appends still work
        assert await index.add_documents(CHUNKS[:1]) == 1
        assert await index.get_document_count() == 1

    @pytest.mark.asyncio
    async def test_embedding_count_mismatch(self):
        index = InMemoryVectorIndex(KeywordEmbedder(short_by=1))

        with pytest.raises(IngestionError, match="count mismatch"):
            await index.add_documents(CHUNKS)

        assert await index.get_document_count() == 0

    @pytest.mark.asyncio
    async def test_dimension_mismatch(self, embedder):
        index = InMemoryVectorIndex(embedder, dimension=3)

        with pytest.raises(IngestionError, match="dimension"):
            await index.add_documents(CHUNKS)

        assert index.dimension == 3

    @pytest.mark.asyncio
    async def test_query_embedding_failure_raises_search_error(self):
        embedder = KeywordEmbedder(fail_on_calls={2})
        index = InMemoryVectorIndex(embedder)
        await index.add_documents(CHUNKS)

        with pytest.raises(SearchError):
            await index.retrieve("cat")

    @pytest.mark.asyncio
    async def test_rejects_invalid_diversity_weight(self, embedder):
        index = InMemoryVectorIndex(embedder)

        with pytest.raises(ValueError):
            await index.retrieve("cat", diversity_weight=2.0)

    @pytest.mark.asyncio
    async def test_diversity_skips_duplicate_chunks(self, embedder):
        chunks = make_chunks(
            "cat cat dog",
            "cat cat dog",
            "cat tree",
        )
        index = InMemoryVectorIndex(embedder)
        await index.add_documents(chunks)

        relevant = await index.retrieve("cat dog", k=2, diversity_weight=1.0)
        diverse = await index.retrieve("cat dog", k=2, diversity_weight=0.3)

        assert [c.document_id for c in relevant] == ["doc-0", "doc-1"]
        assert [c.document_id for c in diverse] == ["doc-0", "doc-2"]

    @pytest.mark.asyncio
    async def test_reader_never_sees_partial_append(self):
        embedder = KeywordEmbedder(delay=0.01)
        index = InMemoryVectorIndex(embedder, batch_size=1)
        chunks = chunk_text("cat and dog " * 100, chunk_size=60, overlap=10)

        async def read_repeatedly():
            seen = set()
            for _ in range(20):
                seen.add(len(await index.retrieve("cat", k=1000)))
                await asyncio.sleep(0.005)
            return seen

        _, seen = await asyncio.gather(index.add_documents(chunks), read_repeatedly())

        assert seen <= {0, len(chunks)}


class LookupEmbedder(KeywordEmbedder):
    """Embeds texts through a fixed text -> vector table."""

    def __init__(self, table):
        super().__init__()
        self.table = table

    def vector(self, text):
        return self.table[text]


class TestRetrievalDiversity:
    @pytest.mark.asyncio
    async def test_mean_relevance_does_not_drop_as_weight_rises(self):
        table = {
            "query": [1.0, 0.0, 0.0, 0.0],
            "near duplicate one": [1.0, 0.05, 0.0, 0.0],
            "near duplicate two": [1.0, 0.0, 0.3, 0.0],
            "related": [0.6, 0.8, 0.0, 0.0],
            "loosely related": [0.3, 0.0, 0.0, 0.954],
            "unrelated": [0.0, 0.0, 0.0, 1.0],
        }
        index = InMemoryVectorIndex(LookupEmbedder(table))
        await index.add_documents(make_chunks(*[t for t in table if t != "query"]))

        means = []
        for weight in (0.0, 0.25, 0.5, 0.75, 1.0):
            results = await index.retrieve_with_scores("query", k=2, diversity_weight=weight)
            means.append(sum(r.relevance for r in results) / len(results))

        assert all(a <= b + 1e-6 for a, b in zip(means, means[1:]))
        assert means[0] < means[-1]

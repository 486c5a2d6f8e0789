"""Unit tests for character chunking."""

import pytest

from localrag.models import ChunkingConfig, Document
from localrag.utils import chunk_document, chunk_text


PROSE = "\n\n".join(
    " ".join(f"Sentence {p}.{s} talks about topic {s % 7} in some detail." for s in range(12))
    for p in range(8)
)


def reassemble(chunks, overlap):
    return chunks[0].text + "".join(c.text[overlap:] for c in chunks[1:])


class TestChunkText:
    def test_long_run_without_separators(self):
        """1200 characters with no boundaries: hard cuts at 500 and 1000."""
        chunks = chunk_text("A" * 1200, chunk_size=500, overlap=50)

        assert [c.length for c in chunks] == [500, 550, 250]
        assert [c.start_offset for c in chunks] == [0, 450, 950]
        assert all(c.length <= 550 for c in chunks)

    @pytest.mark.parametrize(
        "chunk_size,overlap",
        [(500, 50), (120, 0), (80, 30), (10, 8)],
    )
    def test_invariants_on_prose(self, chunk_size, overlap):
        chunks = chunk_text(PROSE, chunk_size=chunk_size, overlap=overlap)

        assert reassemble(chunks, overlap) == PROSE
        assert all(c.length <= chunk_size + overlap for c in chunks)
        for prev, nxt in zip(chunks, chunks[1:]):
            if overlap:
                assert prev.text[-overlap:] == nxt.text[:overlap]
            assert nxt.start_offset == prev.end_offset - overlap
        for c in chunks:
            assert PROSE[c.start_offset:c.end_offset] == c.text

    def test_prefers_paragraph_break(self):
        text = "a" * 300 + "\n\n" + "b" * 400

        chunks = chunk_text(text, chunk_size=500, overlap=50)

        assert chunks[0].text == "a" * 300 + "\n\n"
        assert chunks[1].text.startswith("a" * 48 + "\n\n")

    def test_ignores_separator_too_close_to_start(self):
        text = "a" * 10 + "\n\n" + "b" * 700

        chunks = chunk_text(text, chunk_size=500, overlap=50)

        # a break in the first half would give a tiny first chunk
        assert chunks[0].length == 500

    def test_prefers_sentence_over_word(self):
        text = ("word " * 60) + "End of sentence. " + ("tail " * 60)

        chunks = chunk_text(text, chunk_size=400, overlap=20)

        assert chunks[0].text.endswith("End of sentence. ")

    def test_empty_text(self):
        assert chunk_text("", chunk_size=500, overlap=50) == []

    def test_short_text_is_single_chunk(self):
        chunks = chunk_text("tiny document", chunk_size=500, overlap=50)

        assert len(chunks) == 1
        assert chunks[0].text == "tiny document"
        assert chunks[0].start_offset == 0

    @pytest.mark.parametrize(
        "chunk_size,overlap",
        [(0, 0), (-5, 0), (100, -1), (100, 100), (100, 150)],
    )
    def test_invalid_parameters(self, chunk_size, overlap):
        with pytest.raises(ValueError):
            chunk_text("some text", chunk_size=chunk_size, overlap=overlap)


class TestChunkDocument:
    def test_stamps_provenance(self):
        document = Document(id="handbook-p3", text=PROSE, metadata={"page": 3, "source": "handbook"})

        chunks = chunk_document(document, ChunkingConfig(chunk_size=200, overlap=20))

        assert len(chunks) > 1
        assert {c.document_id for c in chunks} == {"handbook-p3"}
        assert all(c.metadata == {"page": 3, "source": "handbook"} for c in chunks)

    def test_metadata_is_copied(self):
        document = Document(id="d", text="x" * 50, metadata={"page": 1})

        chunks = chunk_document(document)
        chunks[0].metadata["page"] = 99

        assert document.metadata == {"page": 1}

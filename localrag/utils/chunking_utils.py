# utils/chunking_utils.py

"""
Text chunking utilities for document ingestion.

Text is cut into consecutive, non-overlapping bodies of at most chunk_size
characters. Each body ends after the strongest separator available in the
second half of its window (paragraph, line, sentence, word), falling back to
a hard cut at chunk_size. Every chunk after the first is the `overlap`
characters that precede its body followed by the body itself, so:

- chunks are at most chunk_size + overlap characters long
- dropping the first `overlap` characters of every chunk but the first and
  concatenating gives back the original text
- the tail of one chunk equals the head of the next
"""

from typing import List, Optional, Sequence

from ..models.types import Chunk, ChunkingConfig, Document

# Strongest boundary first; "" means a raw character cut
DEFAULT_SEPARATORS = ("\n\n", "\n", ". ", " ", "")


def _find_body_end(
    text: str,
    start: int,
    chunk_size: int,
    overlap: int,
    separators: Sequence[str],
) -> int:
    """
    Return the exclusive end offset of the body starting at `start`.

    Separators are only accepted in the second half of the window (and never
    before `overlap` characters) so that a paragraph break near the start does
    not produce a tiny body, and the next chunk always has a full overlap.
    """
    limit = start + chunk_size
    if limit >= len(text):
        return len(text)

    earliest = start + max(1, chunk_size // 2, overlap)
    for sep in separators:
        if not sep:
            break
        idx = text.rfind(sep, earliest, limit)
        if idx != -1:
            # keep the separator at the end of this body
            return idx + len(sep)
    return limit


def chunk_text(
    text: str,
    chunk_size: int = 500,
    overlap: int = 50,
    *,
    document_id: str = "",
    metadata: Optional[dict] = None,
    separators: Sequence[str] = DEFAULT_SEPARATORS,
) -> List[Chunk]:
    """
    Split text into overlapping chunks, preferring natural boundaries.

    Args:
        text: Input text to chunk
        chunk_size: Maximum characters per chunk body
        overlap: Characters repeated from the previous chunk
        document_id: Source document id stamped on every chunk
        metadata: Source metadata copied onto every chunk
        separators: Boundary preference order; "" (raw cut) is implied last

    Returns:
        List of Chunk objects ordered by offset (empty list if input is empty)

    Raises:
        ValueError: If chunk_size <= 0, overlap < 0 or overlap >= chunk_size

    Example:
        >>> chunks = chunk_text("A" * 1200, chunk_size=500, overlap=50)
        >>> [c.length for c in chunks]
        [500, 550, 250]
        >>> chunks[0].text[-50:] == chunks[1].text[:50]
        True
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0:
        raise ValueError(f"overlap must be non-negative, got {overlap}")
    if overlap >= chunk_size:
        raise ValueError(
            f"overlap ({overlap}) must be smaller than chunk_size ({chunk_size})"
        )

    if not text:
        return []

    meta = dict(metadata or {})
    chunks: List[Chunk] = []
    n = len(text)
    body_start = 0

    while body_start < n:
        body_end = _find_body_end(text, body_start, chunk_size, overlap, separators)

        # The first chunk has nothing before it to repeat
        start = max(0, body_start - overlap)
        piece = text[start:body_end]
        chunks.append(
            Chunk(
                text=piece,
                start_offset=start,
                length=len(piece),
                document_id=document_id,
                metadata=dict(meta),
            )
        )
        body_start = body_end

    return chunks


def chunk_document(document: Document, config: Optional[ChunkingConfig] = None) -> List[Chunk]:
    """Chunk a Document, stamping its id and metadata on every chunk."""
    config = config or ChunkingConfig()
    return chunk_text(
        document.text,
        chunk_size=config.chunk_size,
        overlap=config.overlap,
        document_id=document.id,
        metadata=document.metadata,
    )

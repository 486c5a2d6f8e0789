# models/types.py

"""
Type definitions and result models for the RAG system.

This module contains data classes representing:
- Configuration objects (ChunkingConfig, RetrievalConfig)
- Documents and their chunks (Document, Chunk, EmbeddedChunk, ExtractedSegment)
- Conversation state flowing through the pipeline (Message, ConversationState)
- Operation results (IngestionResult, SearchResult)
- Type aliases (JsonDict, Role)
"""

from dataclasses import dataclass, field, replace
from typing import List, Dict, Any, Optional, Literal, Tuple

# Type alias for JSON-compatible dictionaries
JsonDict = Dict[str, Any]

Role = Literal["user", "assistant", "system"]


@dataclass
class ChunkingConfig:
    """
    Configuration for text chunking strategy.

    Attributes:
        chunk_size: Maximum characters in the body of a chunk
        overlap: Number of characters repeated from the previous chunk
                 (helps maintain context across chunk boundaries)

    Example:
        >>> config = ChunkingConfig(chunk_size=500, overlap=50)
    """
    chunk_size: int = 500
    overlap: int = 50


@dataclass
class RetrievalConfig:
    """
    Configuration for diversity-aware retrieval.

    Attributes:
        k: Number of chunks handed to the generation stage
        diversity_weight: Trade-off between relevance and novelty
                          (1.0 = pure relevance, 0.0 = pure diversity)
        fetch_k: Optional cap on the candidate pool (top-N by relevance)
                 considered by the re-ranker; None means the whole index
    """
    k: int = 10
    diversity_weight: float = 0.75
    fetch_k: Optional[int] = None


@dataclass(frozen=True)
class Document:
    """A unit of source text (one PDF page, one pasted text) with provenance metadata."""
    id: str
    text: str
    metadata: JsonDict = field(default_factory=dict)


@dataclass(frozen=True)
class Chunk:
    """
    A bounded substring of a Document prepared for embedding.

    Attributes:
        text: Chunk content (overlap prefix + body)
        start_offset: Offset of text[0] inside the source document text
        length: len(text)
        document_id: Id of the source Document (provenance only, not ownership)
        metadata: Copy of the source Document metadata (e.g. page number)
    """
    text: str
    start_offset: int
    length: int
    document_id: str = ""
    metadata: JsonDict = field(default_factory=dict)

    @property
    def end_offset(self) -> int:
        return self.start_offset + self.length


@dataclass(frozen=True)
class EmbeddedChunk:
    chunk: Chunk
    vector: Tuple[float, ...]


@dataclass(frozen=True)
class ExtractedSegment:
    """Text extracted from one page of a PDF, with page metadata."""
    text: str
    metadata: JsonDict = field(default_factory=dict)


@dataclass
class SearchResult:
    """
    A chunk selected by the vector index.

    Attributes:
        chunk: The selected chunk
        relevance: Cosine similarity between the chunk and the query
        score: Diversity-aware selection score when the chunk was picked
    """
    chunk: Chunk
    relevance: float
    score: float


@dataclass(frozen=True)
class Message:
    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ConversationState:
    """
    State carried through one pipeline invocation.

    Stages never mutate a state; they return a partial update which the
    orchestrator merges with apply(). The retrieved_context list is kept in
    retrieval-rank order (best first).
    """
    messages: List[Message] = field(default_factory=list)
    rephrased_query: Optional[str] = None
    retrieved_context: List[Chunk] = field(default_factory=list)

    @property
    def latest_user_message(self) -> str:
        """Content of the most recent user message ("" if there is none)."""
        for message in reversed(self.messages):
            if message.role == "user":
                return message.content
        return ""

    @property
    def history(self) -> List[Message]:
        """Messages before the latest user message (all of them if there is none)."""
        for index in range(len(self.messages) - 1, -1, -1):
            if self.messages[index].role == "user":
                return list(self.messages[:index])
        return list(self.messages)

    @property
    def search_query(self) -> str:
        """The rephrased query when available, else the raw user message."""
        return self.rephrased_query or self.latest_user_message

    def apply(self, update: JsonDict) -> "ConversationState":
        unknown = set(update) - {"messages", "rephrased_query", "retrieved_context"}
        if unknown:
            raise KeyError(f"Unknown state fields: {sorted(unknown)}")
        return replace(self, **update)


@dataclass
class IngestionResult:
    """
    Result object returned by document ingestion operations.

    Attributes:
        success: True if ingestion completed without critical errors
        documents_processed: Number of documents (pages) read from the source
        chunks_created: Total number of chunks generated from documents
        chunks_indexed: Number of chunks appended to the vector index
        errors: List of error messages (empty if success=True)
        duration_seconds: Total time taken for the ingestion operation

    Example:
        >>> result = await ingester.ingest_pdf(pdf_bytes, name="handbook")
        >>> if result.success:
        ...     print(f"Indexed {result.chunks_indexed} chunks in {result.duration_seconds:.2f}s")
        ... else:
        ...     print(f"Errors: {result.errors}")
    """
    success: bool
    documents_processed: int = 0
    chunks_created: int = 0
    chunks_indexed: int = 0
    errors: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    def __str__(self) -> str:
        """Human-readable summary of ingestion result."""
        if self.success:
            return (f"Ingestion succeeded: {self.documents_processed} documents processed, "
                    f"{self.chunks_created} chunks created, "
                    f"{self.chunks_indexed} chunks indexed in {self.duration_seconds:.2f}s.")
        else:
            return f"Ingestion failed: {', '.join(self.errors)}"

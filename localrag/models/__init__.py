# models/__init__.py

"""
Models package for RAG system data structures.

Exports all configuration objects, result types, exceptions and wire models
used throughout the ingest and query paths.
"""
from .env import env_settings, Settings
from .config import RAGConfig

from .types import (
    ChunkingConfig,
    RetrievalConfig,
    Document,
    Chunk,
    EmbeddedChunk,
    ExtractedSegment,
    Message,
    ConversationState,
    IngestionResult,
    SearchResult,
    JsonDict,
)
from .exceptions import (
    PipelineError,
    RephraseError,
    SearchError,
    GenerationError,
    IngestionError,
    ExtractionError,
    ProtocolError,
)
__all__ = [
    "ChunkingConfig",
    "RetrievalConfig",
    "Document",
    "Chunk",
    "EmbeddedChunk",
    "ExtractedSegment",
    "Message",
    "ConversationState",
    "IngestionResult",
    "SearchResult",
    "JsonDict",
    "RAGConfig",
    "Settings",
    "env_settings",
    "PipelineError",
    "RephraseError",
    "SearchError",
    "GenerationError",
    "IngestionError",
    "ExtractionError",
    "ProtocolError",
]

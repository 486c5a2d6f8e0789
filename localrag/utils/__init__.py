# utils/__init__.py

"""
Utility functions for the RAG system (Facade pattern).

This module provides a clean import interface for all utility functions,
organized by domain (chunking, batching, similarity, token tracking).
"""

from .chunking_utils import chunk_text, chunk_document, DEFAULT_SEPARATORS
from .batching_utils import batched
from .similarity_utils import normalize_rows, cosine_scores, maximal_marginal_relevance
from .tokens_utils import count_tokens, TokenTracker, TokenUsage
from .tracking_decorators import TrackedEmbeddingProvider

__all__ = [
    "chunk_text",
    "chunk_document",
    "DEFAULT_SEPARATORS",
    "batched",
    "normalize_rows",
    "cosine_scores",
    "maximal_marginal_relevance",
    "count_tokens",
    "TokenTracker",
    "TokenUsage",
    "TrackedEmbeddingProvider",
]

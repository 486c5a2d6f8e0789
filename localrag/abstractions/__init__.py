# abstractions/__init__.py

"""
Abstract provider interfaces.

The pipeline only depends on these contracts; concrete implementations live
in the implementations package.
"""

from .embedding_provider import EmbeddingProvider, EmbeddingMatrix, EmbeddingVector
from .llm_provider import LLMProvider, ProgressCallback
from .vector_store_provider import VectorStoreProvider
from .pdf_extractor import PdfExtractor

__all__ = [
    "EmbeddingProvider",
    "EmbeddingMatrix",
    "EmbeddingVector",
    "LLMProvider",
    "ProgressCallback",
    "VectorStoreProvider",
    "PdfExtractor",
]

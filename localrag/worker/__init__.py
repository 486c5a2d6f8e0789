# worker/__init__.py

"""
Message-protocol boundary in front of the RAG pipeline.
"""

from .rag_worker import EMBED_SUCCESS_TEXT, RAGWorker

__all__ = [
    "EMBED_SUCCESS_TEXT",
    "RAGWorker",
]

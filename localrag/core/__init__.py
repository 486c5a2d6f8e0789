# core/__init__.py

"""
Core modules for the RAG system.

Ingest path:
- DocumentIngester: EXTRACT -> CHUNK -> INDEX

Query path stages (driven by pipeline.state_machine.PipelineOrchestrator):
- QueryRephraser: REPHRASE stage
- ContextRetriever: RETRIEVE stage
- AnswerGenerator: ANSWER stage
"""

from .document_ingester import DocumentIngester
from .query_rephraser import QueryRephraser
from .context_retriever import ContextRetriever
from .answer_generator import AnswerGenerator

__all__ = [
    "DocumentIngester",
    "QueryRephraser",
    "ContextRetriever",
    "AnswerGenerator",
]

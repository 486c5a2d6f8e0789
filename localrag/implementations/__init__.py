# implementations/__init__.py

"""
Concrete implementations of the abstract providers.

- OpenAI-compatible embedder and chat model (any local server speaking that API)
- In-memory vector index with diversity-aware retrieval
- pypdf-based PDF text extraction
"""


from .openai_embedder import OpenAICompatibleEmbedder
from .openai_llm import OpenAICompatibleLLM
from .in_memory_index import InMemoryVectorIndex
from .pypdf_extractor import PypdfExtractor

__all__ = [
    "OpenAICompatibleEmbedder",
    "OpenAICompatibleLLM",
    "InMemoryVectorIndex",
    "PypdfExtractor",
]

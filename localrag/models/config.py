# models/config.py

"""
Configuration models for the RAG system.

This module defines the central configuration object that holds all settings
for the local inference server and pipeline behavior.
"""

from dataclasses import dataclass, field
from .types import ChunkingConfig, RetrievalConfig


@dataclass
class RAGConfig:
    """
    Centralized configuration for the RAG pipeline.

    This configuration object is passed to the RAGPipeline and controls the
    ingest path (extract, chunk, embed, index) and the query path
    (rephrase, retrieve, generate).

    Inference Server Settings:
        llm_base_url: Base URL of an OpenAI-compatible server (Ollama, llama.cpp, vLLM...)
        llm_api_key: API key sent to the server (local servers ignore it)
        chat_model: Model used for rephrasing and answer generation
        embedding_model: Model used for chunk and query embeddings

    Pipeline Settings:
        batch_size: Number of chunks to embed in a single API call
        chunking: ChunkingConfig object controlling text splitting behavior
        retrieval: RetrievalConfig object controlling k / diversity_weight
        temperature: Sampling temperature for generation
        llm_timeout: Timeout in seconds for LLM API calls
        llm_retries: Number of retry attempts for failed LLM calls
    """
    llm_base_url: str = "http://localhost:11434/v1"
    llm_api_key: str = "local"
    chat_model: str = "llama3.2:3b"
    embedding_model: str = "nomic-embed-text"

    # Optional LLM settings (with defaults)
    llm_timeout: float = 120.0  # seconds
    llm_retries: int = 3
    temperature: float = 0.7

    # Optional pipeline settings (with defaults)
    batch_size: int = 16
    chunking: ChunkingConfig = field(default_factory=ChunkingConfig)
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)

    @classmethod
    def from_settings(cls, settings) -> "RAGConfig":
        """Build a RAGConfig from a models.env.Settings instance."""
        return cls(
            llm_base_url=str(settings.llm_base_url),
            llm_api_key=settings.llm_api_key,
            chat_model=settings.chat_model,
            embedding_model=settings.embedding_model,
            llm_timeout=settings.llm_timeout,
            llm_retries=settings.llm_retries,
            temperature=settings.temperature,
            batch_size=settings.embedding_batch_size,
            chunking=ChunkingConfig(
                chunk_size=settings.chunk_size,
                overlap=settings.chunk_overlap,
            ),
            retrieval=RetrievalConfig(
                k=settings.retrieval_k,
                diversity_weight=settings.diversity_weight,
            ),
        )

    def to_container_config(self) -> dict:
        """Flatten into the dict shape expected by di.container.Container.config."""
        return {
            "llm_base_url": self.llm_base_url,
            "llm_api_key": self.llm_api_key,
            "chat_model": self.chat_model,
            "embedding_model": self.embedding_model,
            "llm_timeout": self.llm_timeout,
            "llm_retries": self.llm_retries,
            "temperature": self.temperature,
            "batch_size": self.batch_size,
            "chunk_size": self.chunking.chunk_size,
            "chunk_overlap": self.chunking.overlap,
            "retrieval_k": self.retrieval.k,
            "diversity_weight": self.retrieval.diversity_weight,
            "fetch_k": self.retrieval.fetch_k,
        }

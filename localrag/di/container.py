# di/container.py

"""
Dependency injection container using dependency-injector.
"""

from dependency_injector import containers, providers
from ..models import ChunkingConfig, RAGConfig, RetrievalConfig
from ..implementations import (
    OpenAICompatibleEmbedder,
    OpenAICompatibleLLM,
    InMemoryVectorIndex,
    PypdfExtractor,
)
from ..utils import TokenTracker, TrackedEmbeddingProvider
from ..pipeline.rag_pipeline import RAGPipeline


class Container(containers.DeclarativeContainer):
    """Main DI container for the RAG pipeline.

    Load it with RAGConfig.to_container_config():
        >>> container = Container()
        >>> container.config.from_dict(RAGConfig.from_settings(env_settings).to_container_config())
        >>> pipeline = container.rag_pipeline()
    """

    config = providers.Configuration()

    # Token tracker (singleton)
    token_tracker = providers.Singleton(TokenTracker)

    rag_config = providers.Factory(
        RAGConfig,
        llm_base_url=config.llm_base_url,
        llm_api_key=config.llm_api_key,
        chat_model=config.chat_model,
        embedding_model=config.embedding_model,
        llm_timeout=config.llm_timeout,
        llm_retries=config.llm_retries,
        temperature=config.temperature,
        batch_size=config.batch_size,
        chunking=providers.Factory(
            ChunkingConfig,
            chunk_size=config.chunk_size,
            overlap=config.chunk_overlap,
        ),
        retrieval=providers.Factory(
            RetrievalConfig,
            k=config.retrieval_k,
            diversity_weight=config.diversity_weight,
            fetch_k=config.fetch_k,
        ),
    )

    # Embedding provider, wrapped for token accounting
    raw_embedder = providers.Singleton(
        OpenAICompatibleEmbedder,
        base_url=config.llm_base_url,
        api_key=config.llm_api_key,
        model=config.embedding_model,
        timeout=config.llm_timeout,
    )

    embedder = providers.Singleton(
        TrackedEmbeddingProvider,
        embedder=raw_embedder,
        tracker=token_tracker,
    )

    # LLM provider
    llm = providers.Singleton(
        OpenAICompatibleLLM,
        base_url=config.llm_base_url,
        api_key=config.llm_api_key,
        model=config.chat_model,
        timeout=config.llm_timeout,
        retries=config.llm_retries,
        token_tracker=token_tracker,
    )

    # PDF extractor
    extractor = providers.Factory(PypdfExtractor)

    # Vector index: one per process, shared by every reader and writer
    index = providers.Singleton(
        InMemoryVectorIndex,
        embedder=embedder,
        batch_size=config.batch_size,
    )

    rag_pipeline = providers.Singleton(
        RAGPipeline,
        config=rag_config,
        embedder=embedder,
        llm=llm,
        extractor=extractor,
        index=index,
        token_tracker=token_tracker,
    )

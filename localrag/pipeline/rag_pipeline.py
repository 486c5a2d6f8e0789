# pipeline/rag_pipeline.py

"""
RAGPipeline: owner of every long-lived collaborator.

This module wires the two paths of the system around shared providers:
- Ingest: extract -> chunk -> embed -> index
- Query: rephrase -> retrieve -> generate (see state_machine.PipelineOrchestrator)

One RAGPipeline is built at process start and handed explicitly to whoever
needs it (the worker, the runner, tests); nothing is captured from module
scope.
"""

import logging
from typing import List, Optional, Sequence

from ..abstractions import EmbeddingProvider, LLMProvider, PdfExtractor, ProgressCallback, VectorStoreProvider
from ..core import AnswerGenerator, ContextRetriever, DocumentIngester, QueryRephraser
from ..implementations import (
    InMemoryVectorIndex,
    OpenAICompatibleEmbedder,
    OpenAICompatibleLLM,
    PypdfExtractor,
)
from ..models import ConversationState, GenerationError, IngestionResult, Message, RAGConfig, SearchResult
from ..utils import TokenTracker, TrackedEmbeddingProvider
from .state_machine import PipelineOrchestrator, TransitionListener


class RAGPipeline:
    """
    Main entry point of the RAG system.

    Responsibilities:
    - Own providers (embedder, LLM, extractor) and the vector index
    - Provide high-level workflows (initialize, ingest_pdf, answer)
    - Expose direct access to retrieval for inspection

    Providers can be injected (tests, DI container); any that are omitted
    are built from the config.
    """

    def __init__(
        self,
        config: Optional[RAGConfig] = None,
        *,
        embedder: Optional[EmbeddingProvider] = None,
        llm: Optional[LLMProvider] = None,
        extractor: Optional[PdfExtractor] = None,
        index: Optional[VectorStoreProvider] = None,
        token_tracker: Optional[TokenTracker] = None,
    ):
        self.config = config or RAGConfig()
        self.token_tracker = token_tracker or TokenTracker()

        # Providers
        self.embedder = embedder or TrackedEmbeddingProvider(
            OpenAICompatibleEmbedder(
                base_url=self.config.llm_base_url,
                api_key=self.config.llm_api_key,
                model=self.config.embedding_model,
                timeout=self.config.llm_timeout,
            ),
            self.token_tracker,
        )
        self.llm = llm or OpenAICompatibleLLM(
            base_url=self.config.llm_base_url,
            api_key=self.config.llm_api_key,
            model=self.config.chat_model,
            timeout=self.config.llm_timeout,
            retries=self.config.llm_retries,
            token_tracker=self.token_tracker,
        )
        self.extractor = extractor or PypdfExtractor()
        self.index = index or InMemoryVectorIndex(
            self.embedder,
            batch_size=self.config.batch_size,
        )

        # Ingest path
        self.ingester = DocumentIngester(
            extractor=self.extractor,
            index=self.index,
            chunking_config=self.config.chunking,
        )

        # Query path stages
        self.rephraser = QueryRephraser(self.llm)
        self.retriever = ContextRetriever(
            self.index,
            k=self.config.retrieval.k,
            diversity_weight=self.config.retrieval.diversity_weight,
            fetch_k=self.config.retrieval.fetch_k,
        )
        self.generator = AnswerGenerator(self.llm, temperature=self.config.temperature)
        self.orchestrator = PipelineOrchestrator(
            rephrase=self.rephraser.run,
            retrieve=self.retriever.run,
            generate=self.generator.run,
        )

    async def __aenter__(self) -> "RAGPipeline":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Clean up all resources."""
        for client in [self.embedder, self.llm, self.extractor, self.index]:
            try:
                await client.close()
            except Exception as e:
                logging.debug(f"Error closing {type(client).__name__}: {e}")

    # === High-Level Workflows ===

    async def initialize(self, on_progress: Optional[ProgressCallback] = None) -> None:
        """Load / warm up the chat model, reporting percent progress."""
        await self.llm.initialize(on_progress)

    async def ingest_pdf(self, data: bytes, name: str = "document") -> IngestionResult:
        """EXTRACT + CHUNK + INDEX one PDF."""
        return await self.ingester.ingest_pdf(data, name=name)

    async def ingest_text(self, text: str, name: str = "document") -> IngestionResult:
        """CHUNK + INDEX already-extracted text."""
        return await self.ingester.ingest_text(text, name=name)

    async def run(
        self,
        messages: Sequence[Message],
        on_transition: Optional[TransitionListener] = None,
    ) -> ConversationState:
        """REPHRASE + RETRIEVE + GENERATE, returning the final state."""
        return await self.orchestrator.run(messages, on_transition=on_transition)

    async def answer(
        self,
        messages: Sequence[Message],
        on_transition: Optional[TransitionListener] = None,
    ) -> Message:
        """End-to-end Q&A: returns the assistant reply for the conversation."""
        final = await self.run(messages, on_transition=on_transition)
        reply = final.messages[-1] if final.messages else None
        if reply is None or reply.role != "assistant":
            raise GenerationError("No response generated from the model")
        return reply

    # === Direct Access ===

    async def search(self, query: str, k: Optional[int] = None) -> List[SearchResult]:
        return await self.index.retrieve_with_scores(
            query,
            k=k or self.config.retrieval.k,
            diversity_weight=self.config.retrieval.diversity_weight,
            fetch_k=self.config.retrieval.fetch_k,
        )

    def usage_report(self) -> str:
        return self.token_tracker.report()

# utils/tracking_decorators.py

"""Tracking decorators for monitoring provider usage."""

from typing import List
from ..abstractions import EmbeddingProvider, EmbeddingMatrix
from .tokens_utils import TokenTracker


class TrackedEmbeddingProvider(EmbeddingProvider):
    """Decorator that adds token tracking to any embedder"""
    def __init__(self, embedder: EmbeddingProvider, tracker: TokenTracker, stage: str = "embedding"):
        self.embedder = embedder
        self.tracker = tracker
        self.stage = stage

    async def embed(self, texts: List[str]) -> EmbeddingMatrix:
        vectors = await self.embedder.embed(texts)
        # Only successful calls count
        self.tracker.add_embedding_usage(list(texts), stage=self.stage)
        return vectors

    async def close(self):
        await self.embedder.close()

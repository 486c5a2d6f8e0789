"""Shared fakes and fixtures for the localrag test-suite."""

import asyncio
import re
from typing import Dict, List, Optional, Sequence, Union

import pytest

from localrag.abstractions import EmbeddingProvider, LLMProvider, PdfExtractor
from localrag.models import ExtractedSegment, Message, RAGConfig
from localrag.pipeline.rag_pipeline import RAGPipeline


VOCABULARY = ("cat", "dog", "car", "engine", "contract", "payment", "river", "tree")


class KeywordEmbedder(EmbeddingProvider):
    """Deterministic bag-of-words embedder over a tiny fixed vocabulary."""

    def __init__(
        self,
        vocabulary: Sequence[str] = VOCABULARY,
        fail_on_calls: Sequence[int] = (),
        short_by: int = 0,
        delay: float = 0.0,
    ):
        self.vocabulary = tuple(vocabulary)
        self.fail_on_calls = set(fail_on_calls)
        self.short_by = short_by
        self.delay = delay
        self.calls: List[List[str]] = []
        self.closed = False

    def vector(self, text: str) -> List[float]:
        words = re.findall(r"[a-z]+", text.lower())
        # small constant component keeps every vector non-zero
        return [float(words.count(w)) for w in self.vocabulary] + [0.1]

    async def embed(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        if self.delay:
            await asyncio.sleep(self.delay)
        if len(self.calls) in self.fail_on_calls:
            raise ConnectionError("embedding server unavailable")
        vectors = [self.vector(t) for t in texts]
        return vectors[: len(vectors) - self.short_by]

    async def close(self) -> None:
        self.closed = True


Reply = Union[str, Exception]


class ScriptedLLM(LLMProvider):
    """LLM double answering per stage and recording every prompt it receives."""

    def __init__(self, replies: Optional[Dict[str, Reply]] = None):
        self.replies: Dict[str, Reply] = {
            "rephrase": "rephrased question",
            "generation": "final answer",
        }
        self.replies.update(replies or {})
        self.calls: List[Dict] = []
        self.closed = False

    def prompts_for(self, stage: str) -> List[List[Dict[str, str]]]:
        return [c["messages"] for c in self.calls if c["stage"] == stage]

    async def generate(self, messages, temperature=0.7, max_tokens=None, *, stage="generation") -> str:
        self.calls.append({"messages": messages, "temperature": temperature, "stage": stage})
        reply = self.replies.get(stage, "")
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def close(self) -> None:
        self.closed = True


class StaticExtractor(PdfExtractor):
    """Returns preset page segments regardless of the payload."""

    def __init__(self, pages: Sequence[str] = (), error: Optional[Exception] = None):
        self.pages = list(pages)
        self.error = error
        self.payloads: List[bytes] = []

    async def extract(self, data: bytes) -> List[ExtractedSegment]:
        self.payloads.append(data)
        if self.error:
            raise self.error
        total = len(self.pages)
        return [
            ExtractedSegment(text=text, metadata={"page": n, "total_pages": total})
            for n, text in enumerate(self.pages, start=1)
        ]


def user(content: str) -> Message:
    return Message(role="user", content=content)


def assistant(content: str) -> Message:
    return Message(role="assistant", content=content)


@pytest.fixture
def embedder():
    return KeywordEmbedder()


@pytest.fixture
def llm():
    return ScriptedLLM()


@pytest.fixture
def extractor():
    return StaticExtractor(
        pages=[
            "The contract defines the payment schedule. Payment is due monthly.",
            "The river runs past the old tree near the engine shed.",
        ]
    )


@pytest.fixture
def pipeline(embedder, llm, extractor):
    return RAGPipeline(RAGConfig(), embedder=embedder, llm=llm, extractor=extractor)

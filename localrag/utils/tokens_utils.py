# utils/tokens_utils.py

"""
Token usage tracking for the embedding and chat calls of the pipeline.

Chat usage comes from the `usage` field of completion responses; embedding
servers rarely report it, so embedding tokens are estimated locally.
"""

import tiktoken
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Dict, Optional, List
import threading
import time


@dataclass
class TokenUsage:
    """Token counts for one pipeline stage (or the whole run)."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    embedding_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens + self.embedding_tokens


class TokenTracker:
    """Thread-safe per-stage token counter shared by the providers of one pipeline."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_stage: Dict[str, TokenUsage] = {}
        self._started = time.time()

    def _stage(self, stage: str) -> TokenUsage:
        return self._by_stage.setdefault(stage, TokenUsage())

    def add_embedding_usage(self, texts: List[str], stage: str = "embedding"):
        """Estimate and record the tokens of texts sent for embedding."""
        tokens = sum(count_tokens(text) for text in texts)
        with self._lock:
            self._stage(stage).embedding_tokens += tokens

    def add_llm_usage(self, prompt_tokens: int, completion_tokens: int, stage: str = "generation"):
        """Record the usage reported by a chat completion."""
        with self._lock:
            usage = self._stage(stage)
            usage.prompt_tokens += prompt_tokens
            usage.completion_tokens += completion_tokens

    def usage(self, stage: Optional[str] = None) -> TokenUsage:
        """Copy of the counts for one stage, or summed over all stages when stage is None."""
        with self._lock:
            if stage is not None:
                return replace(self._by_stage.get(stage, TokenUsage()))
            total = TokenUsage()
            for usage in self._by_stage.values():
                total.prompt_tokens += usage.prompt_tokens
                total.completion_tokens += usage.completion_tokens
                total.embedding_tokens += usage.embedding_tokens
            return total

    def stages(self) -> List[str]:
        with self._lock:
            return sorted(self._by_stage)

    def report(self) -> str:
        """Render totals and the per-stage breakdown."""
        total = self.usage()
        lines = [
            "\n" + "=" * 60,
            "TOKEN USAGE REPORT",
            "=" * 60,
            f"Elapsed Time: {time.time() - self._started:.2f}s",
            "",
            "Total Tokens:",
            f"   Total: {total.total_tokens:,}",
            f"   ├─ Prompt: {total.prompt_tokens:,}",
            f"   ├─ Completion: {total.completion_tokens:,}",
            f"   └─ Embedding: {total.embedding_tokens:,}",
        ]

        stages = self.stages()
        if stages:
            lines.extend(["", "Breakdown by Stage:", "-" * 60])
            for stage in stages:
                usage = self.usage(stage)
                lines.append(f"  {stage}: {usage.total_tokens:,}")

        lines.append("=" * 60)
        return "\n".join(lines)


@lru_cache(maxsize=1)
def _encoding() -> "tiktoken.Encoding":
    # Local models use their own tokenizers; cl100k_base is a close-enough estimate
    return tiktoken.get_encoding("cl100k_base")


def count_tokens(text: str) -> int:
    """Estimate the token count of text with tiktoken's cl100k_base encoding."""
    return len(_encoding().encode(text))

# core/query_rephraser.py

"""
REPHRASE stage: turn the latest user message into a standalone search query.
"""

import logging
from typing import Dict, List

from ..abstractions.llm_provider import LLMProvider
from ..models import ConversationState, JsonDict, RephraseError
from .prompts import REPHRASE_SYSTEM_PROMPT


class QueryRephraser:
    """
    REPHRASE stage: Restates the user's question for retrieval.

    Prior history is passed along so follow-up questions ("and what about
    the second one?") can be resolved into self-contained queries.

    Example:
        >>> rephraser = QueryRephraser(llm)
        >>> update = await rephraser.run(state)
        >>> update["rephrased_query"]
        'termination clauses of the 2023 supplier contract'
    """

    def __init__(self, llm: LLMProvider, temperature: float = 0.0):
        self.llm = llm
        self.temperature = temperature

    def build_messages(self, state: ConversationState) -> List[Dict[str, str]]:
        original = state.latest_user_message
        messages = [{"role": "system", "content": REPHRASE_SYSTEM_PROMPT}]
        messages.extend(m.to_dict() for m in state.history)
        messages.append({"role": "user", "content": original})
        return messages

    async def run(self, state: ConversationState) -> JsonDict:
        """
        Produce the rephrased query.

        Raises:
            RephraseError: If there is nothing to rephrase, the LLM fails,
                or it returns a blank answer
        """
        if not state.latest_user_message.strip():
            raise RephraseError("No user message to rephrase")

        try:
            rephrased = await self.llm.generate(
                self.build_messages(state),
                temperature=self.temperature,
                stage="rephrase",
            )
        except Exception as e:
            raise RephraseError(f"Query rephrasing failed: {e}") from e

        rephrased = (rephrased or "").strip()
        if not rephrased:
            raise RephraseError("Query rephrasing returned an empty answer")

        logging.info(f"Rephrased query: {rephrased!r}")
        return {"rephrased_query": rephrased}

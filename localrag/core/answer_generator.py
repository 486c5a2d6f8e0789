# core/answer_generator.py

"""
ANSWER stage: Generate responses using a Large Language Model (LLM).

This module handles the final step of the query path: building either the
context-grounded prompt (when chunks were retrieved) or the general
conversation prompt (when none were), and appending the model's reply to the
conversation.
"""

import logging
from typing import Dict, List, Optional
from ..abstractions.llm_provider import LLMProvider
from ..models import ConversationState, GenerationError, JsonDict, Message
from .prompts import (
    GENERAL_SYSTEM_PROMPT,
    GROUNDED_ACKNOWLEDGEMENT,
    GROUNDED_CONTEXT_TEMPLATE,
    GROUNDED_SYSTEM_PROMPT,
    format_context,
)

class AnswerGenerator:
    """
    ANSWER stage: Generates the assistant reply.

    Responsibilities:
    - Pick the grounded or the general template
    - Insert retrieved chunks in rank order, each wrapped in <doc> delimiters
    - Send messages to the LLMProvider
    - Return the conversation with the assistant reply appended

    Dependencies:
    - LLMProvider: Abstract interface for chat/completion models

    Example:
        >>> generator = AnswerGenerator(llm)
        >>> update = await generator.run(state)
        >>> update["messages"][-1].content
    """

    def __init__(
        self,
        llm: LLMProvider,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ):
        """
        Initialize the answer generator.

        Args:
            llm: LLMProvider instance
            temperature: Sampling temperature for answers
            max_tokens: Optional limit on response length
        """
        self.llm = llm
        self.temperature = temperature
        self.max_tokens = max_tokens

    def build_prompt(self, state: ConversationState) -> List[Dict[str, str]]:
        """
        Build the chat prompt for the current state.

        The question is the rephrased query when there is one, otherwise the
        latest user message.
        """
        question = state.search_query

        if state.retrieved_context:
            context = format_context(state.retrieved_context)
            return [
                {"role": "system", "content": GROUNDED_SYSTEM_PROMPT},
                {"role": "user", "content": GROUNDED_CONTEXT_TEMPLATE.format(context=context)},
                {"role": "assistant", "content": GROUNDED_ACKNOWLEDGEMENT},
                {"role": "user", "content": question},
            ]

        return [
            {"role": "system", "content": GENERAL_SYSTEM_PROMPT},
            {"role": "user", "content": question},
        ]

    async def run(self, state: ConversationState) -> JsonDict:
        """
        Generate an answer and append it to the conversation.

        Returns:
            {"messages": [...previous messages, assistant reply]}

        Raises:
            GenerationError: If the LLMProvider fails to generate a response
        """
        if not state.search_query.strip():
            raise GenerationError("No user question to answer")

        messages = self.build_prompt(state)
        grounded = bool(state.retrieved_context)
        logging.info(
            f"Generating answer with {'grounded' if grounded else 'general'} prompt "
            f"({len(state.retrieved_context)} context chunks)"
        )
        logging.debug(f"Sending messages to LLM: {messages}")
        try:
            answer = await self.llm.generate(
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                stage="generation",
            )
        except Exception as e:
            logging.error(f"Answer generation failed: {e}")
            raise GenerationError(f"Answer generation failed: {e}") from e

        if not answer or not answer.strip():
            raise GenerationError("No response generated from the model")

        logging.info("Answer generated successfully.")
        reply = Message(role="assistant", content=answer.strip())
        return {"messages": [*state.messages, reply]}

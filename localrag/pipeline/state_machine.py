# pipeline/state_machine.py

"""
Query path state machine: START -> REPHRASING -> RETRIEVING -> GENERATING -> DONE.

Each stage receives the current ConversationState and returns a partial
update, which the orchestrator merges into a new state before moving on.
Stages run strictly one after the other because each one needs the output of
the previous one.

Failure policy:
- REPHRASING and RETRIEVING degrade: on any fault the stage's fallback update
  is applied (no rephrased query / empty context) and the run continues.
- GENERATING has no fallback: its fault ends the run with a GenerationError.
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from ..models import ConversationState, GenerationError, JsonDict, Message, PipelineError

StageFn = Callable[[ConversationState], Awaitable[JsonDict]]
Router = Callable[[ConversationState], "PipelineStage"]
TransitionListener = Callable[["PipelineStage", ConversationState], None]


class PipelineStage(str, Enum):
    START = "start"
    REPHRASING = "rephrasing"
    RETRIEVING = "retrieving"
    GENERATING = "generating"
    DONE = "done"


def route_from_start(state: ConversationState) -> PipelineStage:
    """
    Decide where a run begins.

    Every conversation is rephrased first for now; this is the place to route
    e.g. small talk straight to GENERATING.
    """
    return PipelineStage.REPHRASING


# Fixed edges after the entry decision
TRANSITIONS: Dict[PipelineStage, PipelineStage] = {
    PipelineStage.REPHRASING: PipelineStage.RETRIEVING,
    PipelineStage.RETRIEVING: PipelineStage.GENERATING,
    PipelineStage.GENERATING: PipelineStage.DONE,
}

# Updates applied when a stage faults; stages missing here are fatal
FALLBACKS: Dict[PipelineStage, JsonDict] = {
    PipelineStage.REPHRASING: {"rephrased_query": None},
    PipelineStage.RETRIEVING: {"retrieved_context": []},
}


class PipelineOrchestrator:
    """
    Drives one pipeline invocation per run() call.

    The orchestrator holds no per-run state, so several runs may be in
    flight at once on the same instance.

    Example:
        >>> orchestrator = PipelineOrchestrator(rephraser.run, retriever.run, generator.run)
        >>> final = await orchestrator.run([Message("user", "What does the contract say?")])
        >>> final.messages[-1].content
    """

    def __init__(
        self,
        rephrase: StageFn,
        retrieve: StageFn,
        generate: StageFn,
        router: Router = route_from_start,
    ):
        self.router = router
        self._stages: Dict[PipelineStage, StageFn] = {
            PipelineStage.REPHRASING: rephrase,
            PipelineStage.RETRIEVING: retrieve,
            PipelineStage.GENERATING: generate,
        }

    def next_stage(self, stage: PipelineStage, state: ConversationState) -> PipelineStage:
        if stage is PipelineStage.START:
            return self.router(state)
        return TRANSITIONS[stage]

    async def _run_stage(self, stage: PipelineStage, state: ConversationState) -> ConversationState:
        try:
            update = await self._stages[stage](state)
        except Exception as e:
            fallback = FALLBACKS.get(stage)
            if fallback is None:
                logging.error(f"Stage '{stage.value}' failed: {e}")
                if isinstance(e, PipelineError):
                    raise
                raise GenerationError(f"Stage '{stage.value}' failed: {e}") from e
            logging.warning(f"Stage '{stage.value}' failed, continuing with fallback: {e}")
            update = fallback
        return state.apply(update)

    async def run(
        self,
        messages: Sequence[Message],
        on_transition: Optional[TransitionListener] = None,
    ) -> ConversationState:
        """
        Run START -> ... -> DONE for a conversation.

        Args:
            messages: Conversation so far, ending with the user's question.
                      The sequence is copied, never mutated.
            on_transition: Optional observer called on entering each stage

        Returns:
            Final state whose messages end with the assistant reply

        Raises:
            GenerationError: If no answer could be generated
        """
        state = ConversationState(messages=list(messages))
        stage = PipelineStage.START
        visited: List[PipelineStage] = [stage]

        while stage is not PipelineStage.DONE:
            stage = self.next_stage(stage, state)
            visited.append(stage)
            if on_transition:
                on_transition(stage, state)
            if stage is not PipelineStage.DONE:
                state = await self._run_stage(stage, state)

        logging.info(f"Pipeline run completed: {' -> '.join(s.value for s in visited)}")
        return state

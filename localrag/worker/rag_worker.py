# worker/rag_worker.py

"""
Worker boundary: the message protocol between a front end and the pipeline.

Inbound messages are dictionaries with a "type" field:
- {"type": "embed", "payload": <pdf bytes>, "name": "..."}
- {"type": "query", "messages": [{"role": "user", "content": "..."}, ...]}

Outbound events are emitted through a caller-supplied callable:
- init_progress: model loading progress in percent
- log: diagnostic data (raw request, ingestion summary, stage transitions)
- complete: the single successful result of an invocation
- error: the single failed result of an invocation

Every handle() call ends with exactly one complete or one error event.
"""

import asyncio
import logging
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError

from ..models import ConversationState, Message, PipelineError, ProtocolError
from ..models.messages import (
    ChatMessage,
    CompleteEvent,
    EmbedRequest,
    ErrorEvent,
    InitProgressEvent,
    LogEvent,
    OutboundMessage,
    QueryRequest,
    inbound_adapter,
)
from ..pipeline.rag_pipeline import RAGPipeline
from ..pipeline.state_machine import PipelineStage

Emit = Callable[[OutboundMessage], None]

EMBED_SUCCESS_TEXT = (
    "Document has been processed successfully! You can now ask questions about its contents."
)


def _describe_request(raw: Any) -> Any:
    """Loggable view of an inbound message; raw payload bytes are replaced by their size."""
    if not isinstance(raw, Mapping):
        return repr(raw)
    described = dict(raw)
    payload = described.get("payload")
    if isinstance(payload, (bytes, bytearray)):
        described["payload"] = f"<{len(payload)} bytes>"
    return described


class RAGWorker:
    """
    Translates inbound protocol messages into pipeline calls.

    The worker holds the pipeline explicitly; several workers can share one
    pipeline, and several messages may be handled concurrently.

    Example:
        >>> worker = RAGWorker(pipeline, emit=outbox.append)
        >>> await worker.start()
        >>> await worker.handle({"type": "query", "messages": [{"role": "user", "content": "Hi"}]})
    """

    def __init__(self, pipeline: RAGPipeline, emit: Emit):
        self.pipeline = pipeline
        self.emit = emit

    async def start(self) -> None:
        """
        Warm up the chat model, forwarding progress as init_progress events.

        A failed warm-up is reported as an error event and then re-raised.
        """

        def on_progress(percent: float) -> None:
            self.emit(InitProgressEvent(percent=max(0.0, min(100.0, percent))))

        try:
            await self.pipeline.initialize(on_progress)
        except Exception as e:
            logging.error(f"Model initialization failed: {e}")
            self.emit(ErrorEvent(message=f"Model initialization failed: {e}", detail=type(e).__name__))
            raise

    async def handle(self, raw: Any) -> None:
        """Process one inbound message, emitting exactly one terminal event."""
        self.emit(LogEvent(data=_describe_request(raw)))

        try:
            request = inbound_adapter.validate_python(raw)
        except ValidationError as e:
            logging.warning(f"Rejected inbound message: {e.error_count()} validation error(s)")
            self.emit(ErrorEvent(message="Unsupported or malformed message", detail=str(e)))
            return

        try:
            if isinstance(request, EmbedRequest):
                await self._handle_embed(request)
            elif isinstance(request, QueryRequest):
                await self._handle_query(request)
            else:
                raise ProtocolError(f"Unsupported message type: {type(request).__name__}")
        except Exception as e:
            logging.error(f"Worker failed to handle '{getattr(request, 'type', '?')}': {e}")
            self.emit(ErrorEvent(message=str(e) or type(e).__name__, detail=type(e).__name__))

    async def _handle_embed(self, request: EmbedRequest) -> None:
        result = await self.pipeline.ingest_pdf(request.payload, name=request.name)
        self.emit(LogEvent(data=str(result)))
        if not result.success:
            self.emit(ErrorEvent(message="; ".join(result.errors) or "Document could not be processed"))
            return
        self.emit(CompleteEvent(message=ChatMessage(role="assistant", content=EMBED_SUCCESS_TEXT)))

    async def _handle_query(self, request: QueryRequest) -> None:
        def on_transition(stage: PipelineStage, state: ConversationState) -> None:
            self.emit(LogEvent(data={"stage": stage.value}))

        messages = [message.to_message() for message in request.messages]
        try:
            reply: Message = await self.pipeline.answer(messages, on_transition=on_transition)
        except PipelineError as e:
            self.emit(ErrorEvent(message=str(e), detail=type(e).__name__))
            return
        self.emit(CompleteEvent(message=ChatMessage.from_message(reply)))

    async def serve(self, inbox: "asyncio.Queue[Optional[Any]]") -> None:
        """Handle messages from a queue until a None sentinel arrives."""
        while True:
            raw = await inbox.get()
            try:
                if raw is None:
                    logging.info("Worker received shutdown sentinel")
                    return
                await self.handle(raw)
            finally:
                inbox.task_done()

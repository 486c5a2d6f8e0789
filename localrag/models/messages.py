# models/messages.py

"""
Wire models for the worker message protocol.

Inbound kinds: embed, query.
Outbound kinds: init_progress, log, complete, error.

Inbound messages are validated as a discriminated union on the "type" field,
so an unknown kind is a validation error rather than a missing handler.
"""

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from .types import Message


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str

    def to_message(self) -> Message:
        return Message(role=self.role, content=self.content)

    @classmethod
    def from_message(cls, message: Message) -> "ChatMessage":
        return cls(role=message.role, content=message.content)


# === Inbound ===

class EmbedRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["embed"] = "embed"
    payload: bytes = Field(min_length=1, description="Raw PDF bytes")
    name: str = Field(default="document", min_length=1, description="Source name used in document ids")


class QueryRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["query"] = "query"
    messages: List[ChatMessage] = Field(min_length=1)

    @model_validator(mode="after")
    def _require_user_message(self) -> "QueryRequest":
        if not any(m.role == "user" and m.content.strip() for m in self.messages):
            raise ValueError("query must contain a non-empty user message")
        return self


InboundMessage = Annotated[Union[EmbedRequest, QueryRequest], Field(discriminator="type")]

inbound_adapter: TypeAdapter = TypeAdapter(InboundMessage)


# === Outbound ===

class InitProgressEvent(BaseModel):
    type: Literal["init_progress"] = "init_progress"
    percent: float = Field(ge=0.0, le=100.0)


class LogEvent(BaseModel):
    type: Literal["log"] = "log"
    data: Any = None


class CompleteEvent(BaseModel):
    type: Literal["complete"] = "complete"
    message: ChatMessage


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    message: str
    detail: Optional[str] = None


OutboundMessage = Union[InitProgressEvent, LogEvent, CompleteEvent, ErrorEvent]

"""Wire models exchanged between the script environment and the host."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

if TYPE_CHECKING:
    from webchat.agent.invoker import AgentReply

LOG_MESSAGE_ID = "log"
CHAT_MESSAGE_TYPE = "chat"

Role = Literal["user", "assistant", "system"]
ROLES: frozenset[str] = frozenset({"user", "assistant", "system"})


class LogLine(BaseModel):
    """Diagnostic line forwarded from the script environment."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["log"] = "log"
    text: str | None = None


class ChatPayload(BaseModel):
    text: StrictStr = Field(min_length=1)


class ChatCall(BaseModel):
    """Structured call asking the host to run the agent."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: Literal["chat"] = "chat"
    id: StrictStr
    type: Literal["chat"]
    payload: ChatPayload

    @property
    def text(self) -> str:
        return self.payload.text


class UnknownMessage(BaseModel):
    """Anything the host does not understand. Dropped without a response."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unknown"] = "unknown"
    id: str | None = None


InboundMessage: TypeAlias = LogLine | ChatCall | UnknownMessage


def decode_inbound(body: Any) -> InboundMessage:
    """Decode one raw inbound body into its tagged variant."""

    if not isinstance(body, Mapping):
        return UnknownMessage()
    message_id = body.get("id")
    if not isinstance(message_id, str):
        return UnknownMessage()
    if message_id == LOG_MESSAGE_ID:
        log = body.get("log")
        return LogLine(text=log if isinstance(log, str) else None)
    if body.get("type") != CHAT_MESSAGE_TYPE:
        return UnknownMessage(id=message_id)
    try:
        return ChatCall.model_validate(dict(body))
    except ValidationError:
        return UnknownMessage(id=message_id)


class ResponseResult(BaseModel):
    text: str = ""


class OutboundResponse(BaseModel):
    """Answer to one ``ChatCall``, echoing its id."""

    model_config = ConfigDict(frozen=True)

    id: str
    ok: bool
    result: ResponseResult = Field(default_factory=ResponseResult)
    error: str | None = None

    @classmethod
    def from_reply(cls, call_id: str, reply: AgentReply) -> OutboundResponse:
        return cls(
            id=call_id,
            ok=reply.error is None,
            result=ResponseResult(text=reply.text or ""),
            error=reply.error,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ChatMessage(BaseModel):
    """One transcript message in the shape the chat page renders."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: list[dict[str, Any]]

    @classmethod
    def from_text(cls, role: Role, text: str) -> ChatMessage:
        return cls(role=role, content=[{"type": "text", "text": text}])


class Bootstrap(BaseModel):
    """Session state handed to the script environment once, at load time."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    session_key: str = Field(alias="sessionKey")
    initial_messages: list[ChatMessage] = Field(default_factory=list, alias="initialMessages")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class OutgoingMessage(BaseModel):
    """Host-initiated message queued into the chat page's own send path."""

    model_config = ConfigDict(frozen=True)

    text: str
    thinking: str = "default"

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

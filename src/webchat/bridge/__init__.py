"""Script environment <-> host bridge primitives."""

from webchat.bridge.client import ScriptBridge
from webchat.bridge.loopback import LoopbackEnvironment
from webchat.bridge.messages import (
    Bootstrap,
    ChatCall,
    ChatMessage,
    LogLine,
    OutboundResponse,
    OutgoingMessage,
    UnknownMessage,
    decode_inbound,
)
from webchat.bridge.registry import CorrelationRegistry
from webchat.bridge.transport import JavaScriptEnvironment, ScriptEnvironment, deliver_to_script

__all__ = [
    "Bootstrap",
    "ChatCall",
    "ChatMessage",
    "CorrelationRegistry",
    "JavaScriptEnvironment",
    "LogLine",
    "LoopbackEnvironment",
    "OutboundResponse",
    "OutgoingMessage",
    "ScriptBridge",
    "ScriptEnvironment",
    "UnknownMessage",
    "decode_inbound",
    "deliver_to_script",
]

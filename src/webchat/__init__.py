"""webchat - bridge a hosted chat page to an agent process."""

from .app import AppRuntime, build_runtime
from .bridge import CorrelationRegistry, ScriptBridge
from .host import ChatSession, HostDispatcher, SessionManager

__version__ = "0.1.0"

__all__ = [
    "AppRuntime",
    "ChatSession",
    "CorrelationRegistry",
    "HostDispatcher",
    "ScriptBridge",
    "SessionManager",
    "build_runtime",
]

"""Application-level exception types for webchat."""

from __future__ import annotations


class WebChatError(Exception):
    """Base exception for webchat."""


class BridgeCallError(WebChatError):
    """Raised on the script side when the host answers a call with ``ok: false``."""


class ScriptEnvironmentError(WebChatError):
    """Raised when the script environment cannot take a call right now."""

"""Host-side session handling."""

from webchat.host.dispatcher import HostDispatcher
from webchat.host.manager import SessionManager
from webchat.host.session import BundleResources, ChatSession

__all__ = ["BundleResources", "ChatSession", "HostDispatcher", "SessionManager"]

"""Application runtime package."""

from webchat.app.bootstrap import build_runtime
from webchat.app.runtime import AppRuntime

__all__ = ["AppRuntime", "build_runtime"]

"""Command line interface for webchat."""

from .app import app

__all__ = ["app"]

"""Runtime logging helpers."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from logging import Handler
from typing import Literal

import loguru
from loguru import logger
from rich import get_console
from rich.logging import RichHandler

LogProfile = Literal["default", "chat"]

_PROFILE_FORMATS: dict[LogProfile, str] = {
    "chat": "{extra[session]} | {message}",
    "default": "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<6} | {name}:{function}:{line} | {extra[session]} | {message}",
}
_CONFIGURED: tuple[LogProfile, str] | None = None
_current_session: ContextVar[str] = ContextVar("webchat_session", default="-")


def current_session() -> str:
    return _current_session.get()


@contextmanager
def session_context(session_key: str) -> Iterator[None]:
    """Tag log records emitted inside the block with ``session_key``."""
    token = _current_session.set(session_key)
    try:
        yield
    finally:
        _current_session.reset(token)


def _stderr_sink(message: loguru.Message) -> None:
    sys.stderr.write(message)


def _build_chat_handler() -> Handler:
    return RichHandler(
        console=get_console(),
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )


def configure_logging(*, profile: LogProfile = "default", level: str | None = None) -> None:
    """Configure process-level logging once per profile and level."""

    def inject_context(record: loguru.Record) -> None:
        record["extra"]["session"] = current_session()

    global _CONFIGURED
    resolved_level = (level or os.getenv("WEBCHAT_LOG_LEVEL", "INFO")).upper()
    if _CONFIGURED == (profile, resolved_level):
        return

    logger.remove()
    logger.configure(patcher=inject_context)
    if profile == "chat":
        logger.add(
            _build_chat_handler(),
            level=resolved_level,
            format=_PROFILE_FORMATS[profile],
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            _stderr_sink,
            level=resolved_level,
            format=_PROFILE_FORMATS[profile],
            backtrace=False,
            diagnose=False,
        )
    _CONFIGURED = (profile, resolved_level)

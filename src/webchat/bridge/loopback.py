"""In-process script environment used by the terminal chat and by tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from blinker import Signal
from loguru import logger

from webchat.bridge.client import ScriptBridge
from webchat.bridge.messages import Bootstrap, OutgoingMessage
from webchat.bridge.transport import ENQUEUE_OUTGOING_ENTRY, RECEIVE_ENTRY, MessageHandler
from webchat.errors import ScriptEnvironmentError


class EnvironmentState(StrEnum):
    IDLE = "idle"
    READY = "ready"
    CLOSED = "closed"


class LoopbackEnvironment:
    """Headless stand-in for the chat page.

    Messages posted by the script side travel through a blinker signal to the
    host handler in call order. The host reaches back in through named
    globals, the same way it would call into a web view.
    """

    def __init__(self) -> None:
        self.state = EnvironmentState.IDLE
        self.bootstrap: Bootstrap | None = None
        self.outgoing: asyncio.Queue[OutgoingMessage] = asyncio.Queue()
        self._channel = Signal("webchat.loopback.post")
        self._unsubscribe: Callable[[], None] | None = None
        self.bridge = ScriptBridge(self._post)
        self._globals: dict[str, Callable[[Any], Any]] = {
            RECEIVE_ENTRY: self.bridge.receive,
            ENQUEUE_OUTGOING_ENTRY: self._enqueue_outgoing,
        }

    def install(self, bootstrap: Bootstrap, on_message: MessageHandler) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()

        def _receiver(sender: Any, *, body: Any) -> None:
            on_message(body)

        self._channel.connect(_receiver, sender=self, weak=False)
        self._unsubscribe = lambda: self._channel.disconnect(_receiver, sender=self)
        self.bootstrap = bootstrap
        self.state = EnvironmentState.READY
        logger.debug("loopback.ready session={} messages={}", bootstrap.session_key, len(bootstrap.initial_messages))

    async def call_global(self, name: str, argument: Any) -> Any:
        if self.state is not EnvironmentState.READY:
            raise ScriptEnvironmentError(f"environment is {self.state}")
        entry = self._globals.get(name)
        if entry is None:
            raise ScriptEnvironmentError(f"{name} is not defined")
        return entry(argument)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.bridge.close()
        self.state = EnvironmentState.CLOSED

    def _post(self, body: dict[str, Any]) -> None:
        if self.state is not EnvironmentState.READY:
            raise ScriptEnvironmentError(f"environment is {self.state}")
        self._channel.send(self, body=body)

    def _enqueue_outgoing(self, argument: Any) -> bool:
        message = OutgoingMessage.model_validate(argument)
        self.outgoing.put_nowait(message)
        return True

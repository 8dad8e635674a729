"""Host-side dispatch of messages posted by the script environment."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from loguru import logger

from webchat.agent.invoker import AgentReply
from webchat.bridge.messages import ChatCall, LogLine, OutboundResponse, decode_inbound
from webchat.logging_utils import session_context

Deliver = Callable[[OutboundResponse], Awaitable[Any]]


class Invoker(Protocol):
    async def invoke(self, text: str, session_key: str) -> AgentReply: ...


class HostDispatcher:
    """Classify inbound bodies and answer chat calls.

    ``receive`` never blocks: chat calls run as tasks on the event loop and
    each one delivers exactly one response when it completes.
    """

    def __init__(self, invoker: Invoker, deliver: Deliver, session_key: str) -> None:
        self._invoker = invoker
        self._deliver = deliver
        self.session_key = session_key
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def receive(self, body: Any) -> None:
        match decode_inbound(body):
            case LogLine(text=text):
                if text is not None:
                    logger.debug("JS: {}", text)
            case ChatCall() as call:
                self._schedule(call)
            case _:
                return

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _schedule(self, call: ChatCall) -> None:
        task = asyncio.get_running_loop().create_task(self._answer(call))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _answer(self, call: ChatCall) -> None:
        with session_context(self.session_key):
            try:
                reply = await self._invoker.invoke(call.text, self.session_key)
            except Exception as exc:
                logger.opt(exception=True).error("dispatch.invoke_failed id={}", call.id)
                reply = AgentReply(text=None, error=str(exc) or type(exc).__name__)
            try:
                await self._deliver(OutboundResponse.from_reply(call.id, reply))
            except Exception:
                logger.opt(exception=True).warning("dispatch.deliver_failed id={}", call.id)

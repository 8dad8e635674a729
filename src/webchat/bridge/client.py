"""Script-side half of the bridge: correlated send and receive."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from typing import Any

from loguru import logger

from webchat.bridge.messages import CHAT_MESSAGE_TYPE, LOG_MESSAGE_ID
from webchat.bridge.registry import CorrelationRegistry
from webchat.errors import BridgeCallError

PostMessage = Callable[[dict[str, Any]], None]


class ScriptBridge:
    """Turn the one-way ``post`` primitive into awaitable request/response calls."""

    def __init__(self, post: PostMessage, registry: CorrelationRegistry | None = None) -> None:
        self._post = post
        self.registry = registry or CorrelationRegistry()

    async def send(self, payload: Mapping[str, Any], *, timeout: float | None = None) -> Any:
        call_id, future = self.registry.issue()
        try:
            self._post({"id": call_id, **payload})
        except Exception:
            self.registry.discard(call_id)
            raise
        try:
            if timeout is None:
                return await future
            return await asyncio.wait_for(future, timeout=timeout)
        finally:
            self.registry.discard(call_id)

    async def chat(self, text: str, *, timeout: float | None = None) -> str:
        result = await self.send({"type": CHAT_MESSAGE_TYPE, "payload": {"text": text}}, timeout=timeout)
        if isinstance(result, Mapping):
            return str(result.get("text", ""))
        return ""

    def receive(self, response: Any) -> None:
        if not isinstance(response, Mapping) or not isinstance(response.get("id"), str):
            logger.debug("bridge.malformed_response response={!r}", response)
            return
        call_id = response["id"]
        if response.get("ok"):
            matched = self.registry.resolve(call_id, response.get("result"))
        else:
            matched = self.registry.reject(call_id, BridgeCallError(response.get("error") or "unknown error"))
        if not matched:
            logger.debug("bridge.stray_response id={}", call_id)

    def log(self, message: object) -> None:
        try:
            self._post({"id": LOG_MESSAGE_ID, "log": str(message)})
        except Exception:
            logger.opt(exception=True).debug("bridge.log_failed")

    def close(self) -> None:
        self.registry.cancel_all()

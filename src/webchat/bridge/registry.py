"""Correlation registry for in-flight bridge calls."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from typing import Any


def _random_id() -> str:
    return str(uuid.uuid4())


class CorrelationRegistry:
    """Track pending calls by correlation id and settle each one at most once.

    Settling an id that is not registered (already settled, discarded or
    never issued) is a normal boundary condition: it returns ``False`` and
    leaves every other pending call untouched.
    """

    def __init__(self, id_factory: Callable[[], str] = _random_id) -> None:
        self._id_factory = id_factory
        self._pending: dict[str, asyncio.Future[Any]] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, call_id: object) -> bool:
        return call_id in self._pending

    def issue(self) -> tuple[str, asyncio.Future[Any]]:
        loop = asyncio.get_running_loop()
        call_id = self._id_factory()
        while call_id in self._pending:
            call_id = self._id_factory()
        future: asyncio.Future[Any] = loop.create_future()
        self._pending[call_id] = future
        return call_id, future

    def resolve(self, call_id: str, value: Any) -> bool:
        future = self._pending.pop(call_id, None)
        if future is None or future.done():
            return False
        future.set_result(value)
        return True

    def reject(self, call_id: str, error: BaseException) -> bool:
        future = self._pending.pop(call_id, None)
        if future is None or future.done():
            return False
        future.set_exception(error)
        return True

    def discard(self, call_id: str) -> None:
        self._pending.pop(call_id, None)

    def cancel_all(self) -> None:
        pending, self._pending = self._pending, {}
        for future in pending.values():
            future.cancel()

"""Process-wide application state shared with the UI."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from blinker import Signal


class AppState:
    """Advisory "agent is working" state.

    The flag is derived from a counter of active scopes, so overlapping agent
    calls keep it raised until the last one finishes. Receivers connected to
    ``working_changed`` get ``is_working=`` on every transition. Mutate it
    from the event loop only.
    """

    def __init__(self) -> None:
        self.working_changed = Signal("webchat.working_changed")
        self._working = 0

    @property
    def working(self) -> int:
        return self._working

    @property
    def is_working(self) -> bool:
        return self._working > 0

    @contextmanager
    def working_scope(self) -> Iterator[None]:
        self._set(self._working + 1)
        try:
            yield
        finally:
            self._set(self._working - 1)

    def close(self) -> None:
        self._set(0)
        self.working_changed = Signal("webchat.working_changed")

    def _set(self, value: int) -> None:
        was_working = self.is_working
        self._working = max(value, 0)
        if was_working != self.is_working:
            self.working_changed.send(self, is_working=self.is_working)

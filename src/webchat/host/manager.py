"""Session manager owning the host's single chat session."""

from __future__ import annotations

from collections.abc import Callable

from loguru import logger

from webchat.host.session import ChatSession

SessionFactory = Callable[[str], ChatSession]


class SessionManager:
    """Create the chat session on first use and route host-initiated messages to it.

    Construct one at startup and pass it to whatever needs to reach the chat.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory
        self._session: ChatSession | None = None

    @property
    def session(self) -> ChatSession | None:
        return self._session

    def show(self, session_key: str) -> ChatSession:
        if self._session is None:
            self._session = self._session_factory(session_key)
        elif self._session.session_key != session_key:
            logger.debug(
                "manager.reuse_session requested={} active={}", session_key, self._session.session_key
            )
        self._session.open()
        return self._session

    async def send_message(self, text: str, thinking: str = "default", session_key: str = "main") -> bool:
        """Enqueue ``text`` in the chat page, opening it first when needed.

        Returns once the injection call has completed. ``True`` means it went
        through without a transport error, not that the page handled it.
        """
        session = self.show(session_key)
        if not session.is_open:
            return False
        return await session.enqueue_outgoing(text, thinking)

    async def close(self) -> None:
        if self._session is None:
            return
        await self._session.close()
        self._session = None

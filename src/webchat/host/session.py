"""One hosted chat page bound to a session key."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from webchat.bridge.messages import Bootstrap, OutboundResponse, OutgoingMessage
from webchat.bridge.transport import ENQUEUE_OUTGOING_ENTRY, RECEIVE_ENTRY, ScriptEnvironment, deliver_to_script
from webchat.host.dispatcher import HostDispatcher, Invoker
from webchat.logging_utils import session_context
from webchat.transcript.loader import TranscriptLoader

PAGE_DIR_NAME = "WebChat"
PAGE_FILE_NAME = "index.html"


class ResourceProvider(Protocol):
    def locate_page(self) -> Path | None: ...


class BundleResources:
    """Look the chat page up under ``<root>/WebChat/index.html``."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def locate_page(self) -> Path | None:
        page = self.root / PAGE_DIR_NAME / PAGE_FILE_NAME
        return page if page.is_file() else None


class ChatSession:
    """Host side of one chat page.

    The transcript is read once, when the session is created, and handed to
    the page as its bootstrap state. Calls coming from the page are answered
    by the dispatcher; host-initiated messages go through ``enqueue_outgoing``.
    """

    def __init__(
        self,
        session_key: str,
        environment: ScriptEnvironment,
        *,
        invoker: Invoker,
        loader: TranscriptLoader,
        resources: ResourceProvider | None = None,
    ) -> None:
        self.session_key = session_key
        self.environment = environment
        self.resources = resources
        with session_context(session_key):
            logger.debug("session.init key={}", session_key)
            self.bootstrap = Bootstrap(session_key=session_key, initial_messages=loader.load(session_key))
        self.dispatcher = HostDispatcher(invoker, self.deliver, session_key)
        self.page: Path | None = None
        self.is_open = False

    def open(self) -> bool:
        if self.is_open:
            return True
        with session_context(self.session_key):
            if self.resources is not None:
                self.page = self.resources.locate_page()
                if self.page is None:
                    logger.error("session.resources_missing key={}", self.session_key)
                    return False
            self.environment.install(self.bootstrap, self.receive)
            self.is_open = True
            logger.debug("session.opened key={} page={}", self.session_key, self.page)
        return True

    def receive(self, body: Any) -> None:
        self.dispatcher.receive(body)

    async def deliver(self, response: OutboundResponse) -> bool:
        return await deliver_to_script(self.environment, RECEIVE_ENTRY, response.to_wire())

    async def enqueue_outgoing(self, text: str, thinking: str = "default") -> bool:
        """Ask the page to queue ``text`` as if the user had sent it.

        The result only says the injection call completed without a transport
        error. It is not an acknowledgment that the page processed the message.
        """
        message = OutgoingMessage(text=text, thinking=thinking)
        with session_context(self.session_key):
            accepted = await deliver_to_script(self.environment, ENQUEUE_OUTGOING_ENTRY, message.to_wire())
            if accepted:
                logger.debug("session.enqueued key={}", self.session_key)
        return accepted

    def on_navigation(self, event: str, url: str | None = None, error: str | None = None) -> None:
        with session_context(self.session_key):
            if error is not None:
                logger.error("session.navigation_failed event={} url={} error={}", event, url, error)
            else:
                logger.debug("session.navigation event={} url={}", event, url)

    def on_terminated(self) -> None:
        # No automatic recovery; the session has to be reopened.
        with session_context(self.session_key):
            logger.error("session.environment_terminated key={}", self.session_key)
        self.is_open = False

    async def close(self) -> None:
        await self.dispatcher.drain()
        self.is_open = False

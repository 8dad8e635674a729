"""Application runtime wiring the bridge collaborators together."""

from __future__ import annotations

from collections.abc import Callable

from webchat.agent.executor import CommandExecutor, SubprocessExecutor
from webchat.agent.invoker import AgentInvoker
from webchat.bridge.transport import ScriptEnvironment
from webchat.config import Settings
from webchat.host.manager import SessionManager
from webchat.host.session import BundleResources, ChatSession
from webchat.state import AppState
from webchat.transcript.loader import TranscriptLoader

EnvironmentFactory = Callable[[str], ScriptEnvironment]


class AppRuntime:
    """Own the process-wide state and the one session manager.

    Build it once at startup; use it as a context manager so the busy state
    and any open session are torn down explicitly.
    """

    def __init__(
        self,
        settings: Settings,
        environment_factory: EnvironmentFactory,
        *,
        executor: CommandExecutor | None = None,
    ) -> None:
        self.settings = settings
        self.state = AppState()
        self.loader = TranscriptLoader(settings.sessions_dir)
        self.invoker = AgentInvoker(
            executor or SubprocessExecutor(),
            self.state,
            command=settings.agent_command,
            workdir=settings.resolve_workdir(),
            max_concurrency=settings.agent_max_concurrency,
        )
        self._environment_factory = environment_factory
        self.manager = SessionManager(self._create_session)

    def _create_session(self, session_key: str) -> ChatSession:
        resources = BundleResources(self.settings.resources_path) if self.settings.resources_path else None
        return ChatSession(
            session_key,
            self._environment_factory(session_key),
            invoker=self.invoker,
            loader=self.loader,
            resources=resources,
        )

    async def __aenter__(self) -> AppRuntime:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.manager.close()
        self.state.close()

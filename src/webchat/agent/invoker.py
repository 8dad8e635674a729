"""Run the external agent for one chat message and interpret its output."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from contextlib import AsyncExitStack
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from webchat.agent.executor import CommandExecutor, CommandResult, CommandSpec
from webchat.state import AppState

JSON_FLAG = "--json"


@dataclass(frozen=True)
class AgentReply:
    """Outcome of one agent call. Exactly one of ``text``/``error`` is set."""

    text: str | None
    error: str | None = None


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace").strip()


def parse_agent_output(stdout: str) -> str:
    """Return ``payloads[0].text`` from the agent's JSON output, or the raw output."""

    try:
        parsed = json.loads(stdout)
    except json.JSONDecodeError:
        logger.debug("agent.output_not_json length={}", len(stdout))
        return stdout
    if not isinstance(parsed, dict):
        return stdout
    payloads = parsed.get("payloads")
    if not isinstance(payloads, list) or not payloads or not isinstance(payloads[0], dict):
        return stdout
    text = payloads[0].get("text")
    return text if isinstance(text, str) else stdout


class AgentInvoker:
    """Map a chat request onto one agent process per call."""

    def __init__(
        self,
        executor: CommandExecutor,
        state: AppState,
        *,
        command: Sequence[str],
        workdir: Path | None = None,
        max_concurrency: int = 0,
    ) -> None:
        if not command:
            raise ValueError("agent command must not be empty")
        self._executor = executor
        self._state = state
        self._command = tuple(command)
        self._workdir = workdir
        self._slots = asyncio.Semaphore(max_concurrency) if max_concurrency > 0 else None

    def build_spec(self, text: str, session_key: str) -> CommandSpec:
        program, *leading = self._command
        args = (*leading, "--to", session_key, "--message", text, JSON_FLAG)
        return CommandSpec(program=program, args=args, cwd=self._workdir)

    async def invoke(self, text: str, session_key: str) -> AgentReply:
        spec = self.build_spec(text, session_key)
        with self._state.working_scope():
            async with AsyncExitStack() as stack:
                if self._slots is not None:
                    await stack.enter_async_context(self._slots)
                logger.info("agent.spawn session={} program={}", session_key, spec.program)
                try:
                    result = await self._executor.run(spec)
                except OSError as exc:
                    logger.warning("agent.spawn_failed session={} error={}", session_key, exc)
                    return AgentReply(text=None, error=str(exc))
        return self._interpret(result, session_key)

    @staticmethod
    def _interpret(result: CommandResult, session_key: str) -> AgentReply:
        stdout = _decode(result.stdout)
        if result.stderr:
            logger.debug("agent.stderr session={} text={}", session_key, _decode(result.stderr))
        if not result.ok:
            logger.warning("agent.failed session={} exit={}", session_key, result.exit_code)
            return AgentReply(text=None, error=stdout or f"agent exited with status {result.exit_code}")
        return AgentReply(text=parse_agent_output(stdout))

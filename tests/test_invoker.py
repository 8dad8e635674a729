import asyncio
from pathlib import Path

import pytest

from webchat.agent.executor import CommandResult, CommandSpec
from webchat.agent.invoker import AgentInvoker, AgentReply, parse_agent_output
from webchat.state import AppState

from tests.fakes import FakeExecutor

COMMAND = ["pnpm", "clawdis", "agent"]


def _invoker(executor: FakeExecutor, state: AppState | None = None, **kwargs: object) -> AgentInvoker:
    return AgentInvoker(executor, state or AppState(), command=COMMAND, workdir=Path("/srv/agent"), **kwargs)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_invoke_returns_first_payload_text(fake_executor: FakeExecutor) -> None:
    reply = await _invoker(fake_executor).invoke("hello", "main")

    assert reply == AgentReply(text="hi", error=None)
    assert fake_executor.specs == [
        CommandSpec(
            program="pnpm",
            args=("clawdis", "agent", "--to", "main", "--message", "hello", "--json"),
            cwd=Path("/srv/agent"),
        )
    ]


@pytest.mark.asyncio
async def test_non_json_output_falls_back_to_raw_text() -> None:
    executor = FakeExecutor(CommandResult(exit_code=0, stdout=b"not json\n"))

    reply = await _invoker(executor).invoke("hello", "main")

    assert reply == AgentReply(text="not json", error=None)


@pytest.mark.asyncio
async def test_non_zero_exit_reports_stdout_as_error() -> None:
    executor = FakeExecutor(CommandResult(exit_code=2, stdout=b"boom", stderr=b"trace"))

    reply = await _invoker(executor).invoke("hello", "main")

    assert reply == AgentReply(text=None, error="boom")


@pytest.mark.asyncio
async def test_non_zero_exit_without_output_still_reports_an_error() -> None:
    executor = FakeExecutor(CommandResult(exit_code=3, stdout=b""))

    reply = await _invoker(executor).invoke("hello", "main")

    assert reply.text is None
    assert reply.error == "agent exited with status 3"


@pytest.mark.asyncio
async def test_spawn_failure_is_reported_as_error() -> None:
    executor = FakeExecutor(error=FileNotFoundError(2, "No such file or directory", "pnpm"))

    reply = await _invoker(executor).invoke("hello", "main")

    assert reply.text is None
    assert reply.error is not None
    assert "No such file or directory" in reply.error


@pytest.mark.parametrize(
    ("stdout", "expected"),
    [
        ('{"payloads":[{"text":"hi"},{"text":"later"}]}', "hi"),
        ('{"payloads":[]}', '{"payloads":[]}'),
        ('{"payloads":[{"text":5}]}', '{"payloads":[{"text":5}]}'),
        ('{"payloads":"hi"}', '{"payloads":"hi"}'),
        ("[1, 2]", "[1, 2]"),
        ("", ""),
    ],
)
def test_parse_agent_output_degrades_to_raw_text(stdout: str, expected: str) -> None:
    assert parse_agent_output(stdout) == expected


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "executor",
    [
        FakeExecutor(),
        FakeExecutor(CommandResult(exit_code=1, stdout=b"boom")),
        FakeExecutor(error=PermissionError("denied")),
    ],
)
async def test_busy_flag_rises_and_falls_once_per_call(executor: FakeExecutor) -> None:
    state = AppState()
    transitions: list[bool] = []

    def _on_change(_sender: AppState, *, is_working: bool) -> None:
        transitions.append(is_working)

    state.working_changed.connect(_on_change)

    await _invoker(executor, state).invoke("hello", "main")

    assert transitions == [True, False]
    assert state.is_working is False


@pytest.mark.asyncio
async def test_busy_flag_is_cleared_when_executor_raises_unexpectedly() -> None:
    class Exploding:
        async def run(self, spec: CommandSpec) -> CommandResult:
            raise ValueError("unexpected")

    state = AppState()
    invoker = AgentInvoker(Exploding(), state, command=COMMAND)

    with pytest.raises(ValueError, match="unexpected"):
        await invoker.invoke("hello", "main")
    assert state.is_working is False


@pytest.mark.asyncio
async def test_max_concurrency_bounds_parallel_spawns() -> None:
    running = 0
    peak = 0

    class Slow:
        async def run(self, spec: CommandSpec) -> CommandResult:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return CommandResult(exit_code=0, stdout=b"ok")

    invoker = AgentInvoker(Slow(), AppState(), command=COMMAND, max_concurrency=1)
    replies = await asyncio.gather(*(invoker.invoke("hello", "main") for _ in range(3)))

    assert [reply.text for reply in replies] == ["ok", "ok", "ok"]
    assert peak == 1


def test_empty_command_is_rejected() -> None:
    with pytest.raises(ValueError, match="must not be empty"):
        AgentInvoker(FakeExecutor(), AppState(), command=[])

import json
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from webchat.app import AppRuntime
from webchat.bridge.loopback import EnvironmentState
from webchat.cli.app import LoopbackFactory, _run_chat, app
from webchat.cli.render import Renderer
from webchat.config import Settings

from tests.fakes import FakeExecutor, write_session


@pytest.fixture(autouse=True)
def _quiet_logs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEBCHAT_LOG_LEVEL", "ERROR")


@pytest.fixture
def agent_home(tmp_path: Path) -> Path:
    home = tmp_path / "agent-home"
    write_session(home / "sessions", "main", "s-1", ['{"role":"user","text":"hi"}', '{"role":"assistant","text":"hello"}'])
    return home


def _agent_command(script: str) -> str:
    return json.dumps([sys.executable, "-c", script])


def test_transcript_json_prints_messages(agent_home: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["transcript", "main", "--agent-home", str(agent_home), "--json"])

    assert result.exit_code == 0, result.output
    assert [message["role"] for message in json.loads(result.stdout)] == ["user", "assistant"]


def test_transcript_renders_empty_history(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["transcript", "nothing", "--agent-home", str(tmp_path)])

    assert result.exit_code == 0
    assert "no history" in result.stdout


def test_prelude_prints_scripts_with_bootstrap(agent_home: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["prelude", "main", "--agent-home", str(agent_home)])

    assert result.exit_code == 0
    assert "window.__webchatReceive" in result.stdout
    assert '"sessionKey":"main"' in result.stdout


def test_ask_prints_agent_reply(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    script = "import json, sys; print(json.dumps({'payloads': [{'text': 'to=' + sys.argv[sys.argv.index('--to') + 1]}]}))"
    monkeypatch.setenv("WEBCHAT_AGENT_COMMAND", _agent_command(script))
    runner = CliRunner()

    result = runner.invoke(app, ["ask", "hello", "--session", "side", "--workdir", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "to=side"


def test_ask_exits_non_zero_on_agent_failure(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("WEBCHAT_AGENT_COMMAND", _agent_command("import sys; print('boom'); sys.exit(2)"))
    runner = CliRunner()

    result = runner.invoke(app, ["ask", "hello", "--workdir", str(tmp_path)])

    assert result.exit_code == 1
    assert "boom" in result.stdout


@pytest.mark.asyncio
async def test_chat_loop_sends_host_message_then_user_input(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    inputs = iter(["second", "", "/quit"])

    async def fake_prompt(self: Renderer, message: str = "you > ") -> str:
        return next(inputs)

    monkeypatch.setattr(Renderer, "prompt", fake_prompt)
    factory = LoopbackFactory()
    executor = FakeExecutor()
    runtime = AppRuntime(Settings(agent_home=tmp_path, agent_command=["agent"]), factory, executor=executor)

    await _run_chat(runtime, factory, "main", "first")

    assert [spec.args[3] for spec in executor.specs] == ["first", "second"]
    assert factory.environments["main"].state is EnvironmentState.CLOSED
    assert runtime.state.is_working is False

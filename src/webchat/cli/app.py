"""CLI entry points for webchat."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from loguru import logger

from webchat.app import AppRuntime, build_runtime
from webchat.bridge.loopback import LoopbackEnvironment
from webchat.bridge.messages import Bootstrap, ChatMessage
from webchat.bridge.transport import render_bootstrap, render_prelude
from webchat.cli.render import Renderer
from webchat.errors import BridgeCallError, ScriptEnvironmentError
from webchat.logging_utils import configure_logging

QUIT_COMMANDS = {"/quit", "/exit", "/q"}

app = typer.Typer(
    name="webchat",
    help="Bridge a hosted chat page to the agent command line.",
    add_completion=False,
    rich_markup_mode="rich",
)


class LoopbackFactory:
    """Environment factory that remembers the environments it handed out."""

    def __init__(self) -> None:
        self.environments: dict[str, LoopbackEnvironment] = {}

    def __call__(self, session_key: str) -> LoopbackEnvironment:
        environment = LoopbackEnvironment()
        self.environments[session_key] = environment
        return environment


def _build(agent_home: Path | None = None, workdir: Path | None = None) -> tuple[AppRuntime, LoopbackFactory]:
    factory = LoopbackFactory()
    runtime = build_runtime(factory, agent_home=agent_home, agent_workdir=workdir)
    return runtime, factory


@app.command()
def transcript(
    session_key: str | None = typer.Argument(None, help="Session key, defaults to the configured one"),
    agent_home: Path | None = typer.Option(None, "--agent-home", help="Agent home directory"),  # noqa: B008
    as_json: bool = typer.Option(False, "--json", help="Print the raw message list"),
) -> None:
    """Print the transcript reconstructed for a session."""

    runtime, _ = _build(agent_home)
    key = session_key or runtime.settings.session_key
    if as_json:
        typer.echo(runtime.loader.load_json(key))
        return
    messages = runtime.loader.load(key)
    renderer = Renderer()
    if not messages:
        renderer.info("[dim](no history)[/dim]")
        return
    for message in messages:
        renderer.chat_message(message)


@app.command()
def ask(
    text: str = typer.Argument(..., help="Message sent to the agent"),
    session_key: str | None = typer.Option(None, "--session", "-s", help="Destination session key"),
    workdir: Path | None = typer.Option(None, "--workdir", help="Agent working directory"),  # noqa: B008
) -> None:
    """Run the agent once and print its reply."""

    runtime, _ = _build(workdir=workdir)
    key = session_key or runtime.settings.session_key
    reply = asyncio.run(runtime.invoker.invoke(text, key))
    runtime.state.close()
    if reply.error is not None:
        Renderer().error(reply.error)
        raise typer.Exit(1)
    typer.echo(reply.text or "")


@app.command()
def prelude(
    session_key: str | None = typer.Argument(None, help="Session key for the bootstrap state"),
    agent_home: Path | None = typer.Option(None, "--agent-home", help="Agent home directory"),  # noqa: B008
) -> None:
    """Print the scripts a web view installs at document start."""

    runtime, _ = _build(agent_home)
    key = session_key or runtime.settings.session_key
    bootstrap = Bootstrap(session_key=key, initial_messages=runtime.loader.load(key))
    typer.echo(render_prelude())
    typer.echo(render_bootstrap(bootstrap))


@app.command()
def chat(
    session_key: str | None = typer.Option(None, "--session", "-s", help="Session key"),
    message: str | None = typer.Option(None, "--message", "-m", help="Queue a first message from the host"),
    workdir: Path | None = typer.Option(None, "--workdir", help="Agent working directory"),  # noqa: B008
) -> None:
    """Chat with the agent in the terminal through the full bridge."""

    runtime, factory = _build(workdir=workdir)
    configure_logging(profile="chat", level=runtime.settings.log_level)
    key = session_key or runtime.settings.session_key
    asyncio.run(_run_chat(runtime, factory, key, message))


async def _run_chat(runtime: AppRuntime, factory: LoopbackFactory, session_key: str, first_message: str | None) -> None:
    renderer = Renderer()
    async with runtime:
        session = runtime.manager.show(session_key)
        environment = factory.environments[session.session_key]
        if not session.is_open:
            renderer.error("chat page resources are missing")
            return
        renderer.welcome(session.session_key, len(session.bootstrap.initial_messages))
        for message in session.bootstrap.initial_messages:
            renderer.chat_message(message)
        if first_message:
            await runtime.manager.send_message(first_message, runtime.settings.thinking, session_key)

        while True:
            if environment.outgoing.empty():
                try:
                    line = (await renderer.prompt()).strip()
                except (EOFError, KeyboardInterrupt):
                    break
                if not line:
                    continue
                if line in QUIT_COMMANDS:
                    break
            else:
                line = environment.outgoing.get_nowait().text
                renderer.chat_message(ChatMessage.from_text("user", line))
            await _send(renderer, environment, line, runtime.settings.call_timeout_seconds)
        environment.close()


async def _send(renderer: Renderer, environment: LoopbackEnvironment, text: str, timeout: float | None) -> None:
    try:
        reply = await environment.bridge.chat(text, timeout=timeout)
    except BridgeCallError as exc:
        renderer.error(str(exc))
    except TimeoutError:
        renderer.error("no reply before timeout")
    except ScriptEnvironmentError as exc:
        logger.warning("chat.post_failed error={}", exc)
        renderer.error(str(exc))
    else:
        renderer.assistant_message(reply)


if __name__ == "__main__":
    app()

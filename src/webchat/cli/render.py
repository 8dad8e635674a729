"""Terminal renderer for the webchat CLI."""

from __future__ import annotations

from prompt_toolkit import PromptSession
from rich.console import Console
from rich.markup import escape

from webchat.bridge.messages import ChatMessage

ROLE_STYLES = {"user": "bold cyan", "assistant": "bold yellow", "system": "dim"}
ROLE_LABELS = {"user": "You", "assistant": "Agent", "system": "System"}


def message_text(message: ChatMessage) -> str:
    parts = [str(block.get("text", "")) for block in message.content if block.get("type") == "text"]
    return "\n".join(part for part in parts if part)


class Renderer:
    """CLI renderer using Rich for output and prompt_toolkit for input."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self._prompt_session: PromptSession[str] | None = None

    def info(self, message: str) -> None:
        self.console.print(message)

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def welcome(self, session_key: str, history: int) -> None:
        self.console.print(f"[bold blue]webchat[/bold blue] session [cyan]{escape(session_key)}[/cyan]")
        if history:
            self.console.print(f"[dim]{history} earlier message(s)[/dim]")
        self.console.print("[dim]Type /quit to leave.[/dim]")

    def chat_message(self, message: ChatMessage) -> None:
        text = message_text(message)
        if not text:
            return
        style = ROLE_STYLES[message.role]
        label = ROLE_LABELS[message.role]
        self.console.print(f"[{style}]{label}:[/{style}] {escape(text)}")

    def assistant_message(self, text: str) -> None:
        self.chat_message(ChatMessage.from_text("assistant", text))

    async def prompt(self, message: str = "you > ") -> str:
        if self._prompt_session is None:
            self._prompt_session = PromptSession()
        return await self._prompt_session.prompt_async(message)

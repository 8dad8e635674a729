"""Configuration management for webchat."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging_utils import configure_logging
from .transcript.store import SESSION_STORE_FILE_NAME

SESSIONS_DIR_NAME = "sessions"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="WEBCHAT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Agent Configuration
    agent_home: Path = Field(
        default_factory=lambda: Path.home() / ".clawdis",
        description="Directory the agent keeps its session store and transcripts in",
    )
    agent_command: list[str] = Field(
        default_factory=lambda: ["pnpm", "clawdis", "agent"],
        description="Program and leading arguments used to invoke the agent",
    )
    agent_workdir: Path | None = Field(None, description="Working directory for agent invocations")
    agent_max_concurrency: int = Field(default=0, ge=0, description="Concurrent agent processes, 0 for unbounded")

    # Session Configuration
    session_key: str = Field(default="main", description="Session key used when none is given")
    thinking: str = Field(default="default", description="Thinking level attached to enqueued messages")
    call_timeout_seconds: float | None = Field(None, description="Script-side timeout for bridge calls")
    resources_path: Path | None = Field(None, description="Directory holding the WebChat page bundle")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")

    @property
    def sessions_dir(self) -> Path:
        return self.agent_home.expanduser() / SESSIONS_DIR_NAME

    @property
    def session_store_path(self) -> Path:
        return self.sessions_dir / SESSION_STORE_FILE_NAME

    def resolve_workdir(self) -> Path:
        return (self.agent_workdir or Path.cwd()).expanduser()


def get_settings(**overrides: object) -> Settings:
    """Get application settings.

    Args:
        overrides: Optional field overrides, applied on top of environment values

    Returns:
        Settings instance
    """
    settings = Settings(**overrides)  # type: ignore[arg-type]

    configure_logging(level=settings.log_level)

    return settings

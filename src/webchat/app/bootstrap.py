"""Runtime bootstrap helpers."""

from __future__ import annotations

from webchat.agent.executor import CommandExecutor
from webchat.app.runtime import AppRuntime, EnvironmentFactory
from webchat.config import get_settings


def build_runtime(
    environment_factory: EnvironmentFactory,
    *,
    executor: CommandExecutor | None = None,
    **overrides: object,
) -> AppRuntime:
    """Build the app runtime from environment settings plus explicit overrides."""

    updates = {key: value for key, value in overrides.items() if value is not None}
    settings = get_settings(**updates)
    return AppRuntime(settings, environment_factory, executor=executor)

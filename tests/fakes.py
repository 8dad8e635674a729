from __future__ import annotations

import json
from pathlib import Path

from webchat.agent.executor import CommandResult, CommandSpec


class FakeExecutor:
    """Command executor double that records specs and replays canned results."""

    def __init__(self, result: CommandResult | None = None, error: OSError | None = None) -> None:
        self.result = result or CommandResult(exit_code=0, stdout=b'{"payloads":[{"text":"hi"}]}')
        self.error = error
        self.specs: list[CommandSpec] = []

    async def run(self, spec: CommandSpec) -> CommandResult:
        self.specs.append(spec)
        if self.error is not None:
            raise self.error
        return self.result


def write_session(sessions_dir: Path, key: str, session_id: str, lines: list[str]) -> Path:
    sessions_dir.mkdir(parents=True, exist_ok=True)
    store = sessions_dir / "sessions.json"
    existing = json.loads(store.read_text(encoding="utf-8")) if store.exists() else {}
    existing[key] = {"sessionId": session_id, "updatedAt": 0}
    store.write_text(json.dumps(existing), encoding="utf-8")
    log = sessions_dir / f"{session_id}.jsonl"
    log.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return log

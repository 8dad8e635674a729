"""Read-only view of the agent's session store."""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger

SESSION_ID_FIELD = "sessionId"
SESSION_STORE_FILE_NAME = "sessions.json"


class SessionStore:
    """Resolve logical session keys to session ids via ``sessions.json``.

    The agent owns the file; this class never writes it. A missing, unreadable
    or malformed store simply resolves nothing.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def session_id(self, session_key: str) -> str | None:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("sessions.store_missing path={}", self.path)
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("sessions.store_unreadable path={} error={}", self.path, exc)
            return None
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("sessions.store_malformed path={}", self.path)
            return None
        if not isinstance(decoded, dict):
            return None
        entry = decoded.get(session_key)
        if not isinstance(entry, dict):
            return None
        session_id = entry.get(SESSION_ID_FIELD)
        return session_id if isinstance(session_id, str) and session_id else None

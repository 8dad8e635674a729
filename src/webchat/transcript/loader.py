"""Rebuild a session's chat history from its append-only JSONL log."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from webchat.bridge.messages import ROLES, ChatMessage
from webchat.transcript.store import SESSION_STORE_FILE_NAME, SessionStore

TRANSCRIPT_FILE_SUFFIX = ".jsonl"


def message_from_record(record: object) -> ChatMessage | None:
    """Normalize one decoded log record, or return ``None`` to skip it.

    Records either carry the message under ``message`` or are the message
    themselves. Content comes from a ``content`` list, else from a flat
    ``text`` string.
    """
    if not isinstance(record, dict):
        return None
    nested = record.get("message")
    body: dict[str, Any] = nested if isinstance(nested, dict) else record
    role = body.get("role")
    if not isinstance(role, str) or role not in ROLES:
        return None

    content = body.get("content")
    if isinstance(content, list) and all(isinstance(block, dict) for block in content):
        try:
            return ChatMessage(role=role, content=content)
        except ValidationError:
            return None
    text = body.get("text")
    if isinstance(text, str):
        return ChatMessage.from_text(role, text)
    return None


def parse_transcript(lines: Iterable[str]) -> list[ChatMessage]:
    messages: list[ChatMessage] = []
    for raw_line in lines:
        line = raw_line.strip()
        if not line:
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError:
            continue
        message = message_from_record(record)
        if message is not None:
            messages.append(message)
    return messages


class TranscriptLoader:
    """Read-only, uncached transcript reconstruction keyed by session key."""

    def __init__(self, sessions_dir: Path, store: SessionStore | None = None) -> None:
        self.sessions_dir = sessions_dir
        self.store = store or SessionStore(sessions_dir / SESSION_STORE_FILE_NAME)

    def transcript_path(self, session_id: str) -> Path:
        return self.sessions_dir / f"{session_id}{TRANSCRIPT_FILE_SUFFIX}"

    def load(self, session_key: str) -> list[ChatMessage]:
        session_id = self.store.session_id(session_key)
        if session_id is None:
            logger.debug("transcript.no_session key={}", session_key)
            return []
        path = self.transcript_path(session_id)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("transcript.missing key={} path={}", session_key, path)
            return []
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("transcript.unreadable key={} error={}", session_key, exc)
            return []
        messages = parse_transcript(content.splitlines())
        logger.debug("transcript.loaded key={} messages={}", session_key, len(messages))
        return messages

    def load_json(self, session_key: str) -> str:
        payload = [message.model_dump(mode="json") for message in self.load(session_key)]
        return json.dumps(payload, ensure_ascii=False)

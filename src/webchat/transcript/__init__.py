"""Transcript ingestion helpers."""

from webchat.transcript.loader import TranscriptLoader, parse_transcript
from webchat.transcript.store import SessionStore

__all__ = ["SessionStore", "TranscriptLoader", "parse_transcript"]

"""webchat CLI bootstrap."""

from __future__ import annotations

from webchat.cli import app

if __name__ == "__main__":
    app()

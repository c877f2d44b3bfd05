"""Locations of the console's on-disk state."""

from __future__ import annotations

import os
from pathlib import Path

STATE_DIR_ENV = "SHADOWPAY_STATE_DIR"
DEFAULT_STATE_DIR = Path("~/.shadowpay")


def state_dir() -> Path:
    """Return the absolute state directory, honouring ``SHADOWPAY_STATE_DIR``."""

    override = os.environ.get(STATE_DIR_ENV)
    base = Path(override) if override else DEFAULT_STATE_DIR
    return base.expanduser().resolve()


def ensure_dir(path: Path) -> Path:
    """Create ``path`` (owner-only when new) and return it."""

    path.mkdir(mode=0o700, parents=True, exist_ok=True)
    return path


def log_file() -> Path:
    return state_dir() / "logs" / "shadowpay.log"


def audit_log() -> Path:
    return state_dir() / "audit.jsonl"


def audit_key() -> Path:
    return state_dir() / "audit_ed25519.pem"


__all__ = ["STATE_DIR_ENV", "audit_key", "audit_log", "ensure_dir", "log_file", "state_dir"]

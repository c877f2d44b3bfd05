"""Rotating forensic logger emitting tamper-evident JSON lines.

Every :func:`info` record goes to two places: the rotating ``shadowpay.log``
and ``audit.jsonl``, where each entry carries the hash of the one before it and
an Ed25519 signature over its own canonical form.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import os
import threading
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from . import paths

LOGGER_NAME = "shadowpay"


def get_logger() -> logging.Logger:
    """Return the shared ``shadowpay`` logger, attaching the file handler once."""

    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    target = paths.log_file()
    paths.ensure_dir(target.parent)
    handler = RotatingFileHandler(target, maxBytes=1_000_000, backupCount=5)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.setLevel(logging.INFO)
    logger.addHandler(handler)
    # The curses screen owns stdout/stderr while the console runs.
    logger.propagate = False
    return logger


def _public_key_b64(key: ed25519.Ed25519PrivateKey) -> str:
    raw = key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return base64.b64encode(raw).decode("ascii")


def _load_or_create_key(key_path: Path) -> ed25519.Ed25519PrivateKey:
    if key_path.exists():
        key = serialization.load_pem_private_key(key_path.read_bytes(), password=None)
        if not isinstance(key, ed25519.Ed25519PrivateKey):
            raise ValueError(f"{key_path} does not hold an Ed25519 key")
        return key
    paths.ensure_dir(key_path.parent)
    key = ed25519.Ed25519PrivateKey.generate()
    pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    key_path.write_bytes(pem)
    os.chmod(key_path, 0o600)
    return key


def _read_head(log_path: Path) -> Optional[str]:
    """Return the ``hash`` of the last entry in ``log_path``, if readable."""

    last = ""
    try:
        with log_path.open("r", encoding="utf-8") as fh:
            for line in fh:
                if line.strip():
                    last = line
    except FileNotFoundError:
        return None
    if not last:
        return None
    try:
        return json.loads(last).get("hash")
    except json.JSONDecodeError:
        return None


class AuditChain:
    """Append-only signed hash chain backed by one JSON-lines file.

    The signing key and the chain head are loaded on the first append and then
    kept in memory, so appending never re-reads the log.
    """

    def __init__(self, log_path: Path, key_path: Path) -> None:
        self.log_path = log_path
        self.key_path = key_path
        self._lock = threading.Lock()
        self._key: Optional[ed25519.Ed25519PrivateKey] = None
        self._public_key = ""
        self._head: Optional[str] = None

    def _ensure_loaded(self) -> ed25519.Ed25519PrivateKey:
        if self._key is None:
            self._key = _load_or_create_key(self.key_path)
            self._public_key = _public_key_b64(self._key)
            self._head = _read_head(self.log_path)
        return self._key

    @property
    def head(self) -> Optional[str]:
        with self._lock:
            self._ensure_loaded()
            return self._head

    def append(self, record: Dict[str, object]) -> str:
        """Sign and append ``record``; return the new chain head."""

        with self._lock:
            key = self._ensure_loaded()
            entry: Dict[str, object] = {"ts": time.time(), "prev": self._head, "record": record}
            canonical = json.dumps(entry, sort_keys=True, separators=(",", ":")).encode("utf-8")
            digest = hashlib.sha256(canonical)
            entry["hash"] = digest.hexdigest()
            entry["signature"] = base64.b64encode(key.sign(digest.digest())).decode("ascii")
            entry["public_key"] = self._public_key
            paths.ensure_dir(self.log_path.parent)
            with self.log_path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(entry, sort_keys=True) + "\n")
            self._head = entry["hash"]  # type: ignore[assignment]
            return self._head


_CHAINS: Dict[Path, AuditChain] = {}
_CHAINS_LOCK = threading.Lock()


def audit_chain() -> AuditChain:
    """Return the chain for the current state directory."""

    log_path = paths.audit_log()
    with _CHAINS_LOCK:
        chain = _CHAINS.get(log_path)
        if chain is None:
            chain = _CHAINS[log_path] = AuditChain(log_path, paths.audit_key())
        return chain


def info(record: Dict[str, object]) -> None:
    """Write a forensic JSON record to the rotating log and the audit chain."""

    get_logger().info(json.dumps(record))
    audit_chain().append(record)


def mask_secret(value: Optional[str]) -> str:
    """Return a display-safe preview of ``value``."""

    if not value:
        return ""
    if len(value) > 12:
        return f"{value[:4]}...{value[-4:]}"
    return "*" * len(value)


__all__ = ["AuditChain", "LOGGER_NAME", "audit_chain", "get_logger", "info", "mask_secret"]

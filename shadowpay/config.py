"""Runtime settings resolved from the environment, ``.env`` and the keyring."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

import keyring
from dotenv import load_dotenv, set_key
from keyring.errors import KeyringError

from .client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, ShadowPay
from .errors import ConfigError
from .utils import logbook

API_KEY_ENV = "SHADOWPAY_API_KEY"
BASE_URL_ENV = "SHADOWPAY_BASE_URL"
TIMEOUT_ENV = "SHADOWPAY_TIMEOUT"
KEYRING_SERVICE = "shadowpay"
KEYRING_USERNAME = "api_key"
ENV_PATH_DEFAULT = Path(".env")


@dataclass(frozen=True)
class Settings:
    """Connection settings for the remote API."""

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    api_key_source: str = ""
    env_file: Path = ENV_PATH_DEFAULT

    @property
    def connected(self) -> bool:
        return bool(self.api_key)

    def with_api_key(self, api_key: str, source: str) -> "Settings":
        return replace(self, api_key=api_key, api_key_source=source if api_key else "")

    def with_base_url(self, base_url: str) -> "Settings":
        return replace(self, base_url=base_url.rstrip("/"))


def _keyring_get() -> Optional[str]:
    try:
        return keyring.get_password(KEYRING_SERVICE, KEYRING_USERNAME)
    except KeyringError as exc:
        logbook.get_logger().warning("keyring lookup failed: %s", exc)
        return None


def _parse_timeout(raw: Optional[str]) -> float:
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{TIMEOUT_ENV} must be a number of seconds, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{TIMEOUT_ENV} must be positive, got {raw!r}")
    return value


def validate_base_url(url: str) -> str:
    """Return ``url`` without a trailing slash or raise :class:`ConfigError`."""

    cleaned = url.strip().rstrip("/")
    if not cleaned.startswith(("http://", "https://")):
        raise ConfigError("endpoint must start with http:// or https://")
    if len(cleaned.split("://", 1)[1]) == 0:
        raise ConfigError("endpoint is missing a host")
    return cleaned


def load_settings(
    env_file: Optional[Path] = None,
    *,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
) -> Settings:
    """Resolve settings; explicit arguments win over environment and keyring."""

    path = Path(env_file) if env_file is not None else ENV_PATH_DEFAULT
    load_dotenv(path, override=False)

    source = ""
    key = api_key or ""
    if key:
        source = "argument"
    else:
        key = os.getenv(API_KEY_ENV, "")
        if key:
            source = "env"
        else:
            key = _keyring_get() or ""
            if key:
                source = "keyring"

    url = base_url or os.getenv(BASE_URL_ENV) or DEFAULT_BASE_URL
    return Settings(
        api_key=key,
        base_url=validate_base_url(url),
        timeout=_parse_timeout(os.getenv(TIMEOUT_ENV)),
        api_key_source=source,
        env_file=path,
    )


def build_client(settings: Settings, **kwargs: Any) -> Optional[ShadowPay]:
    """Return a client for ``settings`` or ``None`` when no API key is set."""

    if not settings.connected:
        return None
    return ShadowPay(
        settings.api_key,
        base_url=settings.base_url,
        timeout=settings.timeout,
        **kwargs,
    )


def store_api_key(api_key: str) -> None:
    try:
        keyring.set_password(KEYRING_SERVICE, KEYRING_USERNAME, api_key)
    except KeyringError as exc:
        logbook.get_logger().warning("keyring update failed: %s", exc)
        raise ConfigError(f"could not store API key in keyring: {exc}") from exc


def clear_api_key() -> bool:
    """Remove the stored key; return ``False`` when nothing was stored."""

    try:
        if keyring.get_password(KEYRING_SERVICE, KEYRING_USERNAME) is None:
            return False
        keyring.delete_password(KEYRING_SERVICE, KEYRING_USERNAME)
    except KeyringError as exc:
        logbook.get_logger().warning("keyring update failed: %s", exc)
        raise ConfigError(f"could not clear API key from keyring: {exc}") from exc
    return True


def store_base_url(env_file: Path, base_url: str) -> None:
    try:
        env_file.touch(exist_ok=True)
        set_key(str(env_file), BASE_URL_ENV, base_url, quote_mode="never")
    except OSError as exc:
        raise ConfigError(f"could not write {env_file}: {exc}") from exc


__all__ = [
    "API_KEY_ENV",
    "BASE_URL_ENV",
    "Settings",
    "build_client",
    "clear_api_key",
    "load_settings",
    "store_api_key",
    "store_base_url",
    "validate_base_url",
]

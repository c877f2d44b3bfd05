"""Error taxonomy shared by the API client and the console."""

from __future__ import annotations

from typing import Optional


class ShadowPayError(Exception):
    """Base class for every failure surfaced to the operator."""


class APIError(ShadowPayError):
    """Structured error returned by the ShadowPay API (HTTP status >= 400)."""

    def __init__(self, status_code: int, message: str, detail: Optional[str] = None) -> None:
        self.status_code = status_code
        self.message = message
        self.detail = detail or None
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.detail:
            return f"shadowpay: {self.message} (status {self.status_code}) - {self.detail}"
        return f"shadowpay: {self.message} (status {self.status_code})"


class TransportError(ShadowPayError):
    """The request never produced an HTTP response."""


class DecodeError(ShadowPayError):
    """The API answered with a body that could not be decoded."""


class InputError(ShadowPayError):
    """Operator input rejected before any request was built."""


class ConfigError(ShadowPayError):
    """Settings could not be loaded or persisted."""


__all__ = [
    "APIError",
    "ConfigError",
    "DecodeError",
    "InputError",
    "ShadowPayError",
    "TransportError",
]

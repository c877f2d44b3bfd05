"""Messages delivered to the console's update loop.

``Message`` is a closed union: the update step handles each member explicitly
and rejects anything else.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Severity(Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class StatusMessage:
    """The last operation result shown beneath the menu."""

    severity: Severity
    text: str

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR


@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class Error:
    text: str


@dataclass(frozen=True)
class Loading:
    text: str


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class KeyInput:
    """A normalised key name such as ``"up"``, ``"enter"`` or ``"a"``."""

    key: str


Message = Union[Success, Error, Loading, Resize, KeyInput]

MESSAGE_TYPES = (Success, Error, Loading, Resize, KeyInput)


def error_from(exc: BaseException) -> Error:
    """Render ``exc`` as the operator-facing error text."""

    return Error(f"Error: {exc}")


__all__ = [
    "Error",
    "KeyInput",
    "Loading",
    "MESSAGE_TYPES",
    "Message",
    "Resize",
    "Severity",
    "StatusMessage",
    "Success",
    "error_from",
]

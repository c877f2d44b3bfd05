"""State machine behind the operator console.

:class:`Model` is the only mutable state the console has and
:meth:`Model.update` is the only thing allowed to change it. Key presses,
resizes and command results all arrive as messages, one at a time, so the
model never needs a lock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Optional, Tuple

import httpx

from .. import config
from ..client import ShadowPay
from ..config import Settings
from ..utils import logbook, mask_secret
from .commands import Command
from .form import InputForm
from .messages import (
    Error,
    KeyInput,
    Loading,
    Message,
    Resize,
    Severity,
    StatusMessage,
    Success,
)
from .operations import NOT_CONNECTED, invoke, lookup
from .views import BACK, OPEN_VIEWS, TITLES, View, items_for, last_index, main_menu_target

UP_KEYS = {"up", "k"}
DOWN_KEYS = {"down", "j"}
ENTER_KEYS = {"enter"}
CANCEL_KEYS = {"esc"}
QUIT_KEYS = {"q", "ctrl+c"}
FORM_CANCEL_KEYS = {"esc", "ctrl+c"}


def _serialize(value: object) -> object:
    """Make ``value`` JSON-serialisable for forensic logging."""

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _serialize(item) for key, item in value.items()}
    return str(value)


def _menu_log(action: str, **fields: object) -> None:
    """Emit a forensic menu log entry with ``action`` and ``fields``."""

    timestamp = datetime.now(UTC).isoformat(timespec="seconds").replace("+00:00", "Z")
    payload = {key: _serialize(value) for key, value in fields.items()}
    details = " ".join(f"{key}={payload[key]}" for key in sorted(payload))
    message = f"[ShadowPay.Menu] {action}"
    if details:
        message = f"{message} {details}"
    record = {
        "timestamp": timestamp,
        "channel": "ShadowPay.Menu",
        "action": action,
        **payload,
        "message": message,
    }
    logbook.info(record)


@dataclass
class Model:
    settings: Settings = field(default_factory=Settings)
    client: Optional[ShadowPay] = None
    transport: Optional[httpx.BaseTransport] = None
    view: View = View.MAIN_MENU
    cursor: int = 0
    status: Optional[StatusMessage] = None
    form: Optional[InputForm] = None
    in_flight: bool = False
    progress_label: str = ""
    width: int = 0
    height: int = 0
    quit_requested: bool = False

    @classmethod
    def from_settings(
        cls, settings: Settings, *, transport: Optional[httpx.BaseTransport] = None
    ) -> "Model":
        """Build a model whose client reflects ``settings``."""

        client = config.build_client(settings, transport=transport)
        return cls(settings=settings, client=client, transport=transport)

    @property
    def form_active(self) -> bool:
        return self.form is not None

    @property
    def items(self) -> Tuple[str, ...]:
        return items_for(self.view)

    @property
    def menu_path(self) -> str:
        if self.view is View.MAIN_MENU:
            return TITLES[View.MAIN_MENU]
        return f"{TITLES[View.MAIN_MENU]} › {TITLES[self.view]}"

    # -- state transitions -------------------------------------------------

    def update(self, message: Message) -> Optional[Command]:
        """Apply ``message`` and return the follow-up command, if any."""

        if isinstance(message, KeyInput):
            return self._on_key(message.key)
        if isinstance(message, Success):
            self._resolve(StatusMessage(Severity.SUCCESS, message.text))
            return None
        if isinstance(message, Error):
            self._resolve(StatusMessage(Severity.ERROR, message.text))
            return None
        if isinstance(message, Loading):
            self._on_loading(message.text)
            return None
        if isinstance(message, Resize):
            self.width = message.width
            self.height = message.height
            return None
        raise TypeError(f"unsupported message type: {type(message).__name__}")

    def apply_settings(self, settings: Settings) -> None:
        """Swap in ``settings`` and rebuild the client to match."""

        self.settings = settings
        self.client = config.build_client(settings, transport=self.transport)
        _menu_log(
            "settings",
            menu=self.menu_path,
            api_key=mask_secret(settings.api_key),
            base_url=settings.base_url,
            connected=settings.connected,
        )

    def _resolve(self, status: StatusMessage) -> None:
        self.form = None
        self.in_flight = False
        self.progress_label = ""
        self.status = status
        _menu_log("result", menu=self.menu_path, severity=status.severity.value)

    def _on_loading(self, label: str) -> None:
        if self.form_active:
            _menu_log("loading_ignored", menu=self.menu_path, label=label)
            return
        self.in_flight = True
        self.progress_label = label

    def _on_key(self, key: str) -> Optional[Command]:
        if self.form is not None:
            return self._on_form_key(key)
        if self.in_flight:
            if key in CANCEL_KEYS:
                self.in_flight = False
                self.progress_label = ""
                _menu_log("dismiss_progress", menu=self.menu_path)
            return None

        if key in UP_KEYS:
            self.cursor = max(0, self.cursor - 1)
        elif key in DOWN_KEYS:
            self.cursor = min(last_index(self.view), self.cursor + 1)
        elif key in ENTER_KEYS:
            return self._confirm()
        elif key in CANCEL_KEYS:
            if self.view is not View.MAIN_MENU:
                self._enter(View.MAIN_MENU, reason="cancel")
        elif key in QUIT_KEYS:
            if self.view is View.MAIN_MENU:
                self._quit(key)
            else:
                self._enter(View.MAIN_MENU, reason="cancel")
        elif len(key) == 1 and key.isdigit():
            self._jump(key)
        return None

    def _on_form_key(self, key: str) -> Optional[Command]:
        form = self.form
        assert form is not None
        if key in FORM_CANCEL_KEYS:
            self.form = None
            self.status = None
            _menu_log("form_cancel", menu=self.menu_path, form=form.title)
            return None

        outcome = form.handle_key(key)
        if not outcome.submitted:
            return None
        assert outcome.values is not None
        self.form = None
        _menu_log("form_submit", menu=self.menu_path, form=form.title, fields=len(outcome.values))
        return form.submit(list(outcome.values))

    def _jump(self, key: str) -> None:
        if key == "0":
            self.cursor = last_index(self.view)
            return
        index = int(key) - 1
        if index <= last_index(self.view):
            self.cursor = index
        else:
            _menu_log("invalid_key", menu=self.menu_path, key=key)

    def _confirm(self) -> Optional[Command]:
        selection = self.items[self.cursor]
        if self.view is View.MAIN_MENU:
            target = main_menu_target(self.cursor)
            if target is None:
                self._quit("exit")
                return None
            if target not in OPEN_VIEWS and self.client is None:
                self.status = StatusMessage(Severity.ERROR, NOT_CONNECTED)
                _menu_log("blocked", menu=self.menu_path, selection=selection)
                return None
            self._enter(target, reason="select")
            return None

        if selection == BACK:
            self._enter(View.MAIN_MENU, reason="back")
            return None

        operation = lookup(self.view, self.cursor)
        if operation is None:
            _menu_log("missing_operation", menu=self.menu_path, selection=selection)
            return None
        if operation.has_form:
            self.form = InputForm.create(
                operation.title,
                operation.fields,
                lambda values: invoke(operation, self, values),
            )
            _menu_log("form_open", menu=self.menu_path, form=operation.title)
            return None

        _menu_log("select", menu=self.menu_path, selection=selection)
        return invoke(operation, self, ())

    def _enter(self, view: View, *, reason: str) -> None:
        previous = self.menu_path
        self.view = view
        self.cursor = 0
        self.status = None
        _menu_log("navigate", menu=previous, target=self.menu_path, reason=reason)

    def _quit(self, trigger: str) -> None:
        self.quit_requested = True
        _menu_log("quit", menu=self.menu_path, trigger=trigger)


__all__ = ["Model"]

"""Multi-field text entry widget used by every operation screen."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Tuple

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from .commands import Command

CHAR_LIMIT = 156

FORWARD_KEYS = {"tab", "down"}
BACKWARD_KEYS = {"shift+tab", "up"}
SUBMIT_KEYS = {"enter"}

SubmitCallback = Callable[[List[str]], "Command"]


@dataclass
class Field:
    placeholder: str
    value: str = ""
    focused: bool = False


@dataclass(frozen=True)
class FormOutcome:
    """Result of feeding one key to a form; ``values`` is set on submit."""

    values: Optional[Tuple[str, ...]] = None

    @property
    def submitted(self) -> bool:
        return self.values is not None


PENDING = FormOutcome()


@dataclass
class InputForm:
    title: str
    fields: List[Field]
    submit: SubmitCallback
    focus_index: int = 0
    char_limit: int = CHAR_LIMIT

    @classmethod
    def create(
        cls,
        title: str,
        labels: Sequence[str],
        submit: SubmitCallback,
        *,
        char_limit: int = CHAR_LIMIT,
    ) -> "InputForm":
        """Build a form with one empty field per label, focus on the first."""

        if not labels:
            raise ValueError("an input form needs at least one field")
        fields = [Field(placeholder=label) for label in labels]
        fields[0].focused = True
        return cls(title=title, fields=fields, submit=submit, char_limit=char_limit)

    @property
    def focused_field(self) -> Field:
        return self.fields[self.focus_index]

    @property
    def on_last_field(self) -> bool:
        return self.focus_index == len(self.fields) - 1

    def values(self) -> Tuple[str, ...]:
        return tuple(item.value for item in self.fields)

    def _set_focus(self, index: int) -> None:
        self.focus_index = index % len(self.fields)
        for idx, item in enumerate(self.fields):
            item.focused = idx == self.focus_index

    def focus_next(self) -> None:
        self._set_focus(self.focus_index + 1)

    def focus_previous(self) -> None:
        self._set_focus(self.focus_index - 1 + len(self.fields))

    def handle_key(self, key: str) -> FormOutcome:
        """Apply ``key`` and report whether the form was submitted."""

        if key in SUBMIT_KEYS:
            if self.on_last_field:
                return FormOutcome(values=self.values())
            self.focus_next()
            return PENDING
        if key in FORWARD_KEYS:
            self.focus_next()
        elif key in BACKWARD_KEYS:
            self.focus_previous()
        elif key == "backspace":
            current = self.focused_field
            current.value = current.value[:-1]
        elif key == "ctrl+u":
            self.focused_field.value = ""
        elif len(key) == 1 and key.isprintable():
            current = self.focused_field
            if len(current.value) < self.char_limit:
                current.value += key
        return PENDING


__all__ = ["CHAR_LIMIT", "Field", "FormOutcome", "InputForm", "SubmitCallback"]

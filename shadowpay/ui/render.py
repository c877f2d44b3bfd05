"""Pure rendering of a :class:`~shadowpay.ui.model.Model` into styled lines.

The curses runtime maps each line's ``style`` onto its palette; nothing in
this module touches the terminal.
"""

from __future__ import annotations

from textwrap import wrap
from typing import TYPE_CHECKING, List, NamedTuple

from ..utils import mask_secret
from .views import BACK, EXIT, TAGLINES, TITLES, View

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from .form import InputForm
    from .model import Model

MIN_HEIGHT = 18
MIN_WIDTH = 60

MENU_HINT = "↑/↓ or numbers to move • enter: select"
MAIN_FOOTER = "q: quit"
SUB_FOOTER = "esc/q: back to main menu"
FORM_FOOTER = "tab/shift+tab: navigate • enter: next/submit • ctrl+u: clear • esc: cancel"
PROGRESS_FOOTER = "esc: dismiss (the result is still reported when it arrives)"

# Form fields echoed as asterisks.
SECRET_FIELDS = frozenset({"API Key", "Private Key (hex)"})


class Line(NamedTuple):
    text: str
    style: str = "detail_text"
    indent: int = 0


def _wrap_text(text: str, width: int) -> List[str]:
    """Wrap ``text`` for the available ``width`` guarding against small panes."""

    if width <= 0:
        return []
    return wrap(text, width) or [""]


def _paragraph(text: str, width: int, style: str, indent: int = 0) -> List[Line]:
    lines: List[Line] = []
    for raw in text.splitlines() or [""]:
        for chunk in _wrap_text(raw, max(1, width - indent)):
            lines.append(Line(chunk, style, indent))
    return lines


def _item_prefix(index: int, label: str, total: int) -> str:
    if index == total - 1 and label in {BACK, EXIT}:
        return "0"
    return str(index + 1)


def _header(model: "Model", width: int) -> List[Line]:
    title = TITLES[model.view]
    lines = [Line(title if model.view is View.MAIN_MENU else model.menu_path, "header")]
    if model.view is View.MAIN_MENU:
        if model.client is not None:
            lines.append(Line("✓ Connected", "status_ok"))
        else:
            lines.append(Line("✗ Not Connected (Set API Key)", "status_error"))
    tagline = TAGLINES.get(model.view)
    if tagline:
        lines.extend(_paragraph(tagline, width, "subtitle"))
    lines.append(Line("─" * max(0, width - 2), "divider"))
    return lines


def _settings_panel(model: "Model", width: int) -> List[Line]:
    settings = model.settings
    lines: List[Line] = []
    if settings.api_key:
        source = f" (from {settings.api_key_source})" if settings.api_key_source else ""
        lines.append(Line(f"✓ API Key: {mask_secret(settings.api_key)}{source}", "status_ok"))
    else:
        lines.append(Line("⚠ API Key not set", "status_error"))
    lines.append(Line(f"Endpoint: {settings.base_url}", "detail_text"))
    lines.append(Line(f"Timeout: {settings.timeout:g}s", "detail_text"))
    lines.extend(
        _paragraph(
            "Keys set here are stored in the system keyring. You can also export "
            "SHADOWPAY_API_KEY or add it to a .env file.",
            width,
            "subtitle",
        )
    )
    lines.append(Line(""))
    return lines


def _menu(model: "Model") -> List[Line]:
    items = model.items
    lines: List[Line] = []
    for idx, label in enumerate(items):
        style = "menu_active" if idx == model.cursor else "menu_inactive"
        marker = "❯" if idx == model.cursor else " "
        lines.append(Line(f"{marker} {_item_prefix(idx, label, len(items))}. {label}", style, 2))
    return lines


def _status(model: "Model", width: int) -> List[Line]:
    if model.status is None:
        return []
    style = "status_error" if model.status.is_error else "status_ok"
    lines = [Line(""), Line("Last action:", "detail_heading", 2)]
    lines.extend(_paragraph(model.status.text, width, style, 4))
    return lines


def render_form(form: "InputForm", width: int) -> List[Line]:
    lines = [Line(form.title, "header"), Line("─" * max(0, width - 2), "divider")]
    for idx, item in enumerate(form.fields):
        marker = "❯" if item.focused else " "
        style = "field_active" if item.focused else "field_inactive"
        lines.append(Line(f"{marker} {idx + 1}. {item.placeholder}", "detail_heading", 2))
        shown = "*" * len(item.value) if item.placeholder in SECRET_FIELDS else item.value
        value = shown + ("_" if item.focused else "")
        lines.append(Line(value or "·", style, 6))
    lines.append(Line(""))
    lines.append(Line(FORM_FOOTER, "footer"))
    return lines


def render_progress(model: "Model", width: int) -> List[Line]:
    lines = [Line(model.menu_path, "header"), Line("─" * max(0, width - 2), "divider")]
    lines.append(Line("Processing...", "detail_heading"))
    lines.extend(_paragraph(f"⠋ {model.progress_label}", width, "progress", 2))
    lines.append(Line(""))
    lines.append(Line(PROGRESS_FOOTER, "footer"))
    return lines


def render_resize_hint() -> List[Line]:
    return [
        Line(f"ShadowPay needs at least {MIN_WIDTH}x{MIN_HEIGHT} to render the console.", "title"),
        Line(""),
        Line("Resize your terminal to continue.", "footer"),
    ]


def render(model: "Model") -> List[Line]:
    """Return the lines to draw for ``model``, top to bottom."""

    width = model.width
    if width <= 0:
        return [Line("Loading...", "subtitle")]
    if width < MIN_WIDTH or model.height < MIN_HEIGHT:
        return render_resize_hint()
    if model.form is not None:
        return render_form(model.form, width)
    if model.in_flight:
        return render_progress(model, width)

    lines = _header(model, width)
    if model.view is View.SETTINGS:
        lines.extend(_settings_panel(model, width))
    lines.extend(_menu(model))
    lines.extend(_status(model, width))
    lines.append(Line(""))
    lines.append(Line(MENU_HINT, "subtitle"))
    footer = MAIN_FOOTER if model.view is View.MAIN_MENU else SUB_FOOTER
    lines.append(Line(footer, "footer"))
    return lines


__all__ = ["Line", "MIN_HEIGHT", "MIN_WIDTH", "render"]

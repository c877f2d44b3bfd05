from __future__ import annotations

from shadowpay.ui.messages import Error, KeyInput, Loading, Resize
from shadowpay.ui.model import Model
from shadowpay.ui.render import FORM_FOOTER, MIN_HEIGHT, MIN_WIDTH, SUB_FOOTER, render
from shadowpay.ui.views import View


def texts(model: Model) -> list[str]:
    return [line.text for line in render(model)]


def sized(model: Model, width: int = 100, height: int = 40) -> Model:
    model.update(Resize(width=width, height=height))
    return model


def test_placeholder_before_first_resize(model: Model) -> None:
    assert texts(model) == ["Loading..."]


def test_small_terminal_shows_resize_hint(model: Model) -> None:
    sized(model, MIN_WIDTH - 1, MIN_HEIGHT)

    assert "Resize your terminal to continue." in texts(model)


def test_main_menu_shows_connection_and_numbered_items(model: Model) -> None:
    lines = render(sized(model))

    assert lines[0].text == "ShadowPay Console"
    assert lines[1].text == "✓ Connected"
    assert any(line.text == "❯ 1. ZK Payments" and line.style == "menu_active" for line in lines)
    assert "  0. Exit" in [line.text for line in lines]


def test_main_menu_flags_missing_api_key(offline_model: Model) -> None:
    lines = render(sized(offline_model))

    assert lines[1].text == "✗ Not Connected (Set API Key)"
    assert lines[1].style == "status_error"


def test_sub_view_shows_breadcrumb_and_back(model: Model) -> None:
    sized(model).update(KeyInput("2"))
    model.update(KeyInput("enter"))
    assert model.view is View.POOL

    rendered = texts(model)

    assert rendered[0] == "ShadowPay Console › Privacy Pool"
    assert "  0. Back" in rendered
    assert rendered[-1] == SUB_FOOTER


def test_status_is_rendered_with_error_style(model: Model) -> None:
    sized(model).update(Error("Error: shadowpay: insufficient balance (status 400)"))

    lines = render(model)
    headings = [idx for idx, line in enumerate(lines) if line.text == "Last action:"]

    assert headings
    status_line = lines[headings[0] + 1]
    assert status_line.style == "status_error"
    assert "insufficient balance" in status_line.text


def test_settings_panel_masks_api_key(model: Model) -> None:
    sized(model)
    model.view = View.SETTINGS

    rendered = "\n".join(texts(model))

    assert "✓ API Key: sk_t...cdef" in rendered
    assert "sk_test_0123456789abcdef" not in rendered


def test_form_masks_secret_fields(model: Model) -> None:
    sized(model)
    model.view = View.SETTINGS
    model.update(KeyInput("enter"))
    for char in "secret":
        model.update(KeyInput(char))

    rendered = texts(model)

    assert rendered[0] == "Set API Key"
    assert "******_" in rendered
    assert "secret" not in "".join(rendered)
    assert rendered[-1] == FORM_FOOTER


def test_progress_view_replaces_menu(model: Model) -> None:
    sized(model).update(Loading("Loading analytics..."))

    rendered = texts(model)

    assert "Processing..." in rendered
    assert "⠋ Loading analytics..." in rendered
    assert not any(text.endswith("ZK Payments") for text in rendered)

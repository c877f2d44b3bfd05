"""Curses runtime for the ShadowPay console.

Key presses and resizes are turned into messages and posted to the same bus
that command results land on, so the model sees one ordered stream.
"""

from __future__ import annotations

import curses
from typing import Dict, Iterable, Optional, Sequence

import httpx

from ..config import Settings
from ..utils import logbook
from .commands import CommandScheduler, MessageBus
from .messages import KeyInput, Message, Resize
from .model import Model
from .render import Line, render

POLL_INTERVAL_MS = 50
ESC_DELAY_MS = 25

KEY_NAMES: Dict[int, str] = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_ENTER: "enter",
    ord("\n"): "enter",
    ord("\r"): "enter",
    27: "esc",
    ord("\t"): "tab",
    getattr(curses, "KEY_BTAB", 353): "shift+tab",
    curses.KEY_BACKSPACE: "backspace",
    127: "backspace",
    8: "backspace",
    3: "ctrl+c",
    21: "ctrl+u",
}


def normalize_key(code: int) -> Optional[str]:
    """Translate a curses key code into the console's key name."""

    if code in KEY_NAMES:
        return KEY_NAMES[code]
    if 32 <= code < 127:
        return chr(code)
    return None


class Console:
    """Single consumer of the message bus; owns the model for its lifetime."""

    def __init__(
        self,
        model: Model,
        bus: Optional[MessageBus] = None,
        scheduler: Optional[CommandScheduler] = None,
    ) -> None:
        self.model = model
        self.bus = bus or MessageBus()
        self.scheduler = scheduler or CommandScheduler(self.bus)

    def post(self, message: Message) -> None:
        self.bus.post(message)

    def dispatch(self, message: Message) -> None:
        command = self.model.update(message)
        if command is not None:
            self.scheduler.schedule(command)

    def pump(self, timeout: Optional[float] = None) -> int:
        """Deliver queued messages in order; wait up to ``timeout`` for the first."""

        delivered = 0
        if timeout is not None:
            first = self.bus.get(timeout=timeout)
            if first is None:
                return 0
            self.dispatch(first)
            delivered += 1
        for message in self.bus.drain():
            if self.model.quit_requested:
                break
            self.dispatch(message)
            delivered += 1
        return delivered

    def feed(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.post(KeyInput(key))
        self.pump()

    def close(self) -> None:
        self.scheduler.shutdown()
        if self.model.client is not None:
            self.model.client.close()


def _build_palette() -> Dict[str, int]:
    palette: Dict[str, int] = {
        "title": curses.A_BOLD,
        "subtitle": curses.A_DIM,
        "header": curses.A_BOLD,
        "divider": curses.A_DIM,
        "menu_active": curses.A_REVERSE | curses.A_BOLD,
        "menu_inactive": curses.A_NORMAL,
        "detail_heading": curses.A_BOLD,
        "detail_text": curses.A_NORMAL,
        "field_active": curses.A_UNDERLINE,
        "field_inactive": curses.A_DIM,
        "status_ok": curses.A_BOLD,
        "status_error": curses.A_BOLD,
        "progress": curses.A_BOLD,
        "footer": curses.A_DIM,
    }

    if curses.has_colors():
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(1, curses.COLOR_CYAN, -1)
        curses.init_pair(2, curses.COLOR_BLUE, -1)
        curses.init_pair(3, curses.COLOR_WHITE, -1)
        curses.init_pair(4, curses.COLOR_GREEN, -1)
        curses.init_pair(5, curses.COLOR_MAGENTA, -1)
        curses.init_pair(6, curses.COLOR_RED, -1)
        palette["header"] = curses.color_pair(5) | curses.A_BOLD
        palette["title"] = curses.color_pair(3) | curses.A_BOLD
        palette["subtitle"] = curses.color_pair(2) | curses.A_DIM
        palette["divider"] = curses.color_pair(2) | curses.A_DIM
        palette["menu_active"] = curses.color_pair(1) | curses.A_REVERSE | curses.A_BOLD
        palette["menu_inactive"] = curses.color_pair(3)
        palette["detail_heading"] = curses.color_pair(3) | curses.A_BOLD
        palette["detail_text"] = curses.color_pair(3)
        palette["field_active"] = curses.color_pair(1) | curses.A_UNDERLINE
        palette["field_inactive"] = curses.color_pair(2) | curses.A_DIM
        palette["status_ok"] = curses.color_pair(4) | curses.A_BOLD
        palette["status_error"] = curses.color_pair(6) | curses.A_BOLD
        palette["progress"] = curses.color_pair(1) | curses.A_BOLD
        palette["footer"] = curses.color_pair(2) | curses.A_DIM
    return palette


def _safe_addstr(win: "curses._CursesWindow", y: int, x: int, text: str, attr: int = 0) -> None:
    """Safely add ``text`` at ``(y, x)`` without raising ``curses.error``."""

    max_y, max_x = win.getmaxyx()
    if y < 0 or x < 0 or y >= max_y or x >= max_x:
        return
    available = max_x - x
    if available <= 0:
        return
    try:
        win.addstr(y, x, text[:available], attr)
    except curses.error:
        # Some terminals are strict about drawing on the bottom-right cell.
        pass


def draw(win: "curses._CursesWindow", palette: Dict[str, int], lines: Sequence[Line]) -> None:
    win.erase()
    height, _width = win.getmaxyx()
    for row, line in enumerate(lines[: max(0, height - 2)]):
        _safe_addstr(win, row + 1, 2 + line.indent, line.text, palette.get(line.style, 0))
    win.refresh()


def run(stdscr: "curses._CursesWindow", console: Console) -> None:
    """Drive ``console`` from curses input until the operator quits."""

    try:
        curses.curs_set(0)
    except curses.error:
        pass
    curses.raw()
    try:
        curses.set_escdelay(ESC_DELAY_MS)
    except curses.error:
        pass
    stdscr.keypad(True)
    stdscr.timeout(POLL_INTERVAL_MS)
    palette = _build_palette()

    height, width = stdscr.getmaxyx()
    console.post(Resize(width=width, height=height))
    while True:
        console.pump()
        if console.model.quit_requested:
            break
        draw(stdscr, palette, render(console.model))

        code = stdscr.getch()
        if code == -1:
            continue
        if code == curses.KEY_RESIZE:
            height, width = stdscr.getmaxyx()
            console.post(Resize(width=width, height=height))
            continue
        key = normalize_key(code)
        if key is not None:
            console.post(KeyInput(key))


def launch_console(
    settings: Settings, *, transport: Optional[httpx.BaseTransport] = None
) -> None:
    """Launch the ShadowPay console inside ``curses.wrapper``."""

    console = Console(Model.from_settings(settings, transport=transport))
    logger = logbook.get_logger()
    logger.info("console start base_url=%s connected=%s", settings.base_url, settings.connected)

    def main(stdscr: "curses._CursesWindow") -> None:
        run(stdscr, console)

    try:
        curses.wrapper(main)
    finally:
        console.close()
        logger.info("console stop")


__all__ = ["Console", "KEY_NAMES", "draw", "launch_console", "normalize_key", "run"]

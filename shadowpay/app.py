"""Application entry point launching the ShadowPay console."""

from __future__ import annotations

import argparse
import importlib.util
import logging
from pathlib import Path
from textwrap import dedent
from typing import List, Optional, Sequence

from rich.console import Console

from . import __version__

_BANNER = r"""
 ____  _               _               ____
/ ___|| |__   __ _  __| | _____      _|  _ \ __ _ _   _
\___ \| '_ \ / _` |/ _` |/ _ \ \ /\ / / |_) / _` | | | |
 ___) | | | | (_| | (_| | (_) \ V  V /|  __/ (_| | |_| |
|____/|_| |_|\__,_|\__,_|\___/ \_/\_/ |_|   \__,_|\__, |
                                                  |___/
"""

# Import name -> distribution name.
REQUIRED_MODULES = {
    "httpx": "httpx",
    "dotenv": "python-dotenv",
    "keyring": "keyring",
    "cryptography": "cryptography",
}


def _missing_dependencies() -> List[str]:
    """Return the distributions the console needs but cannot import."""

    return [
        dist for module, dist in REQUIRED_MODULES.items() if importlib.util.find_spec(module) is None
    ]


def _print_dependency_error(missing: List[str]) -> None:
    """Emit guidance for installing runtime dependencies."""

    message = dedent(
        f"""
        ShadowPay could not start because the following Python packages are missing:
            {', '.join(sorted(missing))}

        Install the project dependencies before launching the console, e.g.:
            python -m pip install -e .
        """
    ).strip()
    Console(stderr=True, highlight=False).print(f"[bold red]{message}[/]")


def _render_splash(base_url: str, connected: bool) -> None:
    """Display the startup banner using Rich for colour output."""

    console = Console(highlight=False)
    console.print(f"[#9B5DE5]{_BANNER}[/]", justify="center")
    console.print(f"[#9B5DE5 bold]ShadowPay Console v{__version__}[/]", justify="center")
    console.print(f"[#7DF9FF]{base_url}[/]", justify="center")
    if connected:
        console.print("[#39FF14]API key loaded[/]", justify="center")
    else:
        console.print("[#FFB627]No API key set; open Settings to add one[/]", justify="center")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shadowpay", description="ShadowPay operator console"
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=Path(".env"),
        help="dotenv file to load settings from and save the endpoint to (default: .env)",
    )
    parser.add_argument("--base-url", help="API endpoint, overrides SHADOWPAY_BASE_URL")
    parser.add_argument("--api-key", help="API key, overrides SHADOWPAY_API_KEY and the keyring")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the ShadowPay console."""

    options = build_parser().parse_args(list(argv) if argv is not None else None)

    missing = _missing_dependencies()
    if missing:
        _print_dependency_error(missing)
        raise SystemExit(1)

    from .config import load_settings
    from .errors import ConfigError
    from .ui import launch_console
    from .utils import logbook

    try:
        settings = load_settings(
            options.env_file, api_key=options.api_key, base_url=options.base_url
        )
    except ConfigError as exc:
        Console(stderr=True, highlight=False).print(f"[bold red]shadowpay: {exc}[/]")
        raise SystemExit(2) from exc

    _render_splash(settings.base_url, settings.connected)
    logbook.info(
        {
            "channel": "ShadowPay.App",
            "action": "start",
            "version": __version__,
            "base_url": settings.base_url,
            "api_key_source": settings.api_key_source or "none",
        }
    )

    try:
        launch_console(settings)
    finally:
        logging.shutdown()
    return 0


__all__ = ["build_parser", "main"]

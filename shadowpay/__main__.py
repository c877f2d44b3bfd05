"""Console entrypoint bridging to :mod:`shadowpay.app`."""

from __future__ import annotations

from typing import Any, Optional

from .app import main as app_main


def main(argv: Optional[list[str]] = None) -> Any:
    """Delegate execution to :func:`shadowpay.app.main`."""

    return app_main(argv)


if __name__ == "__main__":
    main()

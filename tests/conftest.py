from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import keyring
import keyring.backend
import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shadowpay.config import Settings  # noqa: E402
from shadowpay.ui.model import Model  # noqa: E402
from shadowpay.utils.logbook import LOGGER_NAME  # noqa: E402

TEST_BASE_URL = "https://api.shadowpay.test"
TEST_API_KEY = "sk_test_0123456789abcdef"


class MemoryKeyring(keyring.backend.KeyringBackend):
    priority = 1

    def __init__(self) -> None:
        self._data: dict[tuple[str, str], str] = {}

    def get_password(self, service: str, username: str) -> str | None:
        return self._data.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        self._data[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        self._data.pop((service, username), None)


class FakeAPI:
    """Route table served through :class:`httpx.MockTransport`."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, payload: Any = None, status: int = 200) -> None:
        self.routes[(method, path)] = (status, payload)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "not found"})
        status, payload = route
        if payload is None:
            return httpx.Response(status)
        if isinstance(payload, (bytes, str)):
            return httpx.Response(status, content=payload)
        return httpx.Response(status, json=payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def body(self, index: int = -1) -> Any:
        content = self.requests[index].content
        return json.loads(content) if content else None


def _reset_logger() -> None:
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture(autouse=True)
def isolated_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    state = tmp_path / "state"
    monkeypatch.setenv("SHADOWPAY_STATE_DIR", str(state))
    for name in ("SHADOWPAY_API_KEY", "SHADOWPAY_BASE_URL", "SHADOWPAY_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    keyring.set_keyring(MemoryKeyring())
    _reset_logger()
    yield state
    _reset_logger()


@pytest.fixture()
def api() -> FakeAPI:
    return FakeAPI()


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(api_key=TEST_API_KEY, base_url=TEST_BASE_URL, env_file=tmp_path / ".env")


@pytest.fixture()
def model(api: FakeAPI, settings: Settings) -> Model:
    return Model.from_settings(settings, transport=api.transport)


@pytest.fixture()
def offline_model(api: FakeAPI, tmp_path: Path) -> Model:
    bare = Settings(base_url=TEST_BASE_URL, env_file=tmp_path / ".env")
    return Model.from_settings(bare, transport=api.transport)

"""Pytest configuration and shared fixtures for clashpick tests

This module provides a fake requests session, a scripted line reader and a
sample controller payload used across the unit tests.
"""

import logging
from typing import Any, Callable, Optional

import pytest
import requests

from clashpick.common.types import Catalog, ProxyOrGroup
from clashpick.controller.client import catalog_build

NO_JSON = object()
"""Marker payload for responses whose body is not JSON"""


class FakeResponse:
    """Minimal stand-in for requests.Response"""

    def __init__(self, status_code: int = 200, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self) -> Any:
        """Return payload, or raise like requests does for non-JSON bodies"""
        if self._payload is NO_JSON:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """Records requests and replays canned responses keyed by (method, url)"""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.calls: list[dict[str, Any]] = []
        self.trust_env: bool = True
        self.closed: bool = False

    def route_add(self, method: str, url: str, outcome: Any) -> None:
        """Register a FakeResponse or an exception instance to raise"""
        self.routes[(method, url)] = outcome

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        outcome = self.routes.get((method, url))
        if outcome is None:
            raise requests.ConnectionError(f"connection refused: {url}")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("GET", url, **kwargs)

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeSession":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class ScriptedReader:
    """Line reader returning queued answers; raises EOFError when exhausted"""

    def __init__(self, *lines: str) -> None:
        self.lines: list[str] = list(lines)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)


def proxies_payload() -> dict[str, Any]:
    """Controller /proxies body with a GLOBAL root grouping"""
    return {
        "proxies": {
            "GLOBAL": {
                "name": "GLOBAL",
                "all": ["DIRECT", "Proxy", "Video", "HK-01"],
                "now": "Proxy",
                "type": "Selector",
            },
            "Video": {"name": "Video", "all": ["HK-01", "JP-01"], "now": "JP-01", "type": "Selector"},
            "Proxy": {"name": "Proxy", "all": ["A", "B"], "now": "A", "type": "Selector"},
            "Auto": {"name": "Auto", "all": ["A", "B"], "now": "B", "type": "URLTest"},
            "A": {"name": "A", "type": "Shadowsocks"},
            "B": {"name": "B", "type": "Vmess"},
            "HK-01": {"name": "HK-01", "type": "Trojan"},
            "JP-01": {"name": "JP-01", "type": "Trojan"},
            "DIRECT": {"name": "DIRECT", "type": "Direct"},
        }
    }


@pytest.fixture
def proxies_body() -> dict[str, Any]:
    """Fresh copy of the sample /proxies body"""
    return proxies_payload()


@pytest.fixture
def fake_session() -> FakeSession:
    """Empty fake session; every unrouted request fails to connect"""
    return FakeSession()


@pytest.fixture
def scripted_reader() -> Callable[..., ScriptedReader]:
    """Factory for line readers answering with the given lines"""
    return ScriptedReader


@pytest.fixture
def sample_catalog() -> Catalog:
    """Catalog built from proxies_payload(); selectable groups are Proxy, Video"""
    proxies: dict[str, ProxyOrGroup] = {
        key: ProxyOrGroup.payload_parse(key, value)
        for key, value in proxies_payload()["proxies"].items()
    }
    return catalog_build(proxies)


@pytest.fixture
def make_response() -> Callable[..., FakeResponse]:
    """Factory for FakeResponse objects"""

    def _make(status_code: int = 200, payload: Optional[Any] = None) -> FakeResponse:
        return FakeResponse(status_code, payload)

    return _make


@pytest.fixture
def no_json() -> object:
    """Marker payload for non-JSON bodies"""
    return NO_JSON


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove CLASH_* variables inherited from the test environment"""
    for name in ("CLASH_PORT", "CLASH_ADDR", "CLASH_SCHEME", "CLASH_GROUPS", "CLASH_TEST_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """Setup logging for tests"""
    caplog.set_level(logging.DEBUG)

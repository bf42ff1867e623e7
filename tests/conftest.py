from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from vektopay import ClientConfig, VektopayClient


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, *, text: Optional[str] = None) -> None:
        self.status_code = status_code
        if text is None:
            text = "" if body is None else json.dumps(body)
        self.text = text

    def json(self) -> Any:
        return json.loads(self.text)


class FakeSession:
    """Stands in for ``requests.Session`` and records every request."""

    def __init__(self) -> None:
        self.responses: List[Any] = []
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def queue(self, status_code: int = 200, body: Any = None, **kwargs: Any) -> "FakeSession":
        self.responses.append(FakeResponse(status_code, body, **kwargs))
        return self

    def fail_with(self, exc: Exception) -> "FakeSession":
        self.responses.append(exc)
        return self

    def request(self, method, url, json=None, params=None, headers=None, timeout=None):
        self.calls.append(
            {
                "method": method,
                "url": url,
                "json": json,
                "params": params,
                "headers": CaseInsensitiveDict(headers or {}),
                "timeout": timeout,
            }
        )
        if not self.responses:
            raise AssertionError(f"unexpected request {method} {url}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True

    @property
    def last(self) -> Dict[str, Any]:
        return self.calls[-1]


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


BASE_URL = "https://api.vektopay.test"


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(api_key="sk_test_123", base_url=BASE_URL + "/")


@pytest.fixture
def dashboard_config() -> ClientConfig:
    return ClientConfig(
        api_key="sk_test_123",
        base_url=BASE_URL,
        bearer_token="dash-token",
        default_headers={"X-Tenant": "acme"},
    )


@pytest.fixture
def client(config: ClientConfig, session: FakeSession, clock: FakeClock) -> VektopayClient:
    return VektopayClient(
        config,
        session=session,  # type: ignore[arg-type]
        key_factory=lambda: "generated-key",
        clock=clock,
        sleep=clock.sleep,
    )


@pytest.fixture
def dashboard_client(dashboard_config: ClientConfig, session: FakeSession) -> VektopayClient:
    return VektopayClient(dashboard_config, session=session)  # type: ignore[arg-type]


@pytest.fixture
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")

"""
Unit tests for alert_dispatcher.transport.backend_client.BackendClient.

These tests validate, using a mocked ``requests.get``:
- the connectivity check hits /api/v1/query?query=up with the connect timeout
- connectivity is True only for HTTP 2xx; transport errors yield False
- fetch_alerts returns the body for any HTTP status
- transport errors and timeouts during fetch raise BackendUnreachable

No real network requests are made.
"""

from __future__ import annotations

from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest
import requests

from alert_dispatcher.domain.errors import BackendUnreachable
from alert_dispatcher.transport.backend_client import BackendClient, BackendClientConfig


def _client(url: str = "http://prom:9090/") -> BackendClient:
    return BackendClient(BackendClientConfig(base_url=url, connect_timeout_s=5.0, fetch_timeout_s=10.0))


def _response(status: int, text: str = "") -> MagicMock:
    r = MagicMock()
    r.status_code = status
    r.text = text
    return r


def test_check_connectivity_queries_up_endpoint(monkeypatch) -> None:
    calls: List[Dict[str, Any]] = []

    def fake_get(url, params=None, timeout=None):
        calls.append({"url": url, "params": params, "timeout": timeout})
        return _response(200)

    monkeypatch.setattr("requests.get", fake_get)

    assert _client().check_connectivity() is True
    assert calls == [{"url": "http://prom:9090/api/v1/query", "params": {"query": "up"}, "timeout": 5.0}]


@pytest.mark.parametrize("status", [301, 404, 500, 503])
def test_check_connectivity_false_on_non_2xx(monkeypatch, status: int) -> None:
    monkeypatch.setattr("requests.get", lambda *a, **kw: _response(status))
    assert _client().check_connectivity() is False


@pytest.mark.parametrize(
    "exc",
    [requests.ConnectionError("refused"), requests.Timeout("slow"), requests.RequestException("x")],
)
def test_check_connectivity_false_on_transport_error(monkeypatch, caplog, exc) -> None:
    def fake_get(*args, **kwargs):
        raise exc

    monkeypatch.setattr("requests.get", fake_get)

    assert _client().check_connectivity() is False
    assert any("Cannot connect to Prometheus at http://prom:9090" in r.getMessage() for r in caplog.records)


def test_fetch_alerts_returns_body(monkeypatch) -> None:
    seen = {}

    def fake_get(url, timeout=None):
        seen["url"] = url
        seen["timeout"] = timeout
        return _response(200, '{"status":"success","data":{"alerts":[]}}')

    monkeypatch.setattr("requests.get", fake_get)

    body = _client().fetch_alerts()

    assert body == '{"status":"success","data":{"alerts":[]}}'
    assert seen == {"url": "http://prom:9090/api/v1/alerts", "timeout": 10.0}


def test_fetch_alerts_returns_body_for_error_status(monkeypatch) -> None:
    monkeypatch.setattr("requests.get", lambda *a, **kw: _response(503, '{"status":"error"}'))
    assert _client().fetch_alerts() == '{"status":"error"}'


@pytest.mark.parametrize("exc", [requests.ConnectionError("refused"), requests.Timeout("slow")])
def test_fetch_alerts_raises_backend_unreachable(monkeypatch, exc) -> None:
    def fake_get(*args, **kwargs):
        raise exc

    monkeypatch.setattr("requests.get", fake_get)

    with pytest.raises(BackendUnreachable) as info:
        _client().fetch_alerts()
    assert info.value.__cause__ is exc


def test_base_url_trailing_slash_is_stripped() -> None:
    assert _client("http://prom:9090///").base_url == "http://prom:9090"

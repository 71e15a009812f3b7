from __future__ import annotations

import io
import urllib.error
import urllib.request
from typing import Any, Dict

import pytest

from currencyify.services import http_client
from currencyify.services.http_client import HttpError, get_json


class FakeResponse(io.BytesIO):
    def __init__(self, body: bytes, status: int = 200):
        super().__init__(body)
        self.status = status


def test_get_json_sends_params_and_headers(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: Dict[str, Any] = {}

    def fake_urlopen(request: urllib.request.Request, timeout: float) -> FakeResponse:
        seen["url"] = request.full_url
        seen["headers"] = dict(request.header_items())
        seen["timeout"] = timeout
        return FakeResponse(b'{"rates": {"INR": 82.771291}}')

    monkeypatch.setattr(http_client.urllib.request, "urlopen", fake_urlopen)

    body = get_json(
        "https://fx.example/latest",
        params={"base": "USD", "currencies": "INR,JPY"},
        headers={"Content-Type": "application/json"},
        timeout=2.5,
    )

    assert body == {"rates": {"INR": 82.771291}}
    assert seen["url"] == "https://fx.example/latest?base=USD&currencies=INR%2CJPY"
    assert seen["headers"]["Content-type"] == "application/json"
    assert seen["timeout"] == 2.5


def test_get_json_wraps_transport_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(request: urllib.request.Request, timeout: float) -> FakeResponse:
        raise urllib.error.URLError("connection refused")

    monkeypatch.setattr(http_client.urllib.request, "urlopen", fake_urlopen)

    with pytest.raises(HttpError):
        get_json("https://fx.example/latest")


def test_get_json_wraps_http_status_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(request: urllib.request.Request, timeout: float) -> FakeResponse:
        raise urllib.error.HTTPError(request.full_url, 400, "Bad Request", None, None)  # type: ignore[arg-type]

    monkeypatch.setattr(http_client.urllib.request, "urlopen", fake_urlopen)

    with pytest.raises(HttpError, match="HTTP 400"):
        get_json("https://fx.example/latest")


def test_get_json_rejects_invalid_json(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        http_client.urllib.request, "urlopen", lambda request, timeout: FakeResponse(b"<html>")
    )

    with pytest.raises(HttpError, match="Invalid JSON"):
        get_json("https://fx.example/latest")

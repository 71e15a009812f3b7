from __future__ import annotations

from fastapi.testclient import TestClient

from currencyify.core.config import Settings
from currencyify.main import create_app
from currencyify.services.container import build_services
from tests.helpers.fakes import CountingProvider

PREFIX = "/api/v1/currencyify"
CONVERT = f"{PREFIX}/convert/currency-convert/"
EXCHANGE = f"{PREFIX}/exchange-rate/currency-exchange-rate/"


def test_healthcheck(client: TestClient) -> None:
    resp = client.get(f"{PREFIX}/healthcheck")
    assert resp.status_code == 200
    assert resp.text == "i am alive"


def test_root(client: TestClient) -> None:
    assert client.get("/").json()["message"] == "Currencyify API"


def test_convert_usd_to_inr(client: TestClient, provider: CountingProvider) -> None:
    resp = client.post(
        CONVERT, json={"source_currency": "usd", "target_currency": "INR", "amount": 100}
    )

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["source_currency"] == "USD"
    assert body["target_currency"] == "INR"
    assert body["amount"] == 100
    assert abs(body["converted_amount"] - 8277.1291) < 1e-9
    assert resp.headers["cache-control"] == "no-cache"
    assert "x-request-id" in resp.headers
    # one single-code fetch per side against USD
    assert provider.calls == [("USD", ["USD"]), ("USD", ["INR"])]


def test_convert_reuses_cached_rates(client: TestClient, provider: CountingProvider) -> None:
    payload = {"source_currency": "USD", "target_currency": "JPY", "amount": 5}
    client.post(CONVERT, json=payload)
    client.post(CONVERT, json=payload)
    assert len(provider.calls) == 2


def test_convert_round_trip(client: TestClient) -> None:
    there = client.post(
        CONVERT, json={"source_currency": "INR", "target_currency": "JPY", "amount": 250}
    ).json()
    back = client.post(
        CONVERT,
        json={
            "source_currency": "JPY",
            "target_currency": "INR",
            "amount": there["converted_amount"],
        },
    ).json()
    assert abs(back["converted_amount"] - 250) < 1e-6


def test_convert_missing_source_currency(client: TestClient, provider: CountingProvider) -> None:
    resp = client.post(
        CONVERT, json={"source_currency": "", "target_currency": "INR", "amount": 10}
    )

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "validation_error"
    assert "`source_currency` parameter is required" in body["detail"]
    assert provider.calls == []


def test_convert_collects_all_violations(client: TestClient) -> None:
    resp = client.post(CONVERT, json={"source_currency": "England", "target_currency": ""})

    assert resp.status_code == 400
    violations = resp.json()["violations"]
    assert len(violations) == 3
    assert violations[0].startswith("`source_currency` not found in our database")
    assert violations[1] == "`target_currency` parameter is required"
    assert violations[2] == "`amount` parameter is required"


def test_convert_rejects_negative_amount(client: TestClient) -> None:
    resp = client.post(
        CONVERT, json={"source_currency": "USD", "target_currency": "INR", "amount": -3}
    )
    assert resp.status_code == 400
    assert "`amount` must be a positive number" in resp.json()["detail"]


def test_convert_zero_rate_is_server_error(settings: Settings, registry) -> None:
    provider = CountingProvider(rates={"USD": "1", "INR": "0"})
    app = create_app(
        settings_override=settings,
        services_override=build_services(settings, provider=provider, registry=registry),
    )
    with TestClient(app) as c:
        resp = c.post(
            CONVERT, json={"source_currency": "INR", "target_currency": "USD", "amount": 1}
        )
    assert resp.status_code == 500
    assert resp.json()["error"] == "rate_parse_error"


def test_exchange_rates_batch(client: TestClient, provider: CountingProvider) -> None:
    resp = client.post(
        EXCHANGE, json={"base_currency": "usd", "target_currencies": ["INR", "jpy"]}
    )

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["base_currency"] == "USD"
    rates = body["exchange_rates"]
    assert list(rates) == ["INR", "JPY"]
    assert rates["INR"]["currency_exchange_rate"] == "82.771291"
    assert rates["JPY"]["currency_exchange_rate"] == "150.608807"
    assert rates["INR"]["last_update_time"].startswith("2024-02-26T12:04:00")
    assert provider.calls == [("USD", ["INR", "JPY"])]


def test_exchange_rates_fetch_only_uncached(client: TestClient, provider: CountingProvider) -> None:
    client.post(EXCHANGE, json={"base_currency": "USD", "target_currencies": ["INR"]})
    client.post(EXCHANGE, json={"base_currency": "USD", "target_currencies": ["INR", "JPY"]})
    client.post(EXCHANGE, json={"base_currency": "USD", "target_currencies": ["JPY", "INR"]})

    assert provider.calls == [("USD", ["INR"]), ("USD", ["JPY"])]


def test_exchange_rates_invalid_target_reported_once(client: TestClient) -> None:
    resp = client.post(
        EXCHANGE, json={"base_currency": "USD", "target_currencies": ["India", "JPY"]}
    )

    assert resp.status_code == 400
    body = resp.json()
    assert "`target_currency` (India) not found" in body["detail"]
    assert len(body["violations"]) == 1
    assert "JPY" not in body["detail"]


def test_exchange_rates_requires_targets(client: TestClient) -> None:
    resp = client.post(EXCHANGE, json={"base_currency": ""})

    assert resp.status_code == 400
    assert resp.json()["violations"] == [
        "`base_currency` parameter is required",
        "`target_currencies` parameter is required",
    ]


def test_exchange_rates_provider_failure_returns_no_partial_map(
    settings: Settings, registry
) -> None:
    provider = CountingProvider(rates={"INR": "82.771291"})
    app = create_app(
        settings_override=settings,
        services_override=build_services(settings, provider=provider, registry=registry),
    )
    with TestClient(app) as c:
        c.post(EXCHANGE, json={"base_currency": "USD", "target_currencies": ["INR"]})
        resp = c.post(
            EXCHANGE, json={"base_currency": "USD", "target_currencies": ["INR", "JPY"]}
        )

    assert resp.status_code == 502
    body = resp.json()
    assert body["error"] == "provider_error"
    assert "exchange_rates" not in body


def test_malformed_body_is_rejected(client: TestClient) -> None:
    resp = client.post(CONVERT, json={"source_currency": "USD", "target_currency": "INR", "amount": "lots"})
    assert resp.status_code == 422


def test_unknown_route(client: TestClient) -> None:
    resp = client.get(f"{PREFIX}/nope")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_static_provider_end_to_end(settings: Settings) -> None:
    app = create_app(settings_override=settings)
    with TestClient(app) as c:
        resp = c.post(
            EXCHANGE, json={"base_currency": "EUR", "target_currencies": ["USD", "GBP"]}
        )
    assert resp.status_code == 200, resp.text
    assert set(resp.json()["exchange_rates"]) == {"USD", "GBP"}

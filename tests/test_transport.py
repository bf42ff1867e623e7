from __future__ import annotations

import pytest
import requests

from vektopay import AuthMode, ClientConfig, ConfigError, TransportError
from vektopay.core.transport import Transport


def test_api_key_mode_sets_key_and_content_type(config, session) -> None:
    session.queue(200, {"ok": True})
    transport = Transport(config, session=session)

    status, payload = transport.send("POST", "/v1/payments", {"a": 1}, operation="payment")

    assert (status, payload) == (200, {"ok": True})
    call = session.last
    assert call["url"] == "https://api.vektopay.test/v1/payments"
    assert call["headers"]["x-api-key"] == "sk_test_123"
    assert call["headers"]["content-type"] == "application/json"
    assert "Authorization" not in call["headers"]
    assert call["json"] == {"a": 1}
    assert call["timeout"] == config.timeout_seconds


def test_default_headers_never_override_credentials(session) -> None:
    config = ClientConfig(
        api_key="real-key",
        base_url="https://api.vektopay.test",
        bearer_token="real-token",
        default_headers={
            "X-API-KEY": "spoofed",
            "authorization": "Bearer spoofed",
            "X-Trace": "abc",
        },
    )
    session.queue(200, {}).queue(200, {})
    transport = Transport(config, session=session)

    transport.send("GET", "/v1/payments/p1/status")
    api_key_headers = session.last["headers"]
    assert api_key_headers["x-api-key"] == "real-key"
    assert api_key_headers["X-Trace"] == "abc"

    transport.send("GET", "/v1/customers", auth=AuthMode.BEARER)
    bearer_headers = session.last["headers"]
    assert bearer_headers["Authorization"] == "Bearer real-token"
    assert "x-api-key" not in bearer_headers


def test_bearer_mode_without_token_fails_before_network(config, session) -> None:
    transport = Transport(config, session=session)

    with pytest.raises(ConfigError) as excinfo:
        transport.send("GET", "/v1/customers", auth=AuthMode.BEARER)

    assert excinfo.value.code == "bearer_token_required"
    assert session.calls == []


def test_no_auth_mode_strips_credentials(dashboard_config, session) -> None:
    session.queue(200, {"id": "card_1"})
    Transport(dashboard_config, session=session).send(
        "POST", "/v1/card-capture/complete", {"token": "cap"}, auth=AuthMode.NONE
    )

    headers = session.last["headers"]
    assert "x-api-key" not in headers
    assert "Authorization" not in headers
    assert headers["X-Tenant"] == "acme"


def test_connection_failure_is_transport_error(config, session, connection_error) -> None:
    session.fail_with(connection_error)

    with pytest.raises(TransportError) as excinfo:
        Transport(config, session=session).send("GET", "/v1/x", operation="payment_status")

    assert excinfo.value.code == "payment_status_transport_error"
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_non_json_success_body_is_transport_error(config, session) -> None:
    session.queue(200, text="<html>gateway</html>")

    with pytest.raises(TransportError) as excinfo:
        Transport(config, session=session).send("POST", "/v1/payments", {}, operation="payment")

    assert excinfo.value.code == "payment_invalid_json"


def test_non_json_error_body_is_returned_without_payload(config, session) -> None:
    session.queue(502, text="Bad Gateway")

    status, payload = Transport(config, session=session).send("GET", "/v1/x")

    assert status == 502
    assert payload is None


def test_empty_body_decodes_to_none(config, session) -> None:
    session.queue(204)

    assert Transport(config, session=session).send("DELETE", "/v1/x") == (204, None)

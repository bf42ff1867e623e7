from __future__ import annotations

import pytest

from vektopay import (
    CardCaptureSessionRequest,
    CardRequest,
    CheckoutSessionRequest,
    CompleteCardCaptureRequest,
    ConfigError,
    CustomerInput,
    CustomerListParams,
    CustomerUpdate,
    DocumentType,
    GatewayError,
    ProtocolError,
    ProviderTokenResult,
)

DASHBOARD_CALLS = [
    ("create_customer", (CustomerInput("m1", "ext1", "CPF", "123"),)),
    ("update_customer", ("cus_1", CustomerUpdate(name="Ana"))),
    ("list_customers", ()),
    ("get_customer", ("cus_1",)),
    ("delete_customer", ("cus_1",)),
]


@pytest.mark.parametrize("name, args", DASHBOARD_CALLS)
def test_dashboard_calls_require_bearer_token(client, session, name, args) -> None:
    with pytest.raises(ConfigError) as excinfo:
        getattr(client, name)(*args)

    assert excinfo.value.code == "bearer_token_required"
    assert session.calls == []


def test_create_customer(dashboard_client, session) -> None:
    session.queue(201, {"id": "cus_1"})

    customer_id = dashboard_client.create_customer(
        CustomerInput(
            merchant_id="m1",
            external_id="ext1",
            doc_type=DocumentType.CNPJ,
            doc_number="11222333000181",
            name="Acme Ltda",
        )
    )

    assert customer_id == "cus_1"
    call = session.last
    assert call["method"] == "POST"
    assert call["url"] == "https://api.vektopay.test/v1/customers"
    assert call["headers"]["Authorization"] == "Bearer dash-token"
    assert "x-api-key" not in call["headers"]
    assert call["json"] == {
        "merchant_id": "m1",
        "external_id": "ext1",
        "doc_type": "CNPJ",
        "doc_number": "11222333000181",
        "name": "Acme Ltda",
    }


def test_create_customer_missing_id(dashboard_client, session) -> None:
    session.queue(201, {})

    with pytest.raises(ProtocolError) as excinfo:
        dashboard_client.create_customer(CustomerInput("m1", "ext1", "CPF", "123"))

    assert excinfo.value.code == "customer_create_invalid_response"


def test_update_customer_sends_only_changes(dashboard_client, session) -> None:
    session.queue(200, {"id": "cus_1", "name": "Ana", "email": None, "created_at": "2024-01-01"})

    record = dashboard_client.update_customer("cus_1", CustomerUpdate(name="Ana"))

    assert session.last["method"] == "PUT"
    assert session.last["url"].endswith("/v1/customers/cus_1")
    assert session.last["json"] == {"name": "Ana"}
    assert record.name == "Ana"
    assert record.email is None
    assert record.created_at == "2024-01-01"


def test_list_customers_with_query(dashboard_client, session) -> None:
    session.queue(200, [{"id": "cus_1", "merchant_id": "m1"}, {"id": "cus_2"}])

    records = dashboard_client.list_customers(CustomerListParams(merchant_id="m1", limit=10, offset=0))

    assert [record.id for record in records] == ["cus_1", "cus_2"]
    assert records[0].merchant_id == "m1"
    assert session.last["params"] == {"merchant_id": "m1", "limit": "10", "offset": "0"}


def test_list_customers_without_params(dashboard_client, session) -> None:
    session.queue(200, [])

    assert dashboard_client.list_customers() == []
    assert session.last["params"] is None


def test_get_and_delete_customer(dashboard_client, session) -> None:
    session.queue(200, {"id": "cus_1", "doc_type": "CPF"})
    session.queue(200, {"ok": True})

    assert dashboard_client.get_customer("cus_1").doc_type == "CPF"
    assert dashboard_client.delete_customer("cus_1").ok is True
    assert session.last["method"] == "DELETE"


def test_get_customer_not_found(dashboard_client, session) -> None:
    session.queue(404, {"error": {"code": "customer_not_found", "message": "No such customer"}})

    with pytest.raises(GatewayError) as excinfo:
        dashboard_client.get_customer("missing")

    assert excinfo.value.code == "customer_not_found"
    assert excinfo.value.status_code == 404


def test_delete_customer_fallback_code(dashboard_client, session) -> None:
    session.queue(500, text="oops")

    with pytest.raises(GatewayError) as excinfo:
        dashboard_client.delete_customer("cus_1")

    assert excinfo.value.code == "customer_delete_failed_500"


def test_create_checkout_session(client, session) -> None:
    session.queue(201, {"id": "cs_1", "token": "cs_tok", "expires_at": "1700000000"})

    checkout = client.create_checkout_session(
        CheckoutSessionRequest(
            customer_id="cus_1",
            amount=1000,
            currency="BRL",
            expires_in_seconds=900,
            success_url="https://shop/ok",
            price_id="price_1",
            quantity=1,
        )
    )

    assert checkout.id == "cs_1"
    assert checkout.token == "cs_tok"
    assert checkout.expires_at == 1700000000.0
    call = session.last
    assert call["url"].endswith("/v1/checkout-sessions")
    assert call["headers"]["x-api-key"] == "sk_test_123"
    assert call["json"] == {
        "customer_id": "cus_1",
        "amount": 1000,
        "currency": "BRL",
        "expires_in_seconds": 900,
        "success_url": "https://shop/ok",
        "price_id": "price_1",
        "quantity": 1,
    }


def test_create_card_capture_session(client, session) -> None:
    session.queue(201, {"id": "ccs_1", "url": "https://capture/ccs_1", "expires_at": "2024-05-01T00:00:00Z"})

    capture = client.create_card_capture_session(CardCaptureSessionRequest(customer_id="cus_1"))

    assert capture.url == "https://capture/ccs_1"
    assert capture.expires_at == "2024-05-01T00:00:00Z"
    assert session.last["json"] == {"customer_id": "cus_1"}


def test_complete_card_capture_omits_api_key(client, session) -> None:
    session.queue(201, {"id": "card_9"})

    card = client.complete_card_capture(
        CompleteCardCaptureRequest(
            token="cap_tok",
            encrypted_pan="enc::pan",
            set_default=True,
            last4="4242",
            provider_tokens={
                "acquirer": ProviderTokenResult(status="success", token_id="t1", error_code=""),
            },
        )
    )

    assert card.id == "card_9"
    call = session.last
    assert call["url"].endswith("/v1/card-capture/complete")
    assert "x-api-key" not in call["headers"]
    assert call["json"] == {
        "token": "cap_tok",
        "encrypted_pan": "enc::pan",
        "set_default": True,
        "last4": "4242",
        "provider_tokens": {"acquirer": {"status": "success", "token_id": "t1"}},
    }


def test_create_card(client, session) -> None:
    session.queue(201, {"id": "card_1"})

    card = client.create_card(
        CardRequest(
            customer_id="cus_1",
            encrypted_pan="enc::pan",
            exp_month=12,
            exp_year=2030,
            provider_meta={"bin_country": "BR"},
        )
    )

    assert card.id == "card_1"
    assert session.last["headers"]["x-api-key"] == "sk_test_123"
    assert session.last["json"] == {
        "customer_id": "cus_1",
        "encrypted_pan": "enc::pan",
        "exp_month": 12,
        "exp_year": 2030,
        "provider_meta": {"bin_country": "BR"},
    }


def test_create_card_missing_id(client, session) -> None:
    session.queue(201, {"card": "card_1"})

    with pytest.raises(ProtocolError) as excinfo:
        client.create_card(CardRequest(customer_id="cus_1", encrypted_pan="enc"))

    assert excinfo.value.code == "card_create_invalid_response"

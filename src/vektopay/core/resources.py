"""
Request/response clients for the auxiliary gateway resources.

Customers are dashboard-scoped and authenticate with the bearer token.
Sessions and cards use the API key, except card-capture completion where the
capture token in the body is the credential.
"""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import quote

from .models import (
    CardCaptureSession,
    CardCaptureSessionRequest,
    CardRequest,
    CardResult,
    CheckoutSession,
    CheckoutSessionRequest,
    CompleteCardCaptureRequest,
    CustomerDeleteResult,
    CustomerInput,
    CustomerListParams,
    CustomerRecord,
    CustomerUpdate,
)
from .normalizer import (
    parse_card,
    parse_card_capture_session,
    parse_checkout_session,
    parse_customer,
    parse_customer_created,
    parse_customer_deleted,
    parse_customer_list,
)
from .transport import AuthMode, Transport

__all__ = [
    "CardsAPI",
    "CustomersAPI",
    "SessionsAPI",
]

logger = logging.getLogger(__name__)


def _customer_path(customer_id: str) -> str:
    return f"/v1/customers/{quote(customer_id, safe='')}"


class CustomersAPI:
    """Customer records. Every call needs ``bearer_token`` in the config."""

    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    def create(self, customer: CustomerInput) -> str:
        """Create a customer and return its id."""
        status, payload = self.transport.send(
            "POST",
            "/v1/customers",
            customer.to_wire(),
            auth=AuthMode.BEARER,
            operation="customer_create",
        )
        customer_id = parse_customer_created(status, payload)
        logger.info("Created customer %s", customer_id)
        return customer_id

    def update(self, customer_id: str, changes: CustomerUpdate) -> CustomerRecord:
        status, payload = self.transport.send(
            "PUT",
            _customer_path(customer_id),
            changes.to_wire(),
            auth=AuthMode.BEARER,
            operation="customer_update",
        )
        return parse_customer(status, payload, "customer_update")

    def list(self, params: Optional[CustomerListParams] = None) -> List[CustomerRecord]:
        query = (params or CustomerListParams()).to_query()
        status, payload = self.transport.send(
            "GET",
            "/v1/customers",
            auth=AuthMode.BEARER,
            operation="customer_list",
            params=query,
        )
        return parse_customer_list(status, payload)

    def get(self, customer_id: str) -> CustomerRecord:
        status, payload = self.transport.send(
            "GET",
            _customer_path(customer_id),
            auth=AuthMode.BEARER,
            operation="customer_get",
        )
        return parse_customer(status, payload, "customer_get")

    def delete(self, customer_id: str) -> CustomerDeleteResult:
        status, payload = self.transport.send(
            "DELETE",
            _customer_path(customer_id),
            auth=AuthMode.BEARER,
            operation="customer_delete",
        )
        result = parse_customer_deleted(status, payload)
        logger.info("Deleted customer %s (ok=%s)", customer_id, result.ok)
        return result


class SessionsAPI:
    """Hosted checkout and card-capture sessions."""

    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSession:
        status, payload = self.transport.send(
            "POST",
            "/v1/checkout-sessions",
            request.to_wire(),
            operation="checkout_session",
        )
        return parse_checkout_session(status, payload)

    def create_card_capture_session(
        self, request: CardCaptureSessionRequest
    ) -> CardCaptureSession:
        status, payload = self.transport.send(
            "POST",
            "/v1/card-capture-sessions",
            request.to_wire(),
            operation="card_capture_session",
        )
        return parse_card_capture_session(status, payload)


class CardsAPI:
    """Stored cards. PANs arrive already encrypted by the caller."""

    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    def create(self, request: CardRequest) -> CardResult:
        status, payload = self.transport.send(
            "POST",
            "/v1/cards",
            request.to_wire(),
            operation="card_create",
        )
        return parse_card(status, payload, "card_create")

    def complete_capture(self, request: CompleteCardCaptureRequest) -> CardResult:
        status, payload = self.transport.send(
            "POST",
            "/v1/card-capture/complete",
            request.to_wire(),
            auth=AuthMode.NONE,
            operation="card_capture_complete",
        )
        return parse_card(status, payload, "card_capture_complete")

"""
Payment lifecycle client for the Vektopay gateway.

The unified ``/v1/payments`` surface is the single source of truth. The
deprecated charge and transaction calls are thin adapters that build a
:class:`PaymentRequest`, submit it through :meth:`VektopayClient.create_payment`
and translate the result back into their narrower shapes.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, List, Optional, Protocol
from urllib.parse import quote

import requests

from .challenge import BrowserSurface, ChallengeHandle, ChallengePresenter
from .config import ClientConfig
from .errors import PollError, ProtocolError
from .idempotency import KeyFactory, generate_idempotency_key
from .models import (
    LEGACY_CHARGE_STATUSES,
    CardCaptureSession,
    CardCaptureSessionRequest,
    CardRequest,
    CardResult,
    Challenge,
    ChallengeMethod,
    ChargeError,
    ChargeRequest,
    ChargeResult,
    CheckoutSession,
    CheckoutSessionRequest,
    CompleteCardCaptureRequest,
    CustomerDeleteResult,
    CustomerInput,
    CustomerListParams,
    CustomerRecord,
    CustomerUpdate,
    PaymentItem,
    PaymentMethod,
    PaymentMethodType,
    PaymentRequest,
    PaymentResult,
    PaymentStatus,
    PaymentStatusResult,
    TransactionRequest,
    TransactionResult,
)
from .normalizer import parse_payment, parse_payment_status
from .resources import CardsAPI, CustomersAPI, SessionsAPI
from .transport import Transport

__all__ = [
    "CancelSignal",
    "VektopayClient",
]

logger = logging.getLogger(__name__)

IDEMPOTENCY_HEADER = "Idempotency-Key"

# Unified statuses outside the legacy charge space, folded onto their
# closest legacy equivalent.
_LEGACY_STATUS_FALLBACK = {
    PaymentStatus.SUBMITTED: PaymentStatus.PROCESSING_GATEWAY,
    PaymentStatus.PENDING: PaymentStatus.PROCESSING_GATEWAY,
    PaymentStatus.CAPTURED: PaymentStatus.PAID,
}


class CancelSignal(Protocol):
    """Anything with ``is_set()``, e.g. :class:`threading.Event`."""

    def is_set(self) -> bool:
        ...


class VektopayClient:
    """
    Entry point for every gateway operation.

    The instance only holds immutable configuration and an HTTP session, so
    it can be shared between threads.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        session: Optional[requests.Session] = None,
        presenter: Optional[ChallengePresenter] = None,
        key_factory: Optional[KeyFactory] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        self.config = config
        self.transport = Transport(config, session=session)
        self.presenter = presenter
        self.key_factory = key_factory or generate_idempotency_key
        self._clock = clock
        self._sleep = sleep

        self.customers = CustomersAPI(self.transport)
        self.sessions = SessionsAPI(self.transport)
        self.cards = CardsAPI(self.transport)

    @property
    def session(self) -> requests.Session:
        return self.transport.session

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "VektopayClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------ payments

    def create_payment(
        self,
        request: PaymentRequest,
        *,
        idempotency_key: Optional[str] = None,
    ) -> PaymentResult:
        """
        Submit a payment. The gateway's initial status is returned as is; it
        may already be terminal, may require a challenge, or may still be
        processing.
        """
        headers = {IDEMPOTENCY_HEADER: idempotency_key} if idempotency_key else None
        customer_ref = request.customer_id or (
            request.customer.external_id if request.customer else None
        )
        logger.info(
            "Submitting %s payment for customer %s",
            getattr(request.payment_method.type, "value", request.payment_method.type),
            customer_ref,
        )
        status, payload = self.transport.send(
            "POST",
            "/v1/payments",
            request.to_wire(),
            operation="payment",
            headers=headers,
        )
        result = parse_payment(status, payload)
        logger.info("Payment %s submitted with status %s", result.payment_id, result.status.value)
        return result

    def get_payment_status(self, payment_id: str) -> PaymentStatusResult:
        status, payload = self.transport.send(
            "GET",
            f"/v1/payments/{quote(payment_id, safe='')}/status",
            operation="payment_status",
        )
        return parse_payment_status(status, payload)

    def poll_payment_status(
        self,
        payment_id: str,
        *,
        interval_ms: Optional[int] = None,
        timeout_ms: Optional[int] = None,
        cancel: Optional[CancelSignal] = None,
    ) -> PaymentStatusResult:
        """
        Re-query the payment until it reaches ``PAID``, ``FAILED`` or
        ``CANCELED``.

        Cancellation and the deadline are checked before every request. The
        deadline is wall-clock time since this call; once it has passed a
        :class:`PollError` ``poll_timeout`` is raised, and a set ``cancel``
        signal raises ``poll_aborted``. The wait between requests is fixed and
        never runs past the deadline.
        """
        interval = (self.config.poll_interval_ms if interval_ms is None else interval_ms) / 1000.0
        timeout = (self.config.poll_timeout_ms if timeout_ms is None else timeout_ms) / 1000.0
        started = self._clock()
        attempts = 0

        while True:
            if cancel is not None and cancel.is_set():
                logger.info("Polling of payment %s aborted after %d checks", payment_id, attempts)
                raise PollError("poll_aborted", f"Polling of {payment_id} was cancelled")
            elapsed = self._clock() - started
            if elapsed >= timeout:
                logger.info("Polling of payment %s timed out after %d checks", payment_id, attempts)
                raise PollError(
                    "poll_timeout",
                    f"Payment {payment_id} did not settle within {timeout:.3f}s",
                )

            result = self.get_payment_status(payment_id)
            attempts += 1
            logger.debug("Payment %s status %s (check %d)", payment_id, result.status.value, attempts)
            if result.is_terminal:
                return result

            remaining = timeout - (self._clock() - started)
            self._wait(min(interval, max(remaining, 0.0)), cancel)

    def _wait(self, seconds: float, cancel: Optional[CancelSignal]) -> None:
        # An Event only shortens the wait while the stock sleep is in use; an
        # injected sleep is always honoured.
        if seconds <= 0:
            return
        if isinstance(cancel, threading.Event) and self._sleep is time.sleep:
            cancel.wait(seconds)
        else:
            self._sleep(seconds)

    # ------------------------------------------------------------ challenges

    def open_challenge(self, challenge: Challenge) -> ChallengeHandle:
        """
        Present ``challenge`` to the payer.

        Uses the injected presenter, or the local browser when one can be
        found. Raises :class:`PresentationError` otherwise.
        """
        presenter = self.presenter
        if presenter is None:
            presenter = ChallengePresenter(BrowserSurface.detect())
        return presenter.present(challenge)

    # --------------------------------------------------------------- legacy

    def create_charge(self, charge: ChargeRequest) -> ChargeResult:
        """
        Deprecated: prefer :meth:`create_payment`.

        Charges a stored card for a flat amount.
        """
        result = self.create_payment(
            PaymentRequest(
                customer_id=charge.customer_id,
                amount=charge.amount,
                currency=charge.currency,
                payment_method=PaymentMethod(
                    type=PaymentMethodType.CREDIT_CARD,
                    card_id=charge.card_id,
                    installments=charge.installments,
                ),
            ),
            idempotency_key=charge.idempotency_key or self.key_factory(),
        )
        return _charge_from_payment(result)

    def create_transaction(self, transaction: TransactionRequest) -> TransactionResult:
        """Deprecated: prefer :meth:`create_payment` with ``items``."""
        result = self.create_payment(
            PaymentRequest(
                customer_id=transaction.customer_id,
                items=tuple(
                    PaymentItem(price_id=item.price_id, quantity=item.quantity)
                    for item in transaction.items
                ),
                coupon_code=transaction.coupon_code,
                payment_method=PaymentMethod(
                    type=transaction.payment_method.type,
                    token=transaction.payment_method.token,
                    installments=transaction.payment_method.installments,
                ),
            )
        )
        return TransactionResult(
            id=result.payment_id,
            status=result.status,
            payment_status=result.payment_status,
            amount=result.amount,
            currency=result.currency,
        )

    def poll_charge_status(
        self,
        charge_id: str,
        *,
        interval_ms: Optional[int] = None,
        timeout_ms: Optional[int] = None,
        cancel: Optional[CancelSignal] = None,
    ) -> PaymentStatusResult:
        """Deprecated alias of :meth:`poll_payment_status`."""
        return self.poll_payment_status(
            charge_id, interval_ms=interval_ms, timeout_ms=timeout_ms, cancel=cancel
        )

    # ------------------------------------------------------------- ancillary

    def create_customer(self, customer: CustomerInput) -> str:
        return self.customers.create(customer)

    def update_customer(self, customer_id: str, changes: CustomerUpdate) -> CustomerRecord:
        return self.customers.update(customer_id, changes)

    def list_customers(self, params: Optional[CustomerListParams] = None) -> List[CustomerRecord]:
        return self.customers.list(params)

    def get_customer(self, customer_id: str) -> CustomerRecord:
        return self.customers.get(customer_id)

    def delete_customer(self, customer_id: str) -> CustomerDeleteResult:
        return self.customers.delete(customer_id)

    def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSession:
        return self.sessions.create_checkout_session(request)

    def create_card_capture_session(
        self, request: CardCaptureSessionRequest
    ) -> CardCaptureSession:
        return self.sessions.create_card_capture_session(request)

    def complete_card_capture(self, request: CompleteCardCaptureRequest) -> CardResult:
        return self.cards.complete_capture(request)

    def create_card(self, request: CardRequest) -> CardResult:
        return self.cards.create(request)


def _charge_from_payment(result: PaymentResult) -> ChargeResult:
    if result.status is PaymentStatus.FAILED:
        return ChargeResult(
            id=result.payment_id,
            status=PaymentStatus.FAILED,
            error=ChargeError(code="payment_failed", message="payment_failed"),
        )
    if result.status is PaymentStatus.ACTION_REQUIRED:
        if result.challenge is None:
            raise ProtocolError(
                "payment_invalid_response",
                f"Payment {result.payment_id} requires action but has no challenge url",
            )
        return ChargeResult(
            id=result.payment_id,
            status=PaymentStatus.ACTION_REQUIRED,
            challenge=Challenge(url=result.challenge.url, method=ChallengeMethod.REDIRECT),
        )
    status = result.status
    if status not in LEGACY_CHARGE_STATUSES:
        status = _LEGACY_STATUS_FALLBACK[status]
    return ChargeResult(id=result.payment_id, status=status)

"""
Typed request and result shapes exchanged with the Vektopay gateway.

Request objects are immutable and know how to render themselves as wire
payloads; result objects are built by :mod:`vektopay.core.normalizer`, which
owns every "is this field present and well typed" check.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

__all__ = [
    "CardCaptureSession",
    "CardCaptureSessionRequest",
    "CardRequest",
    "CardResult",
    "Challenge",
    "ChallengeMethod",
    "ChargeError",
    "ChargeRequest",
    "ChargeResult",
    "CheckoutSession",
    "CheckoutSessionRequest",
    "CompleteCardCaptureRequest",
    "CustomerDeleteResult",
    "CustomerInput",
    "CustomerListParams",
    "CustomerRecord",
    "CustomerUpdate",
    "DocumentType",
    "PaymentCustomer",
    "PaymentItem",
    "PaymentMethod",
    "PaymentMethodStatus",
    "PaymentMethodType",
    "PaymentMode",
    "PaymentRequest",
    "PaymentResult",
    "PaymentStatus",
    "PaymentStatusResult",
    "ProviderTokenResult",
    "TransactionPaymentMethod",
    "TransactionRequest",
    "TransactionResult",
    "LEGACY_CHARGE_STATUSES",
    "TERMINAL_STATUSES",
]


class PaymentStatus(str, Enum):
    """Lifecycle status assigned by the gateway."""

    PAID = "PAID"
    FAILED = "FAILED"
    ACTION_REQUIRED = "ACTION_REQUIRED"
    SUBMITTED = "SUBMITTED"
    PENDING = "PENDING"
    PENDING_CHALLENGE = "PENDING_CHALLENGE"
    PROCESSING_GATEWAY = "PROCESSING_GATEWAY"
    AUTHORIZED = "AUTHORIZED"
    CAPTURED = "CAPTURED"
    CANCELED = "CANCELED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {PaymentStatus.PAID, PaymentStatus.FAILED, PaymentStatus.CANCELED}
)

# Statuses the deprecated charge surface can report.
LEGACY_CHARGE_STATUSES = frozenset(
    {
        PaymentStatus.PAID,
        PaymentStatus.FAILED,
        PaymentStatus.CANCELED,
        PaymentStatus.PENDING_CHALLENGE,
        PaymentStatus.PROCESSING_GATEWAY,
        PaymentStatus.AUTHORIZED,
    }
)


class PaymentMethodStatus(str, Enum):
    """Outcome reported by the underlying card/PIX processor."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    PENDING = "PENDING"


class PaymentMethodType(str, Enum):
    CREDIT_CARD = "credit_card"
    PIX = "pix"


class PaymentMode(str, Enum):
    ONE_TIME = "one_time"
    SUBSCRIPTION = "subscription"


class DocumentType(str, Enum):
    """Brazilian tax document kinds."""

    CPF = "CPF"
    CNPJ = "CNPJ"


class ChallengeMethod(str, Enum):
    IFRAME = "iframe"
    REDIRECT = "redirect"


def _wire_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "to_wire"):
        return value.to_wire()
    if isinstance(value, (list, tuple)):
        return [_wire_value(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _wire_value(item) for key, item in value.items()}
    return value


def _compact(obj: Any, *, exclude: Tuple[str, ...] = ()) -> Dict[str, Any]:
    """
    Render a dataclass as a wire dict keyed by its field names.

    Attribute names are the gateway's snake_case keys, so the same name is
    used for serialising requests and parsing responses. ``None`` fields are
    left out of the body.
    """
    body: Dict[str, Any] = {}
    for item in fields(obj):
        if item.name in exclude:
            continue
        value = getattr(obj, item.name)
        if value is None:
            continue
        body[item.name] = _wire_value(value)
    return body


# ---------------------------------------------------------------- payments


@dataclass(frozen=True)
class PaymentCustomer:
    """Inline customer created alongside the payment."""

    external_id: str
    doc_type: DocumentType | str
    doc_number: str
    name: Optional[str] = None
    email: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return _compact(self)


@dataclass(frozen=True)
class PaymentItem:
    price_id: str
    quantity: int

    def to_wire(self) -> Dict[str, Any]:
        return _compact(self)


@dataclass(frozen=True)
class PaymentMethod:
    """Card token, stored card reference or PIX selector."""

    type: PaymentMethodType | str
    token: Optional[str] = None
    card_id: Optional[str] = None
    cvc_token: Optional[str] = None
    installments: Optional[int] = None

    def to_wire(self) -> Dict[str, Any]:
        return _compact(self)


@dataclass(frozen=True)
class PaymentRequest:
    """
    Payload for ``POST /v1/payments``.

    Either ``items`` or ``amount`` + ``currency`` should be given. When both
    are present the items win and the flat amount is not sent.
    """

    payment_method: PaymentMethod
    customer_id: Optional[str] = None
    customer: Optional[PaymentCustomer] = None
    items: Tuple[PaymentItem, ...] = ()
    amount: Optional[int | float] = None
    currency: Optional[str] = None
    coupon_code: Optional[str] = None
    mode: Optional[PaymentMode | str] = None
    webhook_url: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items or ()))

    def to_wire(self) -> Dict[str, Any]:
        if self.items:
            body = _compact(self, exclude=("amount", "currency"))
        else:
            body = _compact(self, exclude=("items",))
        return body


@dataclass(frozen=True)
class Challenge:
    """Step-up authentication the payer has to complete."""

    url: str
    method: ChallengeMethod = ChallengeMethod.REDIRECT


@dataclass(frozen=True)
class PaymentResult:
    payment_id: str
    status: PaymentStatus
    payment_status: Optional[PaymentMethodStatus] = None
    subscription_id: Optional[str] = None
    amount: Optional[int | float] = None
    currency: Optional[str] = None
    challenge: Optional[Challenge] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def requires_action(self) -> bool:
        return self.challenge is not None


@dataclass(frozen=True)
class PaymentStatusResult:
    id: str
    status: PaymentStatus

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


# ----------------------------------------------------------------- legacy


@dataclass(frozen=True)
class ChargeRequest:
    """
    Input of the deprecated charge surface: a flat amount on a stored card.

    ``country``, ``price_id`` and ``metadata`` are accepted for source
    compatibility; the unified payment endpoint has no place for them.
    """

    customer_id: str
    card_id: str
    amount: int | float
    currency: str
    installments: Optional[int] = None
    country: Optional[str] = None
    price_id: Optional[str] = None
    metadata: Optional[Mapping[str, Any]] = None
    idempotency_key: Optional[str] = None


@dataclass(frozen=True)
class ChargeError:
    code: str
    message: str


@dataclass(frozen=True)
class ChargeResult:
    id: str
    status: PaymentStatus
    error: Optional[ChargeError] = None
    challenge: Optional[Challenge] = None


@dataclass(frozen=True)
class TransactionPaymentMethod:
    type: PaymentMethodType | str
    token: str
    installments: int


@dataclass(frozen=True)
class TransactionRequest:
    """Input of the deprecated transaction surface: a priced cart."""

    customer_id: str
    items: Tuple[PaymentItem, ...]
    payment_method: TransactionPaymentMethod
    coupon_code: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items or ()))


@dataclass(frozen=True)
class TransactionResult:
    id: str
    status: PaymentStatus
    payment_status: Optional[PaymentMethodStatus] = None
    amount: Optional[int | float] = None
    currency: Optional[str] = None


# -------------------------------------------------------------- customers


@dataclass(frozen=True)
class CustomerInput:
    merchant_id: str
    external_id: str
    doc_type: DocumentType | str
    doc_number: str
    name: Optional[str] = None
    email: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return _compact(self)


@dataclass(frozen=True)
class CustomerUpdate:
    """Partial update; only the fields that are set are sent."""

    merchant_id: Optional[str] = None
    external_id: Optional[str] = None
    doc_type: Optional[DocumentType | str] = None
    doc_number: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return _compact(self)


@dataclass(frozen=True)
class CustomerListParams:
    merchant_id: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

    def to_query(self) -> Dict[str, str]:
        query: Dict[str, str] = {}
        if self.merchant_id:
            query["merchant_id"] = self.merchant_id
        if isinstance(self.limit, int):
            query["limit"] = str(self.limit)
        if isinstance(self.offset, int):
            query["offset"] = str(self.offset)
        return query


@dataclass(frozen=True)
class CustomerRecord:
    id: str
    merchant_id: Optional[str] = None
    external_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    doc_type: Optional[str] = None
    doc_number: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class CustomerDeleteResult:
    ok: bool


# --------------------------------------------------------------- sessions


@dataclass(frozen=True)
class CheckoutSessionRequest:
    customer_id: str
    amount: int | float
    currency: str
    expires_in_seconds: Optional[int] = None
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None
    price_id: Optional[str] = None
    quantity: Optional[int] = None

    def to_wire(self) -> Dict[str, Any]:
        return _compact(self)


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    token: str
    expires_at: float


@dataclass(frozen=True)
class CardCaptureSessionRequest:
    customer_id: str
    expires_in_seconds: Optional[int] = None
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return _compact(self)


@dataclass(frozen=True)
class CardCaptureSession:
    id: str
    url: str
    expires_at: str


# ------------------------------------------------------------------ cards


@dataclass(frozen=True)
class ProviderTokenResult:
    """Tokenisation outcome for one downstream card provider."""

    status: str
    token_id: Optional[str] = None
    token_type: Optional[str] = None
    fingerprint_id: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        # Empty strings are dropped along with missing values.
        body = {"status": self.status}
        for item in fields(self):
            value = getattr(self, item.name)
            if item.name != "status" and value:
                body[item.name] = value
        return body


@dataclass(frozen=True)
class CardRequest:
    """Stores an already-encrypted PAN for a customer."""

    customer_id: str
    encrypted_pan: str
    card_brand: Optional[str] = None
    last4: Optional[str] = None
    first6: Optional[str] = None
    exp_month: Optional[int] = None
    exp_year: Optional[int] = None
    holder_name: Optional[str] = None
    fingerprint: Optional[str] = None
    provider_tokens: Optional[Mapping[str, ProviderTokenResult]] = None
    provider_meta: Optional[Mapping[str, Any]] = None

    def to_wire(self) -> Dict[str, Any]:
        return _compact(self)


@dataclass(frozen=True)
class CompleteCardCaptureRequest:
    """Finishes a hosted card capture; ``token`` is the capture credential."""

    token: str
    encrypted_pan: str
    set_default: Optional[bool] = None
    card_brand: Optional[str] = None
    last4: Optional[str] = None
    first6: Optional[str] = None
    exp_month: Optional[int] = None
    exp_year: Optional[int] = None
    holder_name: Optional[str] = None
    fingerprint: Optional[str] = None
    provider_tokens: Optional[Mapping[str, ProviderTokenResult]] = None
    provider_meta: Optional[Mapping[str, Any]] = None

    def to_wire(self) -> Dict[str, Any]:
        return _compact(self)


@dataclass(frozen=True)
class CardResult:
    id: str

"""
Turns raw gateway responses into the client's typed results.

Each endpoint has one ``parse_*`` function. They all follow the same rules:

* a non-2xx status becomes a :class:`GatewayError` carrying the gateway's
  ``error`` envelope, or ``<operation>_failed_<status>`` when the body has
  none;
* a 2xx body missing a required field, or carrying it with the wrong type,
  becomes a :class:`ProtocolError` ``<operation>_invalid_response``;
* optional fields that are absent or mistyped come back as ``None``.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from .errors import GatewayError, ProtocolError
from .models import (
    CardCaptureSession,
    CardResult,
    Challenge,
    ChallengeMethod,
    CheckoutSession,
    CustomerDeleteResult,
    CustomerRecord,
    PaymentMethodStatus,
    PaymentResult,
    PaymentStatus,
    PaymentStatusResult,
)
from .transport import is_success

__all__ = [
    "extract_error",
    "parse_card",
    "parse_card_capture_session",
    "parse_checkout_session",
    "parse_customer",
    "parse_customer_created",
    "parse_customer_deleted",
    "parse_customer_list",
    "parse_payment",
    "parse_payment_status",
    "raise_for_status",
]

logger = logging.getLogger(__name__)

E = TypeVar("E")

_CUSTOMER_OPTIONAL_FIELDS = (
    "merchant_id",
    "external_id",
    "name",
    "email",
    "doc_type",
    "doc_number",
    "created_at",
    "updated_at",
)


def extract_error(payload: Any) -> Optional[Tuple[str, str]]:
    """
    Read ``{"error": "..."}`` or ``{"error": {"code": ..., "message": ...}}``.

    Returns ``(code, message)``, each falling back to the other, or ``None``
    when the envelope is missing or empty.
    """
    if not isinstance(payload, Mapping):
        return None
    error = payload.get("error")
    if isinstance(error, str) and error:
        return error, error
    if isinstance(error, Mapping):
        code = error.get("code")
        message = error.get("message")
        code = code if isinstance(code, str) and code else None
        message = message if isinstance(message, str) and message else None
        if code or message:
            return code or message, message or code
    return None


def raise_for_status(operation: str, status_code: int, payload: Any) -> None:
    if is_success(status_code):
        return
    extracted = extract_error(payload)
    if extracted is None:
        code = f"{operation}_failed_{status_code}"
        message = code
    else:
        code, message = extracted
    logger.info("Gateway rejected %s with status %s: %s", operation, status_code, code)
    raise GatewayError(code, message, status_code=status_code, payload=payload)


def _invalid(operation: str, detail: str) -> ProtocolError:
    code = f"{operation}_invalid_response"
    logger.warning("Invalid %s response: %s", operation, detail)
    return ProtocolError(code, f"{code}: {detail}")


def _require_mapping(operation: str, payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise _invalid(operation, "body is not a JSON object")
    return payload


def _require_str(operation: str, payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise _invalid(operation, f"'{key}' must be a non-empty string")
    return value


def _optional_str(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    return value if isinstance(value, str) else None


def _optional_number(payload: Mapping[str, Any], key: str) -> Optional[int | float]:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        logger.debug("Ignoring non-finite %s value %r", key, value)
        return None
    return value


def _optional_enum(payload: Mapping[str, Any], key: str, enum: Type[E]) -> Optional[E]:
    value = payload.get(key)
    if not isinstance(value, str):
        return None
    try:
        return enum(value)  # type: ignore[call-arg]
    except ValueError:
        logger.debug("Ignoring unknown %s value %r", key, value)
        return None


def _require_status(operation: str, payload: Mapping[str, Any]) -> PaymentStatus:
    raw = _require_str(operation, payload, "status")
    try:
        return PaymentStatus(raw)
    except ValueError:
        raise _invalid(operation, f"unknown status '{raw}'") from None


def _parse_challenge(payload: Mapping[str, Any]) -> Optional[Challenge]:
    raw = payload.get("challenge")
    if not isinstance(raw, Mapping):
        return None
    url = raw.get("url")
    if not isinstance(url, str) or not url:
        return None
    method = _optional_enum(raw, "method", ChallengeMethod) or ChallengeMethod.REDIRECT
    return Challenge(url=url, method=method)


def parse_payment(status_code: int, payload: Any, operation: str = "payment") -> PaymentResult:
    """Normalise the response of ``POST /v1/payments``."""
    raise_for_status(operation, status_code, payload)
    body = _require_mapping(operation, payload)

    payment_id = _require_str(operation, body, "payment_id")
    status = _require_status(operation, body)
    challenge = _parse_challenge(body)

    if status is PaymentStatus.FAILED:
        challenge = None
    elif status is PaymentStatus.ACTION_REQUIRED and challenge is None:
        raise _invalid(operation, "ACTION_REQUIRED without a challenge url")

    return PaymentResult(
        payment_id=payment_id,
        status=status,
        payment_status=_optional_enum(body, "payment_status", PaymentMethodStatus),
        subscription_id=_optional_str(body, "subscription_id"),
        amount=_optional_number(body, "amount"),
        currency=_optional_str(body, "currency"),
        challenge=challenge,
    )


def parse_payment_status(
    status_code: int, payload: Any, operation: str = "payment_status"
) -> PaymentStatusResult:
    """Normalise the response of ``GET /v1/payments/{id}/status``."""
    raise_for_status(operation, status_code, payload)
    body = _require_mapping(operation, payload)
    return PaymentStatusResult(
        id=_require_str(operation, body, "id"),
        status=_require_status(operation, body),
    )


def _customer_from(operation: str, body: Mapping[str, Any]) -> CustomerRecord:
    values: Dict[str, Optional[str]] = {
        name: _optional_str(body, name) for name in _CUSTOMER_OPTIONAL_FIELDS
    }
    return CustomerRecord(id=_require_str(operation, body, "id"), **values)


def parse_customer_created(status_code: int, payload: Any) -> str:
    operation = "customer_create"
    raise_for_status(operation, status_code, payload)
    return _require_str(operation, _require_mapping(operation, payload), "id")


def parse_customer(status_code: int, payload: Any, operation: str) -> CustomerRecord:
    raise_for_status(operation, status_code, payload)
    return _customer_from(operation, _require_mapping(operation, payload))


def parse_customer_list(status_code: int, payload: Any) -> List[CustomerRecord]:
    operation = "customer_list"
    raise_for_status(operation, status_code, payload)
    if not isinstance(payload, list):
        raise _invalid(operation, "body is not a JSON array")
    return [_customer_from(operation, _require_mapping(operation, item)) for item in payload]


def parse_customer_deleted(status_code: int, payload: Any) -> CustomerDeleteResult:
    operation = "customer_delete"
    raise_for_status(operation, status_code, payload)
    body = _require_mapping(operation, payload)
    ok = body.get("ok")
    if not isinstance(ok, bool):
        raise _invalid(operation, "'ok' must be a boolean")
    return CustomerDeleteResult(ok=ok)


def _coerce_expires_at(operation: str, value: Any) -> float:
    if isinstance(value, bool):
        raise _invalid(operation, "'expires_at' must be a number")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            number = math.nan
    else:
        raise _invalid(operation, "'expires_at' is missing")
    if not math.isfinite(number):
        raise ProtocolError(
            f"{operation}_invalid_expires_at",
            f"'expires_at' is not a finite number: {value!r}",
        )
    return number


def parse_checkout_session(status_code: int, payload: Any) -> CheckoutSession:
    operation = "checkout_session"
    raise_for_status(operation, status_code, payload)
    body = _require_mapping(operation, payload)
    session_id = _require_str(operation, body, "id")
    token = _require_str(operation, body, "token")
    return CheckoutSession(
        id=session_id,
        token=token,
        expires_at=_coerce_expires_at(operation, body.get("expires_at")),
    )


def parse_card_capture_session(status_code: int, payload: Any) -> CardCaptureSession:
    operation = "card_capture_session"
    raise_for_status(operation, status_code, payload)
    body = _require_mapping(operation, payload)
    return CardCaptureSession(
        id=_require_str(operation, body, "id"),
        url=_require_str(operation, body, "url"),
        expires_at=_require_str(operation, body, "expires_at"),
    )


def parse_card(status_code: int, payload: Any, operation: str) -> CardResult:
    raise_for_status(operation, status_code, payload)
    body = _require_mapping(operation, payload)
    return CardResult(id=_require_str(operation, body, "id"))

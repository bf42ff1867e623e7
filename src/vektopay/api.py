"""
Public, high-level helpers for interacting with the Vektopay gateway.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

import requests

from .core.challenge import ChallengePresenter
from .core.client import CancelSignal, VektopayClient
from .core.config import ClientConfig, ClientParameters, load_client_config
from .core.models import PaymentRequest, PaymentResult, PaymentStatusResult

__all__ = [
    "create_client",
    "pay",
]

logger = logging.getLogger(__name__)


def create_client(
    *,
    config: Optional[ClientConfig] = None,
    session: Optional[requests.Session] = None,
    presenter: Optional[ChallengePresenter] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[ClientParameters] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    bearer_token: Optional[str] = None,
    timeout_seconds: Optional[float | str] = None,
    poll_interval_ms: Optional[int | str] = None,
    poll_timeout_ms: Optional[int | str] = None,
    default_headers: Optional[Mapping[str, str] | str] = None,
) -> VektopayClient:
    """
    Construct a :class:`VektopayClient`.

    Callers can either supply a ready-made :class:`ClientConfig` or let the
    helper assemble one from environment data.
    """
    if config is not None:
        extras = (
            overrides,
            base,
            parameters,
            api_key,
            base_url,
            bearer_token,
            timeout_seconds,
            poll_interval_ms,
            poll_timeout_ms,
            default_headers,
        )
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built ClientConfig or individual parameters, not both."
            )
        cfg = config
    else:
        cfg = load_client_config(
            env_file=env_file,
            overrides=overrides,
            base=base,
            parameters=parameters,
            api_key=api_key,
            base_url=base_url,
            bearer_token=bearer_token,
            timeout_seconds=timeout_seconds,
            poll_interval_ms=poll_interval_ms,
            poll_timeout_ms=poll_timeout_ms,
            default_headers=default_headers,
        )
    return VektopayClient(cfg, session=session, presenter=presenter)


def pay(
    client: VektopayClient,
    request: PaymentRequest,
    *,
    idempotency_key: Optional[str] = None,
    present_challenge: bool = True,
    interval_ms: Optional[int] = None,
    timeout_ms: Optional[int] = None,
    cancel: Optional[CancelSignal] = None,
) -> PaymentResult | PaymentStatusResult:
    """
    Submit ``request`` and follow it to a terminal status.

    A payment that is terminal at submission is returned directly. When the
    gateway asks for a challenge and ``present_challenge`` is true, the
    challenge is shown to the payer before polling starts; the overlay, if
    any, is closed once polling ends.
    """
    result = client.create_payment(request, idempotency_key=idempotency_key)
    if result.is_terminal:
        return result

    handle = None
    if result.challenge is not None and present_challenge:
        handle = client.open_challenge(result.challenge)
    try:
        return client.poll_payment_status(
            result.payment_id,
            interval_ms=interval_ms,
            timeout_ms=timeout_ms,
            cancel=cancel,
        )
    finally:
        if handle is not None:
            handle.close()
            logger.debug("Closed challenge for payment %s", result.payment_id)

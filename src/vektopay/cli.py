"""
Command-line interface for exercising the Vektopay payment APIs.
"""

from __future__ import annotations

import argparse
import logging
from typing import Iterable, List, Sequence, Tuple

import requests

from .api import create_client, pay
from .core.config import load_client_config
from .core.errors import ConfigError, VektopayError
from .core.models import (
    PaymentItem,
    PaymentMethod,
    PaymentMethodType,
    PaymentMode,
    PaymentRequest,
    PaymentResult,
    PaymentStatus,
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _item(value: str) -> PaymentItem:
    price_id, sep, quantity = value.rpartition(":")
    if not sep:
        return PaymentItem(price_id=value, quantity=1)
    if not price_id:
        raise argparse.ArgumentTypeError("Items must look like PRICE_ID[:QUANTITY]")
    try:
        count = int(quantity)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid quantity '{quantity}'") from exc
    if count <= 0:
        raise argparse.ArgumentTypeError("Quantity must be positive")
    return PaymentItem(price_id=price_id, quantity=count)


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def _add_poll_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--interval-ms",
        type=int,
        default=None,
        help="Delay between status checks (default: VEKTOPAY_POLL_INTERVAL_MS or 3000)",
    )
    parser.add_argument(
        "--timeout-ms",
        type=int,
        default=None,
        help="Give up after this long (default: VEKTOPAY_POLL_TIMEOUT_MS or 120000)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vektopay",
        description="Submit and track payments on the Vektopay gateway",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing VEKTOPAY_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    pay_parser = commands.add_parser("pay", help="Create a payment")
    pay_parser.add_argument("--customer-id", required=True)
    pay_parser.add_argument(
        "--method",
        choices=[member.value for member in PaymentMethodType],
        default=PaymentMethodType.PIX.value,
        help="Payment method type (default: pix)",
    )
    pay_parser.add_argument("--token", help="Card token for credit_card payments")
    pay_parser.add_argument("--card-id", help="Stored card to charge")
    pay_parser.add_argument("--installments", type=int)
    pay_parser.add_argument(
        "--item",
        action="append",
        type=_item,
        metavar="PRICE_ID[:QUANTITY]",
        default=None,
        help="Line item; repeat for several. Takes precedence over --amount",
    )
    pay_parser.add_argument("--amount", type=int, help="Flat amount in minor units")
    pay_parser.add_argument("--currency", help="Currency of --amount, e.g. BRL")
    pay_parser.add_argument("--coupon-code")
    pay_parser.add_argument(
        "--mode", choices=[member.value for member in PaymentMode], default=None
    )
    pay_parser.add_argument("--webhook-url")
    pay_parser.add_argument("--idempotency-key")
    pay_parser.add_argument(
        "--wait",
        action="store_true",
        help="Follow the payment until it reaches a terminal status",
    )
    _add_poll_arguments(pay_parser)

    status_parser = commands.add_parser("status", help="Show the status of a payment")
    status_parser.add_argument("payment_id")

    poll_parser = commands.add_parser("poll", help="Wait for a payment to settle")
    poll_parser.add_argument("payment_id")
    _add_poll_arguments(poll_parser)
    return parser


def _build_request(args: argparse.Namespace) -> PaymentRequest:
    items: List[PaymentItem] = list(args.item or ())
    if not items and (args.amount is None or not args.currency):
        raise ConfigError("Provide --item, or --amount together with --currency")
    return PaymentRequest(
        customer_id=args.customer_id,
        items=tuple(items),
        amount=None if items else args.amount,
        currency=None if items else args.currency,
        coupon_code=args.coupon_code,
        mode=args.mode,
        webhook_url=args.webhook_url,
        payment_method=PaymentMethod(
            type=PaymentMethodType(args.method),
            token=args.token,
            card_id=args.card_id,
            installments=args.installments,
        ),
    )


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    overrides = _collect_overrides(args.set or ())

    try:
        config = load_client_config(env_file=args.env_file, overrides=overrides)
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    with create_client(config=config, session=requests.Session()) as client:
        try:
            if args.command == "pay":
                request = _build_request(args)
                if args.wait:
                    outcome = pay(
                        client,
                        request,
                        idempotency_key=args.idempotency_key,
                        interval_ms=args.interval_ms,
                        timeout_ms=args.timeout_ms,
                    )
                    if isinstance(outcome, PaymentResult):
                        return _report(outcome.payment_id, outcome.status)
                    return _report(outcome.id, outcome.status)
                result = client.create_payment(request, idempotency_key=args.idempotency_key)
                if result.challenge is not None:
                    logging.info("Challenge required: %s", result.challenge.url)
                return _report(result.payment_id, result.status, settled_only=False)

            if args.command == "status":
                status = client.get_payment_status(args.payment_id)
                return _report(status.id, status.status, settled_only=False)

            final = client.poll_payment_status(
                args.payment_id,
                interval_ms=args.interval_ms,
                timeout_ms=args.timeout_ms,
            )
            return _report(final.id, final.status)
        except VektopayError as exc:
            logging.error("%s failed: %s", args.command, exc)
            return 1


def _report(payment_id: str, status: PaymentStatus, *, settled_only: bool = True) -> int:
    logging.info("Payment %s is %s", payment_id, status.value)
    if status is PaymentStatus.FAILED or status is PaymentStatus.CANCELED:
        return 1
    if settled_only and status is not PaymentStatus.PAID:
        return 1
    return 0

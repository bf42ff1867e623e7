"""
Idempotency keys for submissions that may be retried by the caller.
"""

from __future__ import annotations

import logging
import random
import string
import uuid
from typing import Callable, Optional

__all__ = [
    "KeyFactory",
    "generate_idempotency_key",
]

logger = logging.getLogger(__name__)

KeyFactory = Callable[[], str]

_FALLBACK_ALPHABET = string.ascii_lowercase + string.digits


def _fallback_key(rng: random.Random) -> str:
    return "".join(rng.choice(_FALLBACK_ALPHABET) for _ in range(16))


def generate_idempotency_key(
    *,
    secure_source: Optional[Callable[[], uuid.UUID]] = uuid.uuid4,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Return a fresh idempotency key.

    A random UUID is used when the operating system provides a secure random
    source. Without one, a best-effort pseudo-random string is returned.
    """
    if secure_source is not None:
        try:
            return str(secure_source())
        except NotImplementedError:
            logger.warning("No secure random source available; using a pseudo-random key")
    return _fallback_key(rng or random.Random())

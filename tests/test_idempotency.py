from __future__ import annotations

import random
import uuid

from vektopay import generate_idempotency_key


def test_uuid_key_by_default() -> None:
    key = generate_idempotency_key()

    assert str(uuid.UUID(key)) == key
    assert generate_idempotency_key() != key


def test_fallback_when_secure_source_is_missing() -> None:
    def unavailable() -> uuid.UUID:
        raise NotImplementedError("no urandom")

    key = generate_idempotency_key(secure_source=unavailable, rng=random.Random(7))

    assert len(key) == 16
    assert key.isalnum()
    assert key == generate_idempotency_key(secure_source=None, rng=random.Random(7))

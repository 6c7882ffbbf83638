"""Password hashing used for migrated accounts."""

from __future__ import annotations

import hashlib


def simple_hash(text: str) -> str:
    """Return the SHA-256 digest of ``text`` as 64 lowercase hex characters."""

    return hashlib.sha256(text.encode("utf-8")).hexdigest()


__all__ = ["simple_hash"]

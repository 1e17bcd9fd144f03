"""
variant_sdk.tier2_signing.crypto
─────────────────────────────────
Low-level keyed hashing helpers. Signers build on these so no other module
calls hmac/hashlib directly.
"""
from __future__ import annotations

import hmac
import secrets


def _to_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8", "surrogatepass") if isinstance(value, str) else value


def hmac_digest(key: str | bytes, *parts: str | bytes, algorithm: str = "sha256") -> str:
    """
    Return the hex HMAC of the concatenation of *parts* under *key*.
    Parts are fed in order with no separator.
    """
    mac = hmac.new(_to_bytes(key), digestmod=algorithm)
    for part in parts:
        mac.update(_to_bytes(part))
    return mac.hexdigest()


def constant_time_equals(a: str | bytes, b: str | bytes) -> bool:
    """Compare two values without short-circuiting on the first difference."""
    return hmac.compare_digest(_to_bytes(a), _to_bytes(b))


def generate_secret_key(nbytes: int = 32) -> str:
    """Generate a URL-safe random signing key with *nbytes* of entropy."""
    return secrets.token_urlsafe(nbytes)


__all__ = ["hmac_digest", "constant_time_equals", "generate_secret_key"]

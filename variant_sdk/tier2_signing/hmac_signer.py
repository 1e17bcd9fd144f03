"""
variant_sdk.tier2_signing.hmac_signer
──────────────────────────────────────
Keyed signatures for variant cookies.

The signature is HMAC-SHA256 over ``subject_id ‖ variant ‖ str(timestamp_ms)``
truncated to ``signature_length`` hex characters. Truncation trades margin
for cookie size: 16 hex chars keep 64 bits, so forging one cookie blind
takes on the order of 2**64 online guesses. That is ample for experiment
assignment, but not a long-term authenticator. Raise the length (up to the
full 64) where a cookie protects anything of value.
"""
from __future__ import annotations

from variant_sdk.tier0_core.errors import ConfigurationError
from variant_sdk.tier0_core.secrets import SecretStr
from variant_sdk.tier2_signing.crypto import constant_time_equals, hmac_digest

DEFAULT_SIGNATURE_LENGTH = 16
MIN_SIGNATURE_LENGTH = 8
MAX_SIGNATURE_LENGTH = 64  # full SHA-256 hex digest


class HmacSigner:
    """Signs (subject, variant, timestamp) triples. Immutable after construction."""

    __slots__ = ("_key", "_length")

    def __init__(
        self,
        secret_key: str | SecretStr,
        *,
        signature_length: int = DEFAULT_SIGNATURE_LENGTH,
    ) -> None:
        key = secret_key if isinstance(secret_key, SecretStr) else SecretStr(secret_key)
        if not key.get_secret_value():
            raise ConfigurationError("missing_secret_key", "A signing key is required.")
        if (
            not MIN_SIGNATURE_LENGTH <= signature_length <= MAX_SIGNATURE_LENGTH
            or signature_length % 2
        ):
            raise ConfigurationError(
                "invalid_signature_length",
                f"signature_length must be an even number between "
                f"{MIN_SIGNATURE_LENGTH} and {MAX_SIGNATURE_LENGTH}, got {signature_length}.",
            )
        self._key = key
        self._length = signature_length

    @property
    def signature_length(self) -> int:
        return self._length

    @property
    def security_bits(self) -> int:
        return self._length * 4

    def sign(self, subject_id: str, variant: str, timestamp_ms: int) -> str:
        digest = hmac_digest(
            self._key.get_secret_value(), subject_id, variant, str(timestamp_ms)
        )
        return digest[: self._length]

    def verify(self, subject_id: str, variant: str, timestamp_ms: int, signature: str) -> bool:
        """Constant-time check of *signature* against the expected value."""
        return constant_time_equals(self.sign(subject_id, variant, timestamp_ms), signature)

    def __repr__(self) -> str:
        return f"HmacSigner(signature_length={self._length}, key=SecretStr('**********'))"


__all__ = ["HmacSigner", "DEFAULT_SIGNATURE_LENGTH"]

"""
variant_sdk.tier2_signing.checksum
───────────────────────────────────
CRC-32 tagged cookies: ``name=value|XXXXXXXX``.

CRC-32 is a corruption check, not a security boundary. Anyone who knows
the format can recompute the tag; use HmacSigner where forgery matters.
"""
from __future__ import annotations

import zlib
from dataclasses import dataclass

from variant_sdk.tier0_core.config import VariantConfig, get_config
from variant_sdk.tier0_core.errors import ValidationError
from variant_sdk.tier0_core.logging import get_logger
from variant_sdk.tier0_core.metrics import checksum_verifications
from variant_sdk.tier1_runtime.cookies import SetCookie

log = get_logger(__name__)

DELIMITER = "|"
SEPARATOR = "="
NO_CHECKSUM = "none"


@dataclass(frozen=True)
class ChecksumVerification:
    """Result of ChecksumSigner.verify(). expected_hex is what the cookie carried."""

    valid: bool
    payload: str
    expected_hex: str
    actual_hex: str


class ChecksumSigner:
    """Sign and verify ``name=value`` pairs with a CRC-32 suffix."""

    @staticmethod
    def checksum(data: str | bytes) -> int:
        """Unsigned 32-bit CRC-32 (IEEE 802.3, as zlib computes it)."""
        raw = data.encode("utf-8", "surrogatepass") if isinstance(data, str) else data
        return zlib.crc32(raw) & 0xFFFFFFFF

    @staticmethod
    def to_hex(value: int) -> str:
        return f"{value:08X}"

    def sign(self, name: str, value: str) -> str:
        if not name:
            raise ValidationError(
                "invalid_cookie_name",
                "Cookie name must not be empty.",
                fields={"name": "empty"},
            )
        bad = {
            field: f"must not contain {SEPARATOR!r} or {DELIMITER!r}"
            for field, text in (("name", name), ("value", value))
            if SEPARATOR in text or DELIMITER in text
        }
        if bad:
            raise ValidationError(
                "reserved_character",
                "Cookie name and value must be encoded before signing.",
                fields=bad,
            )
        payload = f"{name}{SEPARATOR}{value}"
        return f"{payload}{DELIMITER}{self.to_hex(self.checksum(payload))}"

    def set_cookie(self, name: str, value: str, *, config: VariantConfig | None = None) -> str:
        """
        Sign *name*=*value* and return a full ``Set-Cookie`` header value.

        Attributes come from *config* (or the process config): HttpOnly,
        Secure, SameSite=Lax, Path=/, Max-Age from expires_days, and Domain
        when cookie_domain is set.
        """
        cfg = config or get_config()
        signed = self.sign(name, value)
        return SetCookie(
            name=name,
            value=signed[len(name) + len(SEPARATOR):],
            max_age=cfg.max_age_seconds,
            domain=cfg.cookie_domain,
        ).to_header_value()

    def verify(self, cookie: str) -> ChecksumVerification:
        payload, sep, suffix = cookie.rpartition(DELIMITER)
        if not sep:
            result = ChecksumVerification(
                valid=False,
                payload=cookie,
                expected_hex=NO_CHECKSUM,
                actual_hex=self.to_hex(self.checksum(cookie)),
            )
        else:
            expected = suffix.upper()
            actual = self.to_hex(self.checksum(payload))
            result = ChecksumVerification(
                valid=expected == actual,
                payload=payload,
                expected_hex=expected,
                actual_hex=actual,
            )

        checksum_verifications(valid=str(result.valid).lower()).inc()
        if not result.valid:
            log.debug("checksum.mismatch", expected=result.expected_hex, actual=result.actual_hex)
        return result


__all__ = ["ChecksumSigner", "ChecksumVerification", "DELIMITER", "SEPARATOR", "NO_CHECKSUM"]

"""
variant_sdk.tier0_core.errors
──────────────────────────────
Error taxonomy for cookie signing and variant assignment.

Only caller mistakes and startup misconfiguration are raised. A cookie that
fails verification is an expected outcome and is reported as a
ValidationOutcome by the verifiers, never thrown to the request pipeline.
"""
from __future__ import annotations

from typing import Any


# ── Base error ────────────────────────────────────────────────────────────────

class VariantSdkError(Exception):
    """
    Base class for all variant_sdk errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - user_message: safe to surface to end users
    - detail: internal context, never shown to users
    - status_code: HTTP status code a hosting service may map it to
    """

    status_code: int = 500
    code: str = "internal_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "An unexpected error occurred.",
        detail: str | None = None,
        **metadata: Any,
    ) -> None:
        self.code = code or self.__class__.code
        self.user_message = user_message
        self.detail = detail or user_message
        self.metadata = metadata
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.user_message,
            }
        }


# ── Typed error classes ───────────────────────────────────────────────────────

class ValidationError(VariantSdkError):
    """Caller supplied input the signing protocol cannot represent."""
    status_code = 422
    code = "validation_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "Validation failed.",
        fields: dict | None = None,
        **metadata: Any,
    ) -> None:
        self.fields = fields or {}
        super().__init__(code, user_message, **metadata)

    def to_dict(self) -> dict:
        d = super().to_dict()
        if self.fields:
            d["error"]["fields"] = self.fields
        return d


class MalformedCookieError(ValidationError):
    """Cookie value could not be decoded into a variant payload."""
    status_code = 400
    code = "malformed_cookie"


class ConfigurationError(VariantSdkError):
    """Misconfiguration detected at startup (weak key, bad variant set, ...)."""
    status_code = 500
    code = "configuration_error"


__all__ = [
    "VariantSdkError",
    "ValidationError",
    "MalformedCookieError",
    "ConfigurationError",
]

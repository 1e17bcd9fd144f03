"""
variant_sdk.tier1_runtime.serialize
────────────────────────────────────
Variant cookie payload codec: typed model → compact JSON → URL-encoded
cookie value, and back.

Decoding validates the shape strictly. Unknown keys, wrong types or
undecodable text all raise MalformedCookieError; nothing is coerced.
"""
from __future__ import annotations

from urllib.parse import quote, unquote

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr
from pydantic import ValidationError as PydanticValidationError

from variant_sdk.tier0_core.errors import MalformedCookieError


class VariantPayload(BaseModel):
    """
    The record carried by a variant cookie.

    v:  variant label
    s:  truncated HMAC signature over (subject, v, t)
    t:  assignment time, epoch milliseconds
    id: time-ordered assignment id, for audit/dedup only
    e:  experiment id; absent for the default experiment
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    v: StrictStr = Field(min_length=1)
    s: StrictStr = Field(min_length=1)
    t: StrictInt
    id: StrictStr = Field(min_length=1)
    e: StrictStr | None = None


def encode_payload(payload: VariantPayload) -> str:
    """Serialize a payload into a URL-encoded JSON cookie value."""
    return quote(payload.model_dump_json(exclude_none=True), safe="")


def decode_payload(value: str) -> VariantPayload:
    """
    Parse a cookie value produced by encode_payload().
    Raises MalformedCookieError for anything that is not a well-formed payload.
    """
    if not value:
        raise MalformedCookieError(
            "empty_cookie", "Cookie value is empty."
        )
    try:
        return VariantPayload.model_validate_json(unquote(value, errors="strict"))
    except (PydanticValidationError, UnicodeDecodeError) as exc:
        raise MalformedCookieError(
            user_message="Cookie value is not a valid variant payload.",
            detail=str(exc),
        ) from exc


__all__ = ["VariantPayload", "encode_payload", "decode_payload"]

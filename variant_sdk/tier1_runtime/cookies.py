"""
variant_sdk.tier1_runtime.cookies
──────────────────────────────────
Cookie header parsing and Set-Cookie serialization. No transport here:
callers pass in the raw ``Cookie`` header and emit the returned string.
"""
from __future__ import annotations

from dataclasses import dataclass


def parse_cookie_header(header: str | None) -> dict[str, str]:
    """
    Parse a ``Cookie`` header into a name → raw value dict.

    Values are returned undecoded. Pairs without ``=`` are ignored; when a
    name repeats, the first occurrence wins (browsers send the most specific
    path first).
    """
    if not header:
        return {}
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        name, sep, value = pair.strip().partition("=")
        name = name.strip()
        if not sep or not name:
            continue
        cookies.setdefault(name, value.strip())
    return cookies


@dataclass(frozen=True)
class SetCookie:
    """A ``Set-Cookie`` directive. Attribute order is fixed."""

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = True
    httponly: bool = True
    samesite: str = "Lax"

    def to_header_value(self) -> str:
        """Serialize to a ``Set-Cookie`` header value string."""
        parts = [f"{self.name}={self.value}"]
        if self.httponly:
            parts.append("HttpOnly")
        if self.secure:
            parts.append("Secure")
        if self.samesite:
            parts.append(f"SameSite={self.samesite}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.domain:
            parts.append(f"Domain={self.domain}")
        return "; ".join(parts)


__all__ = ["parse_cookie_header", "SetCookie"]

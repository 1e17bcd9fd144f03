"""
variant_sdk.tier0_core.secrets
───────────────────────────────
Signing-key retrieval. Keys are wrapped in SecretStr so they cannot end up
in logs, reprs or serialized payloads.

Minimal stack: env vars (default) | in-memory mock (tests)
Select via:    VariantConfig.secrets_backend (VARIANT_SECRETS_BACKEND=env|mock)
"""
from __future__ import annotations

import os
from typing import Protocol, runtime_checkable

from variant_sdk.tier0_core.config import VariantConfig, get_config
from variant_sdk.tier0_core.errors import ConfigurationError


# ── SecretStr: prevents logging/serialization ────────────────────────────────

class SecretStr:
    """
    Wrapper that hides the secret value from logs, repr, and JSON.
    Access the raw value only via .get_secret_value().
    """

    __slots__ = ("_value",)

    def __init__(self, value: str) -> None:
        self._value = value

    def get_secret_value(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return "SecretStr('**********')"

    def __str__(self) -> str:
        return "**********"

    def __len__(self) -> int:
        return len(self._value.encode("utf-8", "surrogatepass"))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SecretStr):
            return self._value == other._value
        return False


# ── Provider protocol ─────────────────────────────────────────────────────────

@runtime_checkable
class SecretsProvider(Protocol):
    def get(self, key: str) -> SecretStr: ...
    def set(self, key: str, value: str) -> None: ...


# ── Env provider ──────────────────────────────────────────────────────────────

class EnvSecretsProvider:
    """Reads secrets from environment variables."""

    def get(self, key: str) -> SecretStr:
        value = os.environ.get(key.upper())
        if not value:
            raise ConfigurationError(
                "secret_not_found",
                f"Secret {key!r} not found in environment.",
            )
        return SecretStr(value)

    def set(self, key: str, value: str) -> None:
        os.environ[key.upper()] = value


# ── Mock provider (tests) ─────────────────────────────────────────────────────

class MockSecretsProvider:
    """In-memory secrets store for tests."""

    def __init__(self, seed: dict[str, str] | None = None) -> None:
        self._store: dict[str, str] = dict(seed or {})

    def get(self, key: str) -> SecretStr:
        if key not in self._store:
            # Long enough to pass the minimum key length check.
            return SecretStr(f"mock-secret-for-{key}".ljust(48, "0"))
        return SecretStr(self._store[key])

    def set(self, key: str, value: str) -> None:
        self._store[key] = value


# ── Provider registry ─────────────────────────────────────────────────────────

_provider: SecretsProvider | None = None


def _build_provider(config: VariantConfig | None = None) -> SecretsProvider:
    name = (config or get_config()).secrets_backend.lower()
    if name in ("env", "none"):
        return EnvSecretsProvider()
    if name == "mock":
        return MockSecretsProvider()
    raise ConfigurationError(
        "unknown_secrets_backend",
        f"Unknown VARIANT_SECRETS_BACKEND={name!r}. Valid: env, mock",
    )


def get_provider() -> SecretsProvider:
    global _provider
    if _provider is None:
        _provider = _build_provider()
    return _provider


def set_provider(provider: SecretsProvider) -> None:
    """Install a provider explicitly (startup wiring or tests)."""
    global _provider
    _provider = provider


def _reset_provider() -> None:
    global _provider
    _provider = None


# ── Public API ────────────────────────────────────────────────────────────────

def get_secret(key: str) -> SecretStr:
    """Retrieve a secret by name. Returns SecretStr; the value is never logged."""
    return get_provider().get(key)


__all__ = [
    "SecretStr", "SecretsProvider",
    "EnvSecretsProvider", "MockSecretsProvider",
    "get_provider", "set_provider", "get_secret",
]

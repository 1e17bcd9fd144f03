"""
variant_sdk.tier0_core.config
──────────────────────────────
Typed configuration with env layering. Reads from .env → environment
variables. All fields are typed via Pydantic; invalid values fail at
startup, not on the first request.

Minimal stack: pydantic-settings + python-dotenv
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_MS_PER_SECOND = 1000
_SECONDS_PER_DAY = 24 * 60 * 60


class VariantConfig(BaseSettings):
    """
    Cookie and experiment settings shared by every VariantManager in the
    process. The secret key itself is not a field here: it is resolved
    through the secrets provider under ``secret_key_name``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ── Application ───────────────────────────────────────────────────────────
    app_name: str = Field(default="variant-sdk", alias="APP_NAME")
    environment: str = Field(default="development", alias="APP_ENV")

    # ── Cookies ───────────────────────────────────────────────────────────────
    cookie_name_prefix: str = Field(default="ab_variant", alias="VARIANT_COOKIE_NAME")
    cookie_domain: str | None = Field(default=None, alias="VARIANT_COOKIE_DOMAIN")
    expires_days: int = Field(default=30, ge=1, alias="VARIANT_EXPIRES_DAYS")

    # ── Experiments ───────────────────────────────────────────────────────────
    variants: list[str] = Field(default_factory=lambda: ["A", "B"], alias="VARIANT_VARIANTS")

    # ── Signing ───────────────────────────────────────────────────────────────
    signature_length: int = Field(default=16, alias="VARIANT_SIGNATURE_LENGTH")
    min_key_length: int = Field(default=32, ge=1, alias="VARIANT_MIN_KEY_LENGTH")
    secret_key_name: str = Field(
        default="VARIANT_SECRET_KEY", alias="VARIANT_SECRET_KEY_NAME"
    )
    secrets_backend: str = Field(default="env", alias="VARIANT_SECRETS_BACKEND")

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="VARIANT_LOG_LEVEL")
    log_format: str = Field(default="json", alias="VARIANT_LOG_FORMAT")

    @field_validator("environment")
    @classmethod
    def validate_env(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if v.lower() not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got {v!r}")
        return v.lower()

    @field_validator("cookie_name_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        if not v or any(c in v for c in "=;, \t"):
            raise ValueError(f"cookie_name_prefix is not a valid cookie name: {v!r}")
        return v

    @property
    def max_age_seconds(self) -> int:
        return self.expires_days * _SECONDS_PER_DAY

    @property
    def max_age_ms(self) -> int:
        return self.max_age_seconds * _MS_PER_SECOND

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_config() -> VariantConfig:
    """
    Return the singleton config. Cached after first call.
    Call _reset_config() in tests to pick up new env vars.
    """
    return VariantConfig()


def _reset_config() -> None:
    """For tests: clear the config cache."""
    get_config.cache_clear()


__all__ = ["VariantConfig", "get_config"]

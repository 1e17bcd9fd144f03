"""
variant_sdk.tier3_experiments.variants
───────────────────────────────────────
Signed A/B variant cookies.

VariantManager assigns a subject to a variant (deterministically, or by
caller override), signs the assignment with HmacSigner and serializes it
into a ``Set-Cookie`` header. On later requests it validates the cookie
against the subject the caller supplies.

Lifecycle of a cookie as seen by the verifier:

    Unissued → Issued → Valid | Stale | Forged | Malformed

The right-hand states are terminal; a rejected cookie is replaced by
issuing a fresh one, never repaired. Validation never raises for bad
input: a failed check means "treat as a first-time visitor".

The manager holds only its key and configuration, both read-only, so one
instance can be shared by every request handler in the process.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from variant_sdk.tier0_core.config import VariantConfig, get_config
from variant_sdk.tier0_core.errors import ConfigurationError, MalformedCookieError, ValidationError
from variant_sdk.tier0_core.ids import new_id
from variant_sdk.tier0_core.logging import get_logger
from variant_sdk.tier0_core.metrics import cookies_issued, validations
from variant_sdk.tier0_core.secrets import SecretStr, get_secret
from variant_sdk.tier1_runtime.clock import Clock, get_clock
from variant_sdk.tier1_runtime.cookies import SetCookie, parse_cookie_header
from variant_sdk.tier1_runtime.serialize import VariantPayload, decode_payload, encode_payload
from variant_sdk.tier2_signing.hmac_signer import HmacSigner
from variant_sdk.tier3_experiments.bucketing import BucketAssigner, Bucketer

log = get_logger(__name__)

DEFAULT_EXPERIMENT = "default"
DEFAULT_SUBJECT = "default"

# Only reachable through VariantManager.insecure_dev().
_INSECURE_DEV_KEY = "variant-sdk-insecure-development-key-not-for-production"

_RESERVED_NAME_CHARS = frozenset("=;, \t\r\n\"")


def _experiment_tag(experiment_id: str | None) -> str | None:
    """None for the default experiment, whether named or left out."""
    if not experiment_id or experiment_id == DEFAULT_EXPERIMENT:
        return None
    return experiment_id


class ValidationOutcome(str, Enum):
    VALID = "valid"
    MALFORMED = "malformed"
    FORGED = "forged"
    STALE = "stale"


@dataclass(frozen=True)
class VariantValidation:
    """
    Verdict on a variant cookie. ``variant`` is set only when valid.
    ``outcome`` is for logs and metrics; do not echo it to untrusted clients.
    """

    valid: bool
    outcome: ValidationOutcome
    variant: str | None = None


@dataclass(frozen=True)
class VariantAssignment:
    variant: str
    experiment_key: str
    set_cookie: str


class VariantManager:
    """
    Issue and verify signed variant cookies.

    Usage:
        manager = VariantManager.from_config()
        assignment = manager.issue_variant("user123", "landing")
        response.headers.append("Set-Cookie", assignment.set_cookie)

        # next request
        result = manager.read_variant(request.headers.get("Cookie"), "user123", "landing")
        if not result.valid:
            ...  # first-time visitor: issue again
    """

    def __init__(
        self,
        secret_key: str | SecretStr,
        *,
        config: VariantConfig | None = None,
        clock: Clock | None = None,
        bucketer: Bucketer | None = None,
    ) -> None:
        config = config or get_config()
        key = secret_key if isinstance(secret_key, SecretStr) else SecretStr(secret_key)
        if not key.get_secret_value():
            raise ConfigurationError("missing_secret_key", "A signing key is required.")
        if len(key) < config.min_key_length:
            raise ConfigurationError(
                "weak_secret_key",
                f"Signing key must be at least {config.min_key_length} bytes.",
            )

        self._config = config
        self._signer = HmacSigner(key, signature_length=config.signature_length)
        self._bucketer = bucketer or BucketAssigner(config.variants)
        self._clock = clock

    # ── Construction paths ────────────────────────────────────────────────────

    @classmethod
    def from_config(
        cls,
        config: VariantConfig | None = None,
        *,
        clock: Clock | None = None,
        bucketer: Bucketer | None = None,
    ) -> "VariantManager":
        """Build a manager with the key resolved from the secrets provider."""
        config = config or get_config()
        key = get_secret(config.secret_key_name)
        return cls(key, config=config, clock=clock, bucketer=bucketer)

    @classmethod
    def insecure_dev(
        cls,
        config: VariantConfig | None = None,
        *,
        clock: Clock | None = None,
        bucketer: Bucketer | None = None,
    ) -> "VariantManager":
        """
        Build a manager with a fixed, publicly known key. Cookies it issues
        are trivially forgeable. Refused when the environment is production.
        """
        config = config or get_config()
        if config.is_production:
            raise ConfigurationError(
                "insecure_key_in_production",
                "The development signing key cannot be used in production.",
            )
        log.warning("variant.insecure_dev_key", environment=config.environment)
        return cls(_INSECURE_DEV_KEY, config=config, clock=clock, bucketer=bucketer)

    # ── Introspection ─────────────────────────────────────────────────────────

    @property
    def variants(self) -> tuple[str, ...]:
        return self._bucketer.variants

    @property
    def max_age_ms(self) -> int:
        return self._config.max_age_ms

    def _now_ms(self) -> int:
        return (self._clock or get_clock()).timestamp_ms()

    def __repr__(self) -> str:
        return (
            f"VariantManager(cookie={self._config.cookie_name_prefix!r}, "
            f"max_age={self._config.max_age_seconds}s, variants={self.variants!r})"
        )

    # ── Naming ────────────────────────────────────────────────────────────────

    def cookie_name(self, experiment_id: str | None = None) -> str:
        """The bare prefix for the default experiment, else ``prefix_<id>``."""
        prefix = self._config.cookie_name_prefix
        experiment_id = _experiment_tag(experiment_id)
        if experiment_id is None:
            return prefix
        if _RESERVED_NAME_CHARS.intersection(experiment_id):
            raise ValidationError(
                "invalid_experiment_id",
                "Experiment id cannot be used in a cookie name.",
                fields={"experiment_id": experiment_id},
            )
        return f"{prefix}_{experiment_id}"

    def experiment_key(self, cookie_name: str) -> str | None:
        """Map a cookie name back to its experiment key; None if not ours."""
        prefix = self._config.cookie_name_prefix
        if cookie_name == prefix:
            return DEFAULT_EXPERIMENT
        key = cookie_name[len(prefix) + 1:]
        if cookie_name.startswith(prefix + "_") and _experiment_tag(key) is not None:
            return key
        return None

    # ── Assignment ────────────────────────────────────────────────────────────

    def assign_variant(self, subject_id: str, experiment_id: str) -> str:
        """What this subject would get. Pure; nothing is signed or issued."""
        return self._bucketer.assign(subject_id, experiment_id)

    def create_variant_cookie(
        self,
        variant: str,
        experiment_id: str | None = None,
        *,
        subject_id: str | None = None,
    ) -> str:
        """
        Return a ``Set-Cookie`` header value carrying a signed assignment of
        *variant*. The signature binds *subject_id* ("default" when omitted),
        so the same subject must be passed to validate_variant().
        """
        if variant not in self.variants:
            raise ValidationError(
                "unknown_variant",
                f"Variant must be one of {self.variants!r}.",
                fields={"variant": variant},
            )
        name = self.cookie_name(experiment_id)
        timestamp = self._now_ms()
        payload = VariantPayload(
            v=variant,
            s=self._signer.sign(subject_id or DEFAULT_SUBJECT, variant, timestamp),
            t=timestamp,
            id=new_id(),
            e=_experiment_tag(experiment_id),
        )
        header = SetCookie(
            name=name,
            value=encode_payload(payload),
            max_age=self._config.max_age_seconds,
            domain=self._config.cookie_domain,
        ).to_header_value()

        experiment = experiment_id or DEFAULT_EXPERIMENT
        cookies_issued(experiment=experiment).inc()
        log.info("variant.issued", experiment=experiment, variant=variant, assignment_id=payload.id)
        return header

    def issue_variant(
        self,
        subject_id: str,
        experiment_id: str | None = None,
        *,
        override: str | None = None,
    ) -> VariantAssignment:
        """Bucket the subject (unless *override* is given) and sign the result."""
        experiment = experiment_id or DEFAULT_EXPERIMENT
        variant = override if override is not None else self.assign_variant(subject_id, experiment)
        return VariantAssignment(
            variant=variant,
            experiment_key=experiment,
            set_cookie=self.create_variant_cookie(variant, experiment_id, subject_id=subject_id),
        )

    # ── Reading ───────────────────────────────────────────────────────────────

    def extract_all_variants(self, cookie_header: str | None) -> dict[str, str]:
        """
        Return {experiment_key: variant} for every variant cookie in a raw
        ``Cookie`` header. Signatures are not checked here; malformed
        entries are logged and skipped.
        """
        found: dict[str, str] = {}
        for name, raw in parse_cookie_header(cookie_header).items():
            key = self.experiment_key(name)
            if key is None:
                continue
            try:
                payload = decode_payload(raw)
            except MalformedCookieError as exc:
                log.warning("cookie.malformed", cookie_name=name, reason=exc.code)
                continue
            found[key] = payload.v
        return found

    def validate_variant(
        self,
        cookie_value: str,
        subject_id: str,
        *,
        experiment_id: str | None = None,
    ) -> VariantValidation:
        """
        Check a cookie value against *subject_id*. When *experiment_id* is
        given, the payload must also name that experiment. Never raises for
        malformed input.
        """
        try:
            payload = decode_payload(cookie_value)
        except MalformedCookieError as exc:
            log.info("variant.malformed", reason=exc.code)
            return self._verdict(ValidationOutcome.MALFORMED)

        if payload.v not in self.variants:
            log.info("variant.malformed", reason="unknown_variant", assignment_id=payload.id)
            return self._verdict(ValidationOutcome.MALFORMED)

        if not self._signer.verify(subject_id, payload.v, payload.t, payload.s):
            log.info("variant.forged", assignment_id=payload.id, experiment=payload.e)
            return self._verdict(ValidationOutcome.FORGED)

        if experiment_id is not None and payload.e != _experiment_tag(experiment_id):
            log.info(
                "variant.forged",
                reason="experiment_mismatch",
                assignment_id=payload.id,
                experiment=payload.e,
            )
            return self._verdict(ValidationOutcome.FORGED)

        age_ms = self._now_ms() - payload.t
        if age_ms > self._config.max_age_ms:
            log.info("variant.stale", assignment_id=payload.id, age_ms=age_ms)
            return self._verdict(ValidationOutcome.STALE)

        return self._verdict(ValidationOutcome.VALID, payload.v)

    def read_variant(
        self,
        cookie_header: str | None,
        subject_id: str,
        experiment_id: str | None = None,
    ) -> VariantValidation:
        """Find this experiment's cookie in a ``Cookie`` header and validate it."""
        raw = parse_cookie_header(cookie_header).get(self.cookie_name(experiment_id))
        if raw is None:
            return self._verdict(ValidationOutcome.MALFORMED)
        return self.validate_variant(raw, subject_id, experiment_id=experiment_id or "")

    @staticmethod
    def _verdict(outcome: ValidationOutcome, variant: str | None = None) -> VariantValidation:
        validations(outcome=outcome.value).inc()
        return VariantValidation(
            valid=outcome is ValidationOutcome.VALID,
            outcome=outcome,
            variant=variant,
        )


__all__ = [
    "VariantManager",
    "VariantValidation",
    "VariantAssignment",
    "ValidationOutcome",
    "DEFAULT_EXPERIMENT",
]

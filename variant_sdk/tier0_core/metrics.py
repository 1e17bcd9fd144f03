"""
variant_sdk.tier0_core.metrics
───────────────────────────────
Counters with standard naming and labels, exported through the default
Prometheus registry. The hosting service decides how to expose them.

Minimal stack: prometheus-client
Labels:        service (VariantConfig.app_name), env (VariantConfig.environment)
"""
from __future__ import annotations

from typing import Callable

from prometheus_client import Counter

from variant_sdk.tier0_core.config import get_config

# Standard labels applied to every metric
_DEFAULT_LABELS = ("service", "env")


def default_label_values() -> dict[str, str]:
    """Current values of the standard labels, read from the active config."""
    cfg = get_config()
    return {"service": cfg.app_name, "env": cfg.environment}


def counter(name: str, description: str, labels: list[str] | None = None) -> Callable:
    """
    Create a counter with standard labels.

    Usage:
        issued_total = counter("variant_cookies_issued_total", "Cookies issued", ["experiment"])
        issued_total(experiment="landing").inc()
    """
    c = Counter(name, description, [*_DEFAULT_LABELS, *(labels or [])])

    def _counter(**extra_labels: str) -> Counter:
        return c.labels(**default_label_values(), **extra_labels)

    return _counter


# ── SDK metrics ───────────────────────────────────────────────────────────────

cookies_issued = counter(
    "variant_cookies_issued_total",
    "Signed variant cookies issued",
    ["experiment"],
)

validations = counter(
    "variant_validations_total",
    "Variant cookie validations by outcome",
    ["outcome"],
)

checksum_verifications = counter(
    "checksum_verifications_total",
    "Checksum cookie verifications",
    ["valid"],
)


__all__ = [
    "counter", "default_label_values",
    "cookies_issued", "validations", "checksum_verifications",
]

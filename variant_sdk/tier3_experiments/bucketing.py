"""
variant_sdk.tier3_experiments.bucketing
────────────────────────────────────────
Deterministic bucketing of subjects into experiment variants. The same
(subject_id, experiment_id) pair always maps to the same variant, across
calls and process restarts, with no assignment table.
"""
from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from variant_sdk.tier0_core.errors import ConfigurationError
from variant_sdk.tier0_core.logging import get_logger
from variant_sdk.tier2_signing.checksum import ChecksumSigner

log = get_logger(__name__)

DEFAULT_VARIANTS: tuple[str, ...] = ("A", "B")


def _check_variants(variants: Sequence[str]) -> tuple[str, ...]:
    labels = tuple(variants)
    if not labels:
        raise ConfigurationError("empty_variants", "At least one variant is required.")
    if any(not label for label in labels):
        raise ConfigurationError("empty_variant_label", "Variant labels must be non-empty.")
    if len(set(labels)) != len(labels):
        raise ConfigurationError("duplicate_variants", f"Duplicate variant labels in {labels!r}.")
    return labels


@runtime_checkable
class Bucketer(Protocol):
    variants: tuple[str, ...]

    def assign(self, subject_id: str, experiment_id: str) -> str: ...


class BucketAssigner:
    """
    CRC-32 bucketing: ``variants[crc32(subject_id + experiment_id) % n]``.

    With the default ("A", "B") pair, even checksums land in A and odd ones
    in B. The split is approximately uniform, not weighted.
    """

    def __init__(
        self,
        variants: Sequence[str] = DEFAULT_VARIANTS,
        *,
        checksum: ChecksumSigner | None = None,
    ) -> None:
        self.variants = _check_variants(variants)
        self._checksum = checksum or ChecksumSigner()

    def assign(self, subject_id: str, experiment_id: str) -> str:
        if not subject_id:
            # Valid input, but every anonymous visitor collapses into one bucket.
            log.warning("bucket.empty_subject", experiment=experiment_id)
        value = self._checksum.checksum(subject_id + experiment_id)
        return self.variants[value % len(self.variants)]


class FixedBucketAssigner:
    """Always returns the same variant. For previews and tests."""

    def __init__(self, variant: str, variants: Sequence[str] = DEFAULT_VARIANTS) -> None:
        self.variants = _check_variants(variants)
        if variant not in self.variants:
            raise ConfigurationError(
                "unknown_variant", f"{variant!r} is not one of {self.variants!r}."
            )
        self._variant = variant

    def assign(self, subject_id: str, experiment_id: str) -> str:
        return self._variant


__all__ = ["Bucketer", "BucketAssigner", "FixedBucketAssigner", "DEFAULT_VARIANTS"]

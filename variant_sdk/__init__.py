"""
variant_sdk
───────────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from variant_sdk.tier0_core.logging import get_logger
from variant_sdk.tier0_core.errors import (
    VariantSdkError,
    ValidationError,
    MalformedCookieError,
    ConfigurationError,
)
from variant_sdk.tier0_core.config import get_config, VariantConfig
from variant_sdk.tier0_core.secrets import get_secret, SecretStr

from variant_sdk.tier1_runtime.clock import Clock, get_clock, set_clock
from variant_sdk.tier1_runtime.cookies import parse_cookie_header, SetCookie
from variant_sdk.tier1_runtime.serialize import VariantPayload, encode_payload, decode_payload

from variant_sdk.tier2_signing.checksum import ChecksumSigner, ChecksumVerification
from variant_sdk.tier2_signing.hmac_signer import HmacSigner
from variant_sdk.tier2_signing.crypto import generate_secret_key

from variant_sdk.tier3_experiments.bucketing import BucketAssigner
from variant_sdk.tier3_experiments.variants import (
    VariantManager,
    VariantValidation,
    VariantAssignment,
    ValidationOutcome,
)

__version__ = "0.1.0"
__all__ = [
    # logging
    "get_logger",
    # errors
    "VariantSdkError", "ValidationError", "MalformedCookieError", "ConfigurationError",
    # config
    "get_config", "VariantConfig",
    # secrets
    "get_secret", "SecretStr",
    # clock
    "Clock", "get_clock", "set_clock",
    # cookies
    "parse_cookie_header", "SetCookie",
    # serialize
    "VariantPayload", "encode_payload", "decode_payload",
    # signing
    "ChecksumSigner", "ChecksumVerification", "HmacSigner", "generate_secret_key",
    # experiments
    "BucketAssigner", "VariantManager", "VariantValidation",
    "VariantAssignment", "ValidationOutcome",
]

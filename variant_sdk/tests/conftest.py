"""
variant_sdk test configuration.

All tests run with the mock secrets backend and a test environment, no
real keys or external services required.
"""
from __future__ import annotations

import os

import pytest

# ── Force test settings ────────────────────────────────────────────────────
# These must be set before any variant_sdk modules are imported.

os.environ.setdefault("VARIANT_SECRETS_BACKEND", "mock")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("VARIANT_LOG_LEVEL", "WARNING")

TEST_KEY = "test-signing-key-0123456789abcdef0123456789"
NOW_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_module_singletons():
    """
    Reset cached singletons between tests so providers, config and the
    global clock never bleed from one test into the next.
    """
    import variant_sdk.tier0_core.config as _config
    import variant_sdk.tier0_core.secrets as _secrets
    import variant_sdk.tier1_runtime.clock as _clock

    orig_secrets = _secrets._provider
    orig_clock = _clock._clock
    _config._reset_config()

    yield

    _secrets._provider = orig_secrets
    _clock._clock = orig_clock
    _config._reset_config()


@pytest.fixture
def clock():
    from variant_sdk.tier1_runtime.clock import Clock
    return Clock.at_ms(NOW_MS)


@pytest.fixture
def config():
    from variant_sdk.tier0_core.config import VariantConfig
    return VariantConfig(environment="test")


@pytest.fixture
def manager(config, clock):
    from variant_sdk.tier3_experiments.variants import VariantManager
    return VariantManager(TEST_KEY, config=config, clock=clock)


@pytest.fixture
def signer():
    from variant_sdk.tier2_signing.hmac_signer import HmacSigner
    return HmacSigner(TEST_KEY)

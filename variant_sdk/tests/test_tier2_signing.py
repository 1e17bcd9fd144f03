"""Tests for tier2_signing modules."""
from __future__ import annotations

import zlib

import pytest
from prometheus_client import REGISTRY

from variant_sdk.tier0_core.config import VariantConfig, _reset_config
from variant_sdk.tier0_core.errors import ConfigurationError, ValidationError
from variant_sdk.tier0_core.metrics import default_label_values
from variant_sdk.tier0_core.secrets import SecretStr
from variant_sdk.tier2_signing.checksum import NO_CHECKSUM, ChecksumSigner
from variant_sdk.tier2_signing.crypto import constant_time_equals, generate_secret_key, hmac_digest
from variant_sdk.tier2_signing.hmac_signer import HmacSigner

from conftest import NOW_MS, TEST_KEY


def _flip(text: str, index: int) -> str:
    """Replace one character with one that differs even case-insensitively."""
    replacement = "Z" if text[index].upper() != "Z" else "Y"
    return text[:index] + replacement + text[index + 1:]


# ── checksum ───────────────────────────────────────────────────────────────

class TestChecksumSigner:
    def test_known_vector(self):
        assert ChecksumSigner().sign("session", "abc") == "session=abc|D9D2E670"

    def test_verify_known_vector(self):
        result = ChecksumSigner().verify("session=abc|D9D2E670")
        assert result.valid is True
        assert result.payload == "session=abc"

    def test_verify_wrong_checksum(self):
        result = ChecksumSigner().verify("session=abc|FFFFFFFF")
        assert result.valid is False
        assert result.expected_hex == "FFFFFFFF"
        assert result.actual_hex == "D9D2E670"

    def test_verify_is_case_insensitive(self):
        assert ChecksumSigner().verify("session=abc|d9d2e670").valid is True

    def test_matches_zlib(self):
        signer = ChecksumSigner()
        assert signer.checksum(b"hello") == zlib.crc32(b"hello")
        assert signer.checksum("") == 0

    def test_hex_is_fixed_width(self):
        assert ChecksumSigner.to_hex(0x1F) == "0000001F"

    @pytest.mark.parametrize("name,value", [
        ("session", "abc"),
        ("theme", ""),
        ("user_id", "42"),
        ("locale", "fr-CA"),
        ("name", "café"),
    ])
    def test_round_trip(self, name, value):
        signer = ChecksumSigner()
        result = signer.verify(signer.sign(name, value))
        assert result.valid is True
        assert result.payload == f"{name}={value}"

    def test_any_single_flip_is_detected(self):
        signer = ChecksumSigner()
        cookie = signer.sign("session", "abc")
        for i in range(len(cookie)):
            assert signer.verify(_flip(cookie, i)).valid is False, i

    def test_no_delimiter(self):
        result = ChecksumSigner().verify("session=abc")
        assert result.valid is False
        assert result.expected_hex == NO_CHECKSUM
        assert result.payload == "session=abc"

    def test_splits_on_last_delimiter(self):
        result = ChecksumSigner().verify("a|b|D9D2E670")
        assert result.payload == "a|b"
        assert result.valid is False

    @pytest.mark.parametrize("name,value", [
        ("a=b", "c"),
        ("a|b", "c"),
        ("a", "b|c"),
        ("a", "b=c"),
        ("", "c"),
    ])
    def test_sign_rejects_reserved_characters(self, name, value):
        with pytest.raises(ValidationError):
            ChecksumSigner().sign(name, value)

    def test_verification_is_counted(self):
        labels = {**default_label_values(), "valid": "false"}
        before = REGISTRY.get_sample_value("checksum_verifications_total", labels) or 0.0
        ChecksumSigner().verify("session=abc|FFFFFFFF")
        assert REGISTRY.get_sample_value("checksum_verifications_total", labels) == before + 1

    def test_lone_surrogate_is_invalid_not_an_error(self):
        assert ChecksumSigner().verify("a=\ud800|00000000").valid is False

    def test_lone_surrogate_round_trip(self):
        signer = ChecksumSigner()
        assert signer.verify(signer.sign("a", "\udcff")).valid is True

    def test_set_cookie_header(self, config):
        header = ChecksumSigner().set_cookie("session", "abc", config=config)
        assert header == "session=abc|D9D2E670; HttpOnly; Secure; SameSite=Lax; Path=/; Max-Age=2592000"

    def test_set_cookie_domain_and_expiry(self):
        cfg = VariantConfig(cookie_domain="example.com", expires_days=1)
        header = ChecksumSigner().set_cookie("theme", "dark", config=cfg)
        assert header.startswith("theme=dark|")
        assert header.endswith("; Max-Age=86400; Domain=example.com")

    def test_set_cookie_uses_process_config(self, monkeypatch):
        monkeypatch.setenv("VARIANT_EXPIRES_DAYS", "7")
        _reset_config()
        header = ChecksumSigner().set_cookie("theme", "dark")
        assert "; Max-Age=604800" in header

    def test_set_cookie_value_verifies(self, config):
        signer = ChecksumSigner()
        header = signer.set_cookie("user_id", "42", config=config)
        assert signer.verify(header.split("; ")[0]).valid is True

    def test_set_cookie_rejects_reserved_characters(self, config):
        with pytest.raises(ValidationError):
            ChecksumSigner().set_cookie("a", "b|c", config=config)


# ── crypto ─────────────────────────────────────────────────────────────────

class TestCrypto:
    def test_hmac_digest_concatenates_parts(self):
        assert hmac_digest("k", "ab", "c") == hmac_digest("k", "abc")

    def test_constant_time_equals(self):
        assert constant_time_equals("abc", "abc")
        assert not constant_time_equals("abc", "abd")
        assert not constant_time_equals("abc", "ab")

    def test_constant_time_equals_non_ascii(self):
        assert not constant_time_equals("abc", "éé")

    def test_lone_surrogates_are_hashable(self):
        assert len(hmac_digest("k", "\ud800")) == 64
        assert hmac_digest("k", "\ud800") != hmac_digest("k", "\udc00")
        assert not constant_time_equals("\ud800", "abc")

    def test_generate_secret_key_length(self):
        assert len(generate_secret_key()) >= 32
        assert generate_secret_key() != generate_secret_key()


# ── hmac signer ────────────────────────────────────────────────────────────

class TestHmacSigner:
    def test_signature_length(self, signer):
        sig = signer.sign("alice", "A", NOW_MS)
        assert len(sig) == 16
        int(sig, 16)

    def test_matches_truncated_hmac(self, signer):
        full = hmac_digest(TEST_KEY, "alice", "A", str(NOW_MS))
        assert signer.sign("alice", "A", NOW_MS) == full[:16]

    def test_deterministic(self, signer):
        assert signer.sign("alice", "A", NOW_MS) == signer.sign("alice", "A", NOW_MS)

    def test_binds_every_input(self, signer):
        base = signer.sign("alice", "A", NOW_MS)
        assert signer.sign("bob", "A", NOW_MS) != base
        assert signer.sign("alice", "B", NOW_MS) != base
        assert signer.sign("alice", "A", NOW_MS + 1) != base

    def test_key_matters(self, signer):
        other = HmacSigner("another-signing-key-0123456789abcdef")
        assert other.sign("alice", "A", NOW_MS) != signer.sign("alice", "A", NOW_MS)

    def test_verify(self, signer):
        sig = signer.sign("alice", "A", NOW_MS)
        assert signer.verify("alice", "A", NOW_MS, sig)
        assert not signer.verify("bob", "A", NOW_MS, sig)
        assert not signer.verify("alice", "A", NOW_MS, sig.upper())
        assert not signer.verify("alice", "A", NOW_MS, "é" * 16)

    def test_any_single_flip_is_detected(self, signer):
        sig = signer.sign("alice", "A", NOW_MS)
        for i in range(len(sig)):
            assert not signer.verify("alice", "A", NOW_MS, _flip(sig, i))

    def test_configurable_length(self):
        signer = HmacSigner(TEST_KEY, signature_length=64)
        assert len(signer.sign("alice", "A", NOW_MS)) == 64
        assert signer.security_bits == 256

    @pytest.mark.parametrize("length", [0, 6, 15, 66])
    def test_rejects_bad_length(self, length):
        with pytest.raises(ConfigurationError):
            HmacSigner(TEST_KEY, signature_length=length)

    def test_rejects_empty_key(self):
        with pytest.raises(ConfigurationError):
            HmacSigner("")

    def test_accepts_secret_str(self, signer):
        wrapped = HmacSigner(SecretStr(TEST_KEY))
        assert wrapped.sign("alice", "A", NOW_MS) == signer.sign("alice", "A", NOW_MS)

    def test_repr_hides_key(self, signer):
        assert TEST_KEY not in repr(signer)
        assert not hasattr(signer, "__dict__")

import hashlib

import pytest

from nicelicense.core.errors import IntegrityError
from nicelicense.core.integrity import sha256_hex, verify


def test_sha256_hex_matches_hashlib():
    text = "license text"
    assert sha256_hex(text) == hashlib.sha256(b"license text").hexdigest()


def test_sha256_hex_encodes_utf8():
    assert sha256_hex("Søren") == hashlib.sha256("Søren".encode("utf-8")).hexdigest()


def test_verify_returns_text_when_digest_matches():
    text = "license text"
    assert verify(text, sha256_hex(text), spdx="MIT") is text


def test_verify_accepts_uppercase_pin():
    text = "license text"
    assert verify(text, sha256_hex(text).upper(), spdx="MIT") == text


def test_verify_passes_through_without_pin():
    assert verify("anything", None) == "anything"
    assert verify("anything", "") == "anything"


def test_verify_rejects_mismatch():
    with pytest.raises(IntegrityError) as excinfo:
        verify("license text", "bad", spdx="MIT")
    err = excinfo.value
    assert "Fingerprint mismatch for MIT" in str(err)
    assert "catalog" in str(err)
    assert err.spdx == "MIT"
    assert err.expected == "bad"
    assert err.actual == sha256_hex("license text")


def test_verify_detects_whitespace_changes():
    text = "line one\nline two\n"
    with pytest.raises(IntegrityError):
        verify(text.replace("\n", "\r\n"), sha256_hex(text), spdx="MIT")

"""Tests for the token codec and password encoding."""

from __future__ import annotations

from revolico import codec


class TestTokenCodec:
    """Encrypt/decrypt of the upstream credential."""

    def test_decrypts_with_right_passphrase(self):
        sealed = codec.encrypt("ghp_secret", "phrase")
        assert sealed != "ghp_secret"
        assert codec.decrypt(sealed, "phrase") == "ghp_secret"

    def test_salted(self):
        assert codec.encrypt("ghp_secret", "phrase") != codec.encrypt("ghp_secret", "phrase")

    def test_wrong_passphrase_returns_none(self):
        sealed = codec.encrypt("ghp_secret", "phrase")
        assert codec.decrypt(sealed, "other") is None

    def test_corrupt_ciphertext_returns_none(self):
        sealed = codec.encrypt("ghp_secret", "phrase")
        assert codec.decrypt(sealed[:-6] + "AAAAAA", "phrase") is None
        assert codec.decrypt("!!!$not-a-token", "phrase") is None
        assert codec.decrypt("no-separator", "phrase") is None

    def test_empty_returns_none(self):
        assert codec.decrypt("", "phrase") is None
        assert codec.decrypt(None, "phrase") is None


class TestPasswordEncoding:
    """The stored password is reversible base64, matching the legacy data."""

    def test_legacy_value(self):
        assert codec.encode_password("admin123") == "YWRtaW4xMjM="

    def test_matches(self):
        encoded = codec.encode_password("s3cret")
        assert codec.password_matches("s3cret", encoded)
        assert not codec.password_matches("wrong", encoded)
        assert not codec.password_matches("s3cret", None)

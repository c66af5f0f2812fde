"""Tests for password hashing and validation."""

import pytest

from stemlearn.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    is_password_hash,
    validate_password_strength,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("secret1")
        assert verify_password("secret1", hashed) is True

    def test_wrong_password_rejected(self):
        hashed = hash_password("secret1")
        assert verify_password("secret2", hashed) is False

    def test_hash_is_argon2id_and_salted(self):
        first = hash_password("secret1")
        second = hash_password("secret1")
        assert first.startswith("$argon2id$")
        assert first != second

    def test_plain_text_stored_value_never_matches(self):
        assert verify_password("secret1", "secret1") is False

    def test_missing_hash_never_matches(self):
        assert verify_password("secret1", None) is False
        assert verify_password("secret1", "") is False

    def test_fresh_hash_needs_no_rehash(self):
        assert check_needs_rehash(hash_password("secret1")) is False

    def test_is_password_hash(self):
        assert is_password_hash(hash_password("secret1")) is True
        assert is_password_hash("secret1") is False
        assert is_password_hash(None) is False


class TestPasswordStrength:
    def test_six_characters_accepted(self):
        validate_password_strength("abcdef")  # Should not raise

    def test_empty_rejected(self):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength("")

    def test_whitespace_only_rejected(self):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength("        ")

    def test_short_rejected(self):
        with pytest.raises(PasswordStrengthError, match="at least 6"):
            validate_password_strength("abc12")

    def test_custom_minimum(self):
        with pytest.raises(PasswordStrengthError, match="at least 10"):
            validate_password_strength("abcdefgh", min_length=10)

    def test_too_long_rejected(self):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength("a" * 129)

"""Tests for utils.email_utils."""

import hashlib

from utils.email_utils import hash_email


class TestHashEmail:
    """Verify email hashing used for log redaction."""

    def test_sha256_hex_digest(self) -> None:
        """Return the SHA-256 hex digest of the address."""
        assert hash_email("a@example.com") == hashlib.sha256(b"a@example.com").hexdigest()

    def test_case_and_whitespace_insensitive(self) -> None:
        """Differently spelled forms of one address hash the same."""
        assert hash_email("  A@Example.COM ") == hash_email("a@example.com")

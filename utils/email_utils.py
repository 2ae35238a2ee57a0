"""Utility functions for handling email addresses in logs."""

import hashlib


def hash_email(email: str) -> str:
    """
    Create a SHA-256 hash of an email address.

    Addresses are compared case-insensitively everywhere else, so they are normalized before
    hashing and the same identity always logs the same digest.
    """
    return hashlib.sha256(email.strip().lower().encode()).hexdigest()

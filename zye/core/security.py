"""
Password hashing for protected links.

Stored passwords are lowercase hex SHA-256 digests; the raw secret never
reaches the store. Verification compares digest to digest.
"""

import hashlib
import hmac
from typing import Optional


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_password(password: str, stored_hash: Optional[str]) -> bool:
    """
    Compare a supplied password against a stored digest.

    Returns False when there is no stored digest.
    """
    if not stored_hash:
        return False
    return hmac.compare_digest(hash_password(password), stored_hash.lower())

"""
Cryptographic helpers — password hashing, token hashing and gateway signatures.

Uses argon2 for passwords (via argon2-cffi), SHA-256 for OTP/token hashing
and HMAC-SHA256 for payment gateway signatures.
"""

from __future__ import annotations

import hashlib
import hmac

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_password_hasher = PasswordHasher()


def hash_password(plain_password: str) -> str:
    """Hash *plain_password* with argon2id.

    Returns:
        Argon2 hash string (includes algorithm parameters and salt).
    """
    return _password_hasher.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify *plain_password* against an argon2 *password_hash*.

    Returns:
        ``True`` if the password matches, ``False`` for a wrong password or
        a malformed hash.
    """
    try:
        return _password_hasher.verify(password_hash, plain_password)
    except (VerificationError, InvalidHashError):
        return False


def hash_token(token: str) -> str:
    """Return the hex-encoded SHA-256 digest of *token*.

    Used for OTP codes and reset tokens so the plaintext is never persisted.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def tokens_match(candidate_hash: str, stored_hash: str) -> bool:
    """Constant-time comparison of two hex digests."""
    return hmac.compare_digest(candidate_hash, stored_hash)


def compute_payment_signature(order_id: str, payment_id: str, secret: str) -> str:
    """HMAC-SHA256 over ``"<order_id>|<payment_id>"`` keyed with *secret*.

    This is the signature Razorpay's checkout returns for a completed payment.
    """
    body = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_payment_signature(
    order_id: str, payment_id: str, signature: str, secret: str
) -> bool:
    """Return True if *signature* authenticates the (order, payment) pair."""
    if not secret:
        return False
    expected = compute_payment_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected, signature)

"""
Random code and identifier generators — pure, side-effect-free functions.

OTP codes use the ``secrets`` module; identifiers only need uniqueness.
"""

from __future__ import annotations

import secrets
import string
import time


def generate_otp_code(length: int = 6) -> str:
    """Generate a cryptographically secure numeric OTP.

    Args:
        length: Number of digits (default 6).

    Returns:
        String of random decimal digits (leading zeros allowed).
    """
    return "".join(secrets.choice(string.digits) for _ in range(length))


def generate_profile_id() -> str:
    """Return a new external profile identifier: ``KM`` + epoch milliseconds."""
    return f"KM{int(time.time() * 1000)}"


def generate_receipt(prefix: str) -> str:
    """Gateway receipt reference, e.g. ``receipt_1718000000000``."""
    return f"{prefix}_{int(time.time() * 1000)}"

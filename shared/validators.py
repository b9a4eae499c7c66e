"""
Input validators — framework-agnostic, pure functions.
"""

from __future__ import annotations

import re

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_OTP_RE = re.compile(r"^\d{6}$")
_TIME_OF_DAY_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")

MIN_PASSWORD_LENGTH = 8


def normalize_email(email: str) -> str:
    """Trim and lower-case an email address for lookups and storage."""
    return str(email).strip().lower()


def validate_email(email: str) -> bool:
    """Return True if *email* looks like ``local@domain.tld``."""
    return bool(email) and bool(_EMAIL_RE.match(email.strip()))


def validate_password(password: str) -> bool:
    """Return True if *password* is a string of at least 8 characters."""
    return isinstance(password, str) and len(password) >= MIN_PASSWORD_LENGTH


def validate_otp_format(otp: str) -> bool:
    """Return True if *otp* is exactly six decimal digits."""
    return bool(_OTP_RE.match(str(otp)))


def validate_time_of_day(value: str) -> bool:
    """Return True for ``HH:MM`` or ``HH:MM:SS`` in 24-hour time."""
    return bool(_TIME_OF_DAY_RE.match(value or ""))

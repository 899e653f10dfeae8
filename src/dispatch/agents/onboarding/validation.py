"""Input normalization for customer registration."""

from __future__ import annotations

import re

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

INVALID_PHONE = (
    "Please provide a valid Kenyan phone number (e.g., 0712345678 or +254712345678)."
)


def normalize_phone(phone: str) -> str | None:
    """Normalize a Kenyan mobile number to ``+254XXXXXXXXX``.

    Accepts 2547XXXXXXXX, 07XXXXXXXX and 7XXXXXXXX with any punctuation.
    Returns None when the digits match none of these shapes.
    """
    digits = re.sub(r"\D", "", phone)
    if digits.startswith("254") and len(digits) == 12:
        return f"+{digits}"
    if digits.startswith("0") and len(digits) == 10:
        return f"+254{digits[1:]}"
    if len(digits) == 9:
        return f"+254{digits}"
    return None


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def password_problem(password: str) -> str | None:
    """Return why a password is too weak, or None if it is acceptable."""
    if len(password) < 8:
        return "Password must be at least 8 characters long."
    if not re.search(r"[A-Z]", password):
        return "Password must contain at least one uppercase letter."
    if not re.search(r"[a-z]", password):
        return "Password must contain at least one lowercase letter."
    if not re.search(r"[0-9]", password):
        return "Password must contain at least one number."
    return None

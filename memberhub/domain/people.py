"""Domain helpers for member identity fields (email, name, password, description)."""
from __future__ import annotations

import re

SMALL_STRING_LENGTH = 255
MAX_EMAIL = SMALL_STRING_LENGTH
MAX_PASSWORD = SMALL_STRING_LENGTH
MAX_NAME = SMALL_STRING_LENGTH
MIN_EMAIL = 6
MIN_PASSWORD = 4
DESCRIPTION_LENGTH = 2000

EMAIL_PATTERN = re.compile(r"[A-Z0-9._%-]+@([A-Z0-9-]+\.)+[A-Z]{2,4}", re.IGNORECASE)


def normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


def identity_errors(email: str | None, name: str | None, description: str | None = None) -> list[str]:
    """Validate the identity attributes of a person. Returns human readable messages."""
    errors: list[str] = []
    if not email:
        errors.append("Email can't be blank")
    elif not (MIN_EMAIL <= len(email) <= MAX_EMAIL):
        errors.append(f"Email must be between {MIN_EMAIL} and {MAX_EMAIL} characters")
    elif not EMAIL_PATTERN.fullmatch(email):
        errors.append("Email must be a valid email address")
    if not (name or "").strip():
        errors.append("Name can't be blank")
    elif len(name) > MAX_NAME:
        errors.append(f"Name is too long (maximum is {MAX_NAME} characters)")
    if description is not None and len(description) > DESCRIPTION_LENGTH:
        errors.append(f"Description is too long (maximum is {DESCRIPTION_LENGTH} characters)")
    return errors


def password_errors(password: str | None, confirmation: str | None) -> list[str]:
    errors: list[str] = []
    if not password:
        errors.append("Password can't be blank")
    elif not (MIN_PASSWORD <= len(password) <= MAX_PASSWORD):
        errors.append(f"Password must be between {MIN_PASSWORD} and {MAX_PASSWORD} characters")
    if password and password != confirmation:
        errors.append("Password doesn't match confirmation")
    return errors

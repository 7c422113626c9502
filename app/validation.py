"""
Server-side email, password and product URL checks.
"""
import re
from urllib.parse import urlparse

from email_validator import EmailNotValidError, validate_email

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 64


def is_valid_email(email: str) -> bool:
    email = (email or "").strip()
    if not email:
        return False
    # Basic regex (strict) - always enforced
    if not re.fullmatch(r"[^@\s]+@[^@\s]+\.[^@\s]+", email):
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


# 8-64 chars, at least one letter and one number, no whitespace
def is_valid_password(pw: str) -> bool:
    if not pw or re.search(r"\s", pw):
        return False
    if not PASSWORD_MIN_LENGTH <= len(pw) <= PASSWORD_MAX_LENGTH:
        return False
    return bool(re.search(r"[A-Za-z]", pw) and re.search(r"\d", pw))


def is_valid_product_url(url: str) -> bool:
    parsed = urlparse((url or "").strip())
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False
    return "." in parsed.hostname

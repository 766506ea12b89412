"""
utils/validation_utils.py

Purpose: Input validation

- GSTIN, PAN and IFSC format checks for business and bank profiles
- Indian mobile number and email checks
- Input sanitization for free-text search
"""

import re
from typing import Optional


def validate_gstin(gstin: str) -> bool:
    """
    Validates GSTIN format using regex and the state code range.

    Format: 2 digits (state) + 10 chars (PAN) + 1 digit + 1 letter + 1 letter/digit
    Example: 27AABCU9603R1ZM

    Args:
        gstin: GSTIN string to validate

    Returns:
        True if valid, False otherwise
    """
    if not gstin:
        return False

    gstin = gstin.strip().upper()

    pattern = r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z]{1}[1-9A-Z]{1}[Z]{1}[0-9A-Z]{1}$"
    if not re.match(pattern, gstin):
        return False

    # Validate state code (01-37)
    state_code = int(gstin[:2])
    if state_code < 1 or state_code > 37:
        return False

    return True


def validate_pan(pan: str) -> bool:
    """
    Validates PAN format: 5 letters, 4 digits, 1 letter (ABCDE1234F).
    """
    if not pan:
        return False
    return bool(re.match(r"^[A-Z]{5}[0-9]{4}[A-Z]$", pan.strip().upper()))


def validate_ifsc(ifsc: str) -> bool:
    """
    Validates IFSC format: 4 letters, a literal 0, 6 alphanumerics (SBIN0001234).
    """
    if not ifsc:
        return False
    return bool(re.match(r"^[A-Z]{4}0[A-Z0-9]{6}$", ifsc.strip().upper()))


def validate_phone_number(phone: str) -> bool:
    """
    Validates Indian phone number format.

    Args:
        phone: Phone number string

    Returns:
        True if valid Indian mobile number
    """
    if not phone:
        return False

    # Remove common separators and spaces
    phone = re.sub(r"[\s\-\(\)\+]", "", phone)

    # Remove country code if present
    if len(phone) == 12 and phone.startswith("91"):
        phone = phone[2:]

    # Validate Indian mobile format (starts with 6-9, 10 digits total)
    pattern = r"^[6-9]\d{9}$"
    return bool(re.match(pattern, phone))


def validate_email(email: str) -> bool:
    if not email:
        return False
    return bool(re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", email.strip()))


def validate_password(password: str, min_length: int = 6) -> Optional[str]:
    """
    Checks a new password and returns an error message, or None if acceptable.
    """
    if not password or len(password) < min_length:
        return f"Password must be at least {min_length} characters long"
    return None


def sanitize_input(text: str, max_length: int = 1000) -> str:
    """
    Sanitizes user input before it is sent as a query parameter.

    Args:
        text: Input text
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    text = text[:max_length]

    # Remove potentially dangerous characters
    text = re.sub(r"[<>{}\[\]]", "", text)

    # Normalize whitespace
    text = " ".join(text.split())

    return text.strip()

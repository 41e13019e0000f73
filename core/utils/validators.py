"""Validation utilities for application input."""

import re
from typing import Optional
from email_validator import validate_email as _validate_email, EmailNotValidError


def validate_email(email: str) -> tuple[bool, Optional[str]]:
    """
    Validate email address format.

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, normalized_email or error_message)
    """
    try:
        validation = _validate_email(email, check_deliverability=False)
        return True, validation.normalized
    except EmailNotValidError as e:
        return False, str(e)


def validate_phone(phone: str) -> tuple[bool, Optional[str]]:
    """
    Validate phone number format (basic validation).

    Args:
        phone: Phone number to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not phone:
        return False, "The phone number field is required."

    cleaned = re.sub(r'[\s\-\(\)\.]', '', phone)
    if not re.fullmatch(r'\+?\d+', cleaned):
        return False, "The phone number may only contain digits, spaces and + - ( ) ."

    digits = len(cleaned.lstrip('+'))
    if digits < 7 or digits > 15:
        return False, "The phone number must be between 7 and 15 digits."

    return True, None


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename by removing dangerous characters.

    Args:
        filename: Original filename

    Returns:
        Sanitized filename
    """
    # Drop any directory part a client may have sent
    filename = re.split(r'[/\\]', filename)[-1]

    sanitized = re.sub(r'[<>:"|?*\x00-\x1f]', '', filename)
    sanitized = sanitized.replace(' ', '_').lstrip('.')

    if len(sanitized) > 255:
        name, ext = sanitized.rsplit('.', 1) if '.' in sanitized else (sanitized, '')
        sanitized = name[:250] + ('.' + ext if ext else '')

    return sanitized


def file_extension(filename: Optional[str]) -> str:
    """Lowercase extension without the dot, or an empty string."""
    if not filename:
        return ""
    name = sanitize_filename(filename)
    return name.rsplit('.', 1)[1].lower() if '.' in name else ""

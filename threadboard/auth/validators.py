"""Validation utilities for user input.

Provides validation for:
- Usernames (shown as comment authors)
- Password strength
"""

import re
from typing import NamedTuple


# ==============================================================================
# Constants for validation rules
# ==============================================================================

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


class ValidationResult(NamedTuple):
    """Result of a validation check."""

    valid: bool
    message: str | None = None
    formatted: str | None = None


def validate_username(username: str) -> ValidationResult:
    """Validate a username.

    Usernames are 3-50 characters of letters, digits, `_`, `.` or `-`.
    Surrounding whitespace is ignored.

    Examples:
        >>> validate_username("  alice  ")
        ValidationResult(valid=True, message=None, formatted='alice')
        >>> validate_username("a b")
        ValidationResult(valid=False, message='Username may only contain letters, digits, "_", "." and "-"', formatted=None)
    """
    value = username.strip()

    if len(value) < USERNAME_MIN_LENGTH:
        return ValidationResult(
            False, f"Username must be at least {USERNAME_MIN_LENGTH} characters"
        )

    if len(value) > USERNAME_MAX_LENGTH:
        return ValidationResult(
            False, f"Username must be at most {USERNAME_MAX_LENGTH} characters"
        )

    if not USERNAME_PATTERN.match(value):
        return ValidationResult(
            False, 'Username may only contain letters, digits, "_", "." and "-"'
        )

    return ValidationResult(True, formatted=value)


def validate_password(password: str) -> ValidationResult:
    """Validate password strength.

    Requirements:
    - 8 to 128 characters
    - At least one letter
    - At least one digit

    Examples:
        >>> validate_password("hunter22")
        ValidationResult(valid=True, message=None, formatted=None)
        >>> validate_password("weak")
        ValidationResult(valid=False, message='Password must be at least 8 characters', formatted=None)
    """
    if len(password) < PASSWORD_MIN_LENGTH:
        return ValidationResult(
            False, f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
        )

    if len(password) > PASSWORD_MAX_LENGTH:
        return ValidationResult(
            False, f"Password must be at most {PASSWORD_MAX_LENGTH} characters"
        )

    if not re.search(r"[A-Za-z]", password):
        return ValidationResult(False, "Password must contain at least one letter")

    if not re.search(r"\d", password):
        return ValidationResult(False, "Password must contain at least one digit")

    return ValidationResult(True)

"""Shape checks for user-supplied fields.

The predicates are pure and never raise; ``validate_user_fields`` bundles
them for the service layer and raises a single ValidationAppError naming
every offending field.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from app.core.errors import ValidationAppError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8


def valid_email(value: Any) -> bool:
    """Return True if ``value`` looks like ``local@domain.tld``.

    No DNS or mailbox verification is performed.

    Examples:
        >>> valid_email("a@b.co")
        True
        >>> valid_email("a@b")
        False
    """
    return isinstance(value, str) and EMAIL_PATTERN.fullmatch(value) is not None


def valid_username(value: Any) -> bool:
    """Return True if ``value`` is a string of 3 to 50 characters."""
    return (
        isinstance(value, str)
        and USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH
    )


def valid_password(value: Any) -> bool:
    """Return True if ``value`` is a string of at least 8 characters."""
    return isinstance(value, str) and len(value) >= PASSWORD_MIN_LENGTH


FIELD_VALIDATORS = {
    "email": valid_email,
    "username": valid_username,
    "password": valid_password,
}

_FIELD_HINTS = {
    "email": "Expected an address shaped like local@domain.tld",
    "username": f"Expected {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters",
    "password": f"Expected at least {PASSWORD_MIN_LENGTH} characters",
}


def validate_user_fields(fields: Mapping[str, Any]) -> None:
    """Check every known field present in ``fields``.

    Fields that are absent are not required; unknown fields pass through
    unchecked.

    Args:
        fields: Caller-supplied attribute map for a create or update.

    Raises:
        ValidationAppError: If one or more present fields fail their check.
    """
    invalid = [
        name
        for name, check in FIELD_VALIDATORS.items()
        if name in fields and not check(fields[name])
    ]
    if not invalid:
        return

    logger.info("validation.rejected", extra={"invalid_fields": invalid})
    raise ValidationAppError(
        code="invalid_user_fields",
        message=f"Invalid value for: {', '.join(invalid)}",
        details={
            "fields": invalid,
            "hint": "; ".join(f"{name}: {_FIELD_HINTS[name]}" for name in invalid),
        },
    )

"""
Subscriber validation component.

Pure functions turning untrusted form data into a ValidSubscriber.
No side effects; every failure is a client input error.
"""

from __future__ import annotations

import re
import unicodedata

from letterbox.components.subscribers.models import (
    RawSubscriberInput,
    SubscriberValidationError,
    ValidateEmailOutput,
    ValidateNameOutput,
    ValidationError,
    ValidSubscriber,
)

# --- Email Validation Regex (RFC 5322 simplified) ---

EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

MAX_EMAIL_LENGTH = 254
DEFAULT_NAME_MAX_LENGTH = 256

FORBIDDEN_NAME_CHARACTERS = frozenset('/()"<>\\{}')


def validate_email(email: str | None) -> ValidateEmailOutput:
    """
    Validate email address format.

    Args:
        email: Email address to validate

    Returns:
        ValidateEmailOutput with validation results
    """
    normalized = email.strip() if email else ""

    if not normalized:
        return ValidateEmailOutput(
            is_valid=False,
            errors=[ValidationError("EMPTY_EMAIL", "Email address is required", "email")],
        )

    if len(normalized) > MAX_EMAIL_LENGTH:
        return ValidateEmailOutput(
            is_valid=False,
            errors=[ValidationError("EMAIL_TOO_LONG", "Email address is too long", "email")],
        )

    if not EMAIL_REGEX.match(normalized):
        return ValidateEmailOutput(
            is_valid=False,
            errors=[ValidationError("INVALID_FORMAT", "Invalid email format", "email")],
        )

    return ValidateEmailOutput(is_valid=True, normalized_email=normalized)


def _has_control_characters(value: str) -> bool:
    return any(unicodedata.category(ch) == "Cc" for ch in value)


def validate_name(
    name: str | None,
    max_length: int = DEFAULT_NAME_MAX_LENGTH,
) -> ValidateNameOutput:
    """
    Validate a subscriber display name.

    Rejects empty/whitespace-only names, names longer than `max_length`
    characters, and names containing control or forbidden characters.
    """
    normalized = name.strip() if name else ""

    if not normalized:
        return ValidateNameOutput(
            is_valid=False,
            errors=[ValidationError("EMPTY_NAME", "Name is required", "name")],
        )

    if len(normalized) > max_length:
        return ValidateNameOutput(
            is_valid=False,
            errors=[
                ValidationError(
                    "NAME_TOO_LONG",
                    f"Name must be at most {max_length} characters",
                    "name",
                )
            ],
        )

    if _has_control_characters(normalized):
        return ValidateNameOutput(
            is_valid=False,
            errors=[ValidationError("CONTROL_CHARACTERS", "Name contains control characters", "name")],
        )

    if any(ch in FORBIDDEN_NAME_CHARACTERS for ch in normalized):
        return ValidateNameOutput(
            is_valid=False,
            errors=[ValidationError("FORBIDDEN_CHARACTERS", "Name contains forbidden characters", "name")],
        )

    return ValidateNameOutput(is_valid=True, normalized_name=normalized)


def validate_subscriber(
    raw: RawSubscriberInput,
    max_name_length: int = DEFAULT_NAME_MAX_LENGTH,
) -> ValidSubscriber:
    """
    Convert raw form data into a ValidSubscriber.

    Raises:
        SubscriberValidationError: with every field error found
    """
    name_result = validate_name(raw.name, max_name_length)
    email_result = validate_email(raw.email)

    errors = [*name_result.errors, *email_result.errors]
    if errors:
        raise SubscriberValidationError(errors)

    assert name_result.normalized_name is not None
    assert email_result.normalized_email is not None
    return ValidSubscriber(
        name=name_result.normalized_name,
        email=email_result.normalized_email,
    )

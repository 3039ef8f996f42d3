"""
Subscriber validation models.

Untrusted input (RawSubscriberInput) is converted into a trusted
ValidSubscriber by the validation functions in component.py. Code outside
that module should never build a ValidSubscriber by hand.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# --- Input Models ---


@dataclass(frozen=True)
class RawSubscriberInput:
    """Subscription form data as received, no validation applied."""

    name: str
    email: str


# --- Trusted Domain Value ---


@dataclass(frozen=True)
class ValidSubscriber:
    """
    Validated subscriber.

    Invariants:
    - name is trimmed, non-empty, within the configured length and free of
      control and forbidden characters
    - email is trimmed and matches the address grammar
    """

    name: str
    email: str


# --- Output Models ---


@dataclass(frozen=True)
class ValidationError:
    """Validation error detail."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class ValidateEmailOutput:
    """Output from email validation."""

    is_valid: bool
    normalized_email: str | None = None  # Trimmed
    errors: list[ValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class ValidateNameOutput:
    """Output from name validation."""

    is_valid: bool
    normalized_name: str | None = None  # Trimmed
    errors: list[ValidationError] = field(default_factory=list)


# --- Error Types ---


class SubscriberValidationError(Exception):
    """Subscriber input rejected (client error)."""

    def __init__(self, errors: list[ValidationError]) -> None:
        self.errors = errors
        first = errors[0] if errors else None
        self.field = first.field if first else None
        self.code = first.code if first else "VALIDATION_ERROR"
        message = "; ".join(e.message for e in errors) or "Invalid subscriber"
        super().__init__(message)

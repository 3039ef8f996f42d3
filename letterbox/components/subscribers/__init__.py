"""
Subscribers component.

Validation of untrusted subscription input into a trusted domain value.
"""

from letterbox.components.subscribers.component import (
    DEFAULT_NAME_MAX_LENGTH,
    EMAIL_REGEX,
    FORBIDDEN_NAME_CHARACTERS,
    validate_email,
    validate_name,
    validate_subscriber,
)
from letterbox.components.subscribers.models import (
    RawSubscriberInput,
    SubscriberValidationError,
    ValidateEmailOutput,
    ValidateNameOutput,
    ValidationError,
    ValidSubscriber,
)

__all__ = [
    # Pure functions
    "validate_email",
    "validate_name",
    "validate_subscriber",
    # Constants
    "DEFAULT_NAME_MAX_LENGTH",
    "EMAIL_REGEX",
    "FORBIDDEN_NAME_CHARACTERS",
    # Models
    "RawSubscriberInput",
    "ValidSubscriber",
    "ValidateEmailOutput",
    "ValidateNameOutput",
    "ValidationError",
    # Errors
    "SubscriberValidationError",
]

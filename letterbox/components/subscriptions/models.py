"""
Confirmation workflow models.

State machine (subscriber):
    unknown → pending_confirmation → confirmed
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from letterbox.components.subscribers.component import DEFAULT_NAME_MAX_LENGTH
from letterbox.components.subscribers.models import RawSubscriberInput
from letterbox.components.tokens.component import CONFIRMATION_PATH, DEFAULT_TOKEN_BYTES

# --- Configuration ---


@dataclass(frozen=True)
class SubscriptionConfig:
    """Confirmation workflow configuration."""

    base_url: str = "http://127.0.0.1:8000"
    site_name: str = "letterbox"
    confirmation_path: str = CONFIRMATION_PATH
    name_max_length: int = DEFAULT_NAME_MAX_LENGTH
    token_bytes: int = DEFAULT_TOKEN_BYTES
    resend_cooldown_seconds: int = 60


# --- Input Models ---


SubscribeInput = RawSubscriberInput


@dataclass(frozen=True)
class ConfirmInput:
    """Input for confirmation via emailed link."""

    token: str


# --- Output Models ---


@dataclass(frozen=True)
class SubscribeOutput:
    """
    Output from a subscription request.

    `created` is False for duplicate requests. `email_sent` is False when a
    duplicate arrives inside the resend cooldown or the address is already
    confirmed.
    """

    subscriber_id: UUID
    created: bool
    email_sent: bool
    already_confirmed: bool = False
    success: bool = True


@dataclass(frozen=True)
class ConfirmOutput:
    """Output from a confirmation request."""

    subscriber_id: UUID
    already_confirmed: bool = False
    success: bool = True


@dataclass(frozen=True)
class ConfirmationEmail:
    """Rendered confirmation message."""

    subject: str
    body_html: str
    body_text: str


# --- Error Types ---


class SubscriptionError(Exception):
    """Subscription workflow failure."""

    pass


class ConfirmationEmailError(SubscriptionError):
    """
    The confirmation email could not be delivered.

    The pending record has already been committed and stays in place.
    """

    def __init__(self, email: str, error: str | None) -> None:
        self.email = email
        self.error = error
        super().__init__(f"Failed to send confirmation email to {email}: {error}")

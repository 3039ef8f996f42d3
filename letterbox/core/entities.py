"""
Domain entities for letterbox.

Entities owned by the subscription store:
- SubscriptionRecord: one row per subscribed email address
- ConfirmationToken: opaque credential bound to exactly one subscriber
- StoredCredential: operator login used by the auth gate

State machine (subscriber):
    pending_confirmation → confirmed

A record transitions exactly once and never reverts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID

__all__ = [
    "ConfirmationToken",
    "PendingInsert",
    "Recipient",
    "StoredCredential",
    "SubscriptionRecord",
    "SubscriptionStatus",
]


class SubscriptionStatus(str, Enum):
    """Subscriber lifecycle status as persisted."""

    PENDING_CONFIRMATION = "pending_confirmation"  # Awaiting link click
    CONFIRMED = "confirmed"  # Eligible for newsletter delivery


@dataclass(frozen=True)
class SubscriptionRecord:
    """Persisted subscriber row."""

    id: UUID
    email: str
    name: str
    status: SubscriptionStatus
    subscribed_at: datetime
    confirmed_at: datetime | None = None


@dataclass(frozen=True)
class ConfirmationToken:
    """Token embedded in the confirmation link."""

    token: str
    subscriber_id: UUID
    issued_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class PendingInsert:
    """
    Result of an idempotent pending insert.

    `created` is False when a record for the email already existed; in that
    case `token` is the token already bound to that record.
    """

    subscriber_id: UUID
    token: str
    status: SubscriptionStatus
    created: bool


@dataclass(frozen=True)
class Recipient:
    """Newsletter recipient (confirmed subscriber)."""

    email: str
    name: str


@dataclass(frozen=True)
class StoredCredential:
    """Operator credential row; the password is only ever stored hashed."""

    user_id: UUID
    username: str
    password_hash: str = field(repr=False)

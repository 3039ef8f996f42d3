"""
Database Adapter Interfaces.

Protocol-based interfaces for the subscription store.
Implementations: SQLite (letterbox.adapters.sqlite_db).

Invariants every implementation must uphold:
- Email uniqueness is enforced by the store; concurrent pending inserts for
  the same address converge on one record.
- A subscriber row and its confirmation token are written in one transaction.
- No transaction stays open between calls (list_confirmed pages eagerly).
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from typing import Protocol
from uuid import UUID

from letterbox.core.entities import (
    ConfirmationToken,
    PendingInsert,
    Recipient,
    StoredCredential,
    SubscriptionRecord,
    SubscriptionStatus,
)

# -----------------------------------------------------------------------------
# Subscription Store
# -----------------------------------------------------------------------------


class SubscriptionStorePort(Protocol):
    """
    Narrow store interface consumed by the confirmation workflow.

    All methods re-read authoritative state; callers never cache records.
    """

    def insert_pending(
        self, record: SubscriptionRecord, token: ConfirmationToken
    ) -> PendingInsert:
        """
        Insert a pending subscriber together with its token.

        Idempotent per email: if a record already exists, nothing is written
        and the existing id, token and status are returned with created=False.
        """
        ...

    def claim_resend(
        self, subscriber_id: UUID, cooldown_seconds: int, now: datetime
    ) -> bool:
        """
        Atomically mark the subscriber's token as re-issued at `now`.

        Returns True only if the previous issuance is older than the cooldown,
        so that concurrent callers cannot both win.
        """
        ...

    def release_resend(self, subscriber_id: UUID) -> None:
        """
        Undo an issuance whose email was never delivered.

        The next subscribe for this subscriber wins claim_resend immediately.
        """
        ...

    def confirm(self, subscriber_id: UUID, now: datetime) -> bool:
        """
        Set status to confirmed. No-op if already confirmed.

        Returns True if this call performed the transition.

        Raises RecordNotFoundError if the subscriber does not exist.
        """
        ...

    def list_confirmed(self) -> Iterator[Recipient]:
        """Lazily iterate confirmed subscribers. Restartable per call."""
        ...

    def find_by_token(self, token: str) -> UUID | None:
        """Resolve a token to its subscriber id."""
        ...

    def get_by_id(self, subscriber_id: UUID) -> SubscriptionRecord | None:
        """Get subscriber by ID."""
        ...

    def get_by_email(self, email: str) -> SubscriptionRecord | None:
        """Get subscriber by email address (case-insensitive)."""
        ...

    def count_by_status(self, status: SubscriptionStatus) -> int:
        """Count subscribers by status."""
        ...


class OperatorCredentialStorePort(Protocol):
    """Operator credential storage used by the auth gate and the CLI."""

    def get_operator_credential(self, username: str) -> StoredCredential | None:
        """Get the stored credential for a username."""
        ...

    def save_operator_credential(self, credential: StoredCredential) -> StoredCredential:
        """Insert or replace an operator credential."""
        ...


# -----------------------------------------------------------------------------
# Error Types
# -----------------------------------------------------------------------------


class StoreError(Exception):
    """Base exception for store failures (server fault)."""

    pass


class StoreConnectivityError(StoreError):
    """Database unreachable, locked past the busy timeout, or misconfigured."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Store unavailable: {detail}")


class StoreConstraintError(StoreError):
    """A constraint was violated that the store could not absorb."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Constraint violation: {detail}")


class RecordNotFoundError(StoreError):
    """A record expected to exist was not found."""

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")

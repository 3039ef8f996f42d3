"""
Newsletter dispatch models.

A broadcast carries the raw Authorization header so the auth gate runs as
the first step of dispatch.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from letterbox.components.auth.models import AuthenticatedOperator
from letterbox.core.ports.email import EmailStatus

# --- Input Models ---


@dataclass(frozen=True)
class NewsletterIssue:
    """Newsletter content. At least one of html/text must be non-empty."""

    title: str
    html: str = ""
    text: str = ""


@dataclass(frozen=True)
class BroadcastInput:
    """Input for a newsletter broadcast."""

    authorization: bytes | str | None
    issue: NewsletterIssue


# --- Output Models ---


@dataclass(frozen=True)
class DeliveryOutcome:
    """Send outcome for one recipient."""

    email: str
    status: EmailStatus
    error: str | None = None
    message_id: str | None = None


@dataclass
class DispatchReport:
    """
    Per-recipient result of a broadcast.

    Every confirmed recipient is attempted; `success` is True only when no
    send failed.
    """

    operator: AuthenticatedOperator
    delivered: list[DeliveryOutcome] = field(default_factory=list)
    failed: list[DeliveryOutcome] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.delivered) + len(self.failed)

    @property
    def success(self) -> bool:
        return not self.failed


# --- Error Types ---


class NewsletterError(Exception):
    """Base newsletter dispatch error."""

    pass


class InvalidNewsletterError(NewsletterError):
    """Newsletter content rejected (client error)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)

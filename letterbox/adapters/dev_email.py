"""
Dev Email Adapter.

Logs emails instead of sending them. Used for local development and tests.

Key behaviors:
- Logs recipient, subject and a body preview
- Returns SKIPPED status (not SENT), which callers treat as accepted
- Stores emails in memory for test assertions
- Optional failure list to exercise delivery-failure paths
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from letterbox.core.ports.email import EmailResult

logger = logging.getLogger(__name__)


@dataclass
class SentEmail:
    """Record of a logged email for test assertions."""

    id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    """
    Dev email adapter that logs instead of sending.

    Emails are logged and stored in memory. Addresses listed in
    `fail_recipients` get a FAILED result instead.
    """

    # In-memory storage for test assertions
    sent_emails: list[SentEmail] = field(default_factory=list)

    # Configuration
    log_level: int = logging.INFO
    log_body: bool = True
    body_preview_length: int = 100
    fail_recipients: set[str] = field(default_factory=set)

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def send(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str,
    ) -> EmailResult:
        """Log an email instead of sending it."""
        message_id = f"dev-{uuid4().hex[:12]}"

        # Requests are served from a thread pool
        with self._lock:
            self.sent_emails.append(
                SentEmail(
                    id=message_id,
                    recipient=recipient,
                    subject=subject,
                    body_html=body_html,
                    body_text=body_text,
                    logged_at=datetime.now(UTC),
                )
            )

        self._log_email(recipient, subject, body_text or body_html, message_id)

        if recipient.lower() in {r.lower() for r in self.fail_recipients}:
            return EmailResult.failed(recipient, "Dev mode - simulated delivery failure")

        return EmailResult.skipped(
            recipient, "Dev mode - email logged, not sent", message_id=message_id
        )

    def _log_email(self, recipient: str, subject: str, body: str, message_id: str) -> None:
        parts = [f"EMAIL (dev): To={recipient}", f"Subject={subject}"]

        if self.log_body and body:
            preview = body[: self.body_preview_length]
            if len(body) > self.body_preview_length:
                preview += "..."
            parts.append(f"Body={preview}")

        parts.append(f"MessageID={message_id}")
        logger.log(self.log_level, ", ".join(parts))

    # --- Test Helper Methods ---

    def get_last_email(self) -> SentEmail | None:
        """Get the most recently logged email."""
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        """Get all emails logged to a specific recipient."""
        return [e for e in self.sent_emails if e.recipient == recipient]

    def clear(self) -> None:
        self.sent_emails.clear()

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)

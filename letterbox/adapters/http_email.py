"""
HTTP Email Client.

Sends transactional email through an HTTP email API (Postmark-compatible):

    POST {base_url}/email
    X-Postmark-Server-Token: <auth_token>
    {"From": ..., "To": ..., "Subject": ..., "HtmlBody": ..., "TextBody": ...}

Transport problems and non-2xx responses come back as a FAILED EmailResult;
`send` never raises for delivery failures. Retries are left to the caller.
"""

from __future__ import annotations

import logging

import httpx

from letterbox.components.subscribers.component import validate_email
from letterbox.core.ports.email import EmailConfigError, EmailResult

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-Postmark-Server-Token"


class HttpEmailClient:
    """EmailPort backed by an httpx.Client with a fixed timeout."""

    def __init__(
        self,
        base_url: str,
        sender: str,
        auth_token: str,
        timeout_seconds: float = 10.0,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        checked = validate_email(sender)
        if not checked.is_valid or checked.normalized_email is None:
            raise EmailConfigError(f"Invalid sender address: {sender!r}", "sender")
        if timeout_seconds <= 0:
            raise EmailConfigError("Email timeout must be positive", "timeout_ms")

        self.sender = checked.normalized_email
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout_seconds),
            headers={AUTH_HEADER: auth_token},
            transport=transport,
        )

    def send(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str,
    ) -> EmailResult:
        payload = {
            "From": self.sender,
            "To": recipient,
            "Subject": subject,
            "HtmlBody": body_html,
            "TextBody": body_text,
        }
        try:
            response = self._client.post("/email", json=payload)
        except httpx.HTTPError as e:
            logger.warning("Email request to %s failed: %s", recipient, e)
            return EmailResult.failed(recipient, f"{type(e).__name__}: {e}")

        if response.is_error:
            logger.warning(
                "Email API rejected message to %s: HTTP %d", recipient, response.status_code
            )
            return EmailResult.failed(
                recipient, f"HTTP {response.status_code}: {response.text[:200]}"
            )

        message_id: str | None = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message_id = body.get("MessageID")

        return EmailResult.success(recipient, message_id=message_id)

    def close(self) -> None:
        self._client.close()

"""
Token issuer/verifier component.

Key behaviors:
- Tokens come from `secrets.token_urlsafe` (CSPRNG, URL-safe alphabet)
- At least 16 random bytes (128 bits) per token
- Resolution is a single store lookup; the token's shape is never inspected
  first, so absent and malformed tokens take the same path
- Confirmation is idempotent, so a token stays resolvable after use
"""

from __future__ import annotations

import secrets
from datetime import UTC, datetime
from urllib.parse import urlencode
from uuid import UUID

from letterbox.components.tokens.models import (
    ConfirmationToken,
    TokenConfigError,
    TokenNotFoundError,
)
from letterbox.components.tokens.ports import TokenLookupPort

MIN_TOKEN_BYTES = 16
DEFAULT_TOKEN_BYTES = 32

CONFIRMATION_PATH = "/subscriptions/confirm"


def generate_token(length: int = DEFAULT_TOKEN_BYTES) -> str:
    """
    Generate a cryptographically secure URL-safe token.

    Args:
        length: Number of random bytes (will be base64-encoded)

    Returns:
        URL-safe token string

    Raises:
        TokenConfigError: if `length` carries fewer than 128 bits
    """
    if length < MIN_TOKEN_BYTES:
        raise TokenConfigError(length, MIN_TOKEN_BYTES)
    return secrets.token_urlsafe(length)


def issue_token(
    subscriber_id: UUID,
    length: int = DEFAULT_TOKEN_BYTES,
    now: datetime | None = None,
) -> ConfirmationToken:
    """Create a new token bound to `subscriber_id` (not yet persisted)."""
    return ConfirmationToken(
        token=generate_token(length),
        subscriber_id=subscriber_id,
        issued_at=now or datetime.now(UTC),
    )


def resolve_token(token: str, store: TokenLookupPort) -> UUID:
    """
    Resolve a token back to its subscriber.

    Raises:
        TokenNotFoundError: if the store has no such token
    """
    subscriber_id = store.find_by_token(token)
    if subscriber_id is None:
        raise TokenNotFoundError()
    return subscriber_id


def build_confirmation_url(
    base_url: str,
    token: str,
    path: str = CONFIRMATION_PATH,
) -> str:
    """
    Build the confirmation URL for email.

    Shape: <base_url>/subscriptions/confirm?token=<token>
    """
    base = base_url.rstrip("/")
    return f"{base}{path}?{urlencode({'token': token})}"

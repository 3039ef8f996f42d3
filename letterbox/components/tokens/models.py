"""
Token component models.

Confirmation tokens are opaque, URL-safe and high-entropy. Token rows are
persisted by the subscription store; this component only generates them and
resolves them back to a subscriber id.
"""

from __future__ import annotations

from letterbox.core.entities import ConfirmationToken

__all__ = [
    "ConfirmationToken",
    "TokenError",
    "TokenNotFoundError",
    "TokenConfigError",
]


# --- Error Types ---


class TokenError(Exception):
    """Token validation failed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Token error: {reason}")


class TokenNotFoundError(TokenError):
    """Token not found."""

    def __init__(self) -> None:
        super().__init__("Token not found")


class TokenConfigError(ValueError):
    """Requested token length is below the entropy floor."""

    def __init__(self, length: int, minimum: int) -> None:
        self.length = length
        self.minimum = minimum
        super().__init__(f"Token length {length} bytes is below the minimum of {minimum}")

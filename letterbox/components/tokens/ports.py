"""
Token component ports.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID


class TokenLookupPort(Protocol):
    """Store capability needed to resolve a token."""

    def find_by_token(self, token: str) -> UUID | None:
        """Resolve a token to its subscriber id, or None if absent."""
        ...

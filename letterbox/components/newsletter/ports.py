"""
Newsletter dispatch ports.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from letterbox.core.entities import Recipient


class RecipientSourcePort(Protocol):
    """Source of confirmed recipients."""

    def list_confirmed(self) -> Iterator[Recipient]:
        """
        Lazily iterate confirmed subscribers.

        Must not hold a store transaction open while the caller sends.
        """
        ...

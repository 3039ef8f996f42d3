"""
Confirmation workflow ports.

The workflow depends only on the narrow store interface and the email port.
"""

from __future__ import annotations

from letterbox.core.ports.db import SubscriptionStorePort
from letterbox.core.ports.email import EmailPort

SubscriptionRepoPort = SubscriptionStorePort
ConfirmationEmailSenderPort = EmailPort

__all__ = ["ConfirmationEmailSenderPort", "SubscriptionRepoPort"]

"""
Newsletter component.

Authenticated broadcast of a newsletter issue to confirmed subscribers.
"""

from letterbox.components.newsletter.component import (
    dispatch,
    run,
    run_broadcast,
    run_publish,
    validate_issue,
)
from letterbox.components.newsletter.models import (
    BroadcastInput,
    DeliveryOutcome,
    DispatchReport,
    InvalidNewsletterError,
    NewsletterError,
    NewsletterIssue,
)
from letterbox.components.newsletter.ports import RecipientSourcePort

__all__ = [
    # Component
    "run",
    "run_broadcast",
    "run_publish",
    # Pure functions
    "validate_issue",
    "dispatch",
    # Input/Output
    "NewsletterIssue",
    "BroadcastInput",
    "DeliveryOutcome",
    "DispatchReport",
    # Errors
    "NewsletterError",
    "InvalidNewsletterError",
    # Ports
    "RecipientSourcePort",
]

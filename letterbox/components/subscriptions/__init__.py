"""
Subscriptions component.

Confirmation workflow: subscribe (pending + emailed link) and confirm.
"""

from letterbox.components.subscriptions.component import (
    render_confirmation_email,
    run,
    run_confirm,
    run_subscribe,
    send_confirmation_email,
)
from letterbox.components.subscriptions.models import (
    ConfirmationEmail,
    ConfirmationEmailError,
    ConfirmInput,
    ConfirmOutput,
    SubscribeInput,
    SubscribeOutput,
    SubscriptionConfig,
    SubscriptionError,
)
from letterbox.components.subscriptions.ports import (
    ConfirmationEmailSenderPort,
    SubscriptionRepoPort,
)

__all__ = [
    # Component
    "run",
    "run_subscribe",
    "run_confirm",
    # Pure functions
    "render_confirmation_email",
    "send_confirmation_email",
    # Models
    "SubscriptionConfig",
    "ConfirmationEmail",
    # Input/Output
    "SubscribeInput",
    "SubscribeOutput",
    "ConfirmInput",
    "ConfirmOutput",
    # Errors
    "SubscriptionError",
    "ConfirmationEmailError",
    # Ports
    "SubscriptionRepoPort",
    "ConfirmationEmailSenderPort",
]

"""
Confirmation workflow component.

Orchestrates the two subscriber transitions:
- subscribe: validate → insert pending (with token, atomically) → email link
- confirm: resolve token → mark confirmed

Key behaviors:
- Duplicate subscribe for a pending address succeeds; the link is re-sent
  only when the store grants a resend claim (cooldown elapsed)
- Subscribe for a confirmed address succeeds without sending anything
- A failed confirmation email raises after the pending record is committed,
  and releases the resend claim so a retry sends the link straight away
- Confirm is idempotent; the token stays valid after use
"""

from __future__ import annotations

import html
import logging
from datetime import UTC, datetime
from uuid import uuid4

from letterbox.components.subscribers.component import validate_subscriber
from letterbox.components.subscribers.models import ValidSubscriber
from letterbox.components.subscriptions.models import (
    ConfirmationEmail,
    ConfirmationEmailError,
    ConfirmInput,
    ConfirmOutput,
    SubscribeInput,
    SubscribeOutput,
    SubscriptionConfig,
)
from letterbox.components.subscriptions.ports import (
    ConfirmationEmailSenderPort,
    SubscriptionRepoPort,
)
from letterbox.components.tokens.component import (
    build_confirmation_url,
    issue_token,
    resolve_token,
)
from letterbox.core.entities import SubscriptionRecord, SubscriptionStatus

logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = "Confirm your subscription to {site_name}"


# --- Pure Functions ---


def render_confirmation_email(
    name: str,
    confirmation_url: str,
    site_name: str,
) -> ConfirmationEmail:
    """
    Render the confirmation message.

    Both bodies carry the same link. The subscriber's name is escaped in the
    HTML body.
    """
    subject = CONFIRMATION_SUBJECT.format(site_name=site_name)
    safe_name = html.escape(name)
    safe_url = html.escape(confirmation_url, quote=True)
    safe_site = html.escape(site_name)

    body_html = (
        f"<p>Hi {safe_name},</p>"
        f"<p>Welcome to {safe_site}!</p>"
        f'<p>Click <a href="{safe_url}">here</a> to confirm your subscription.</p>'
    )
    body_text = (
        f"Hi {name},\n\n"
        f"Welcome to {site_name}!\n"
        f"Visit {confirmation_url} to confirm your subscription.\n"
    )
    return ConfirmationEmail(subject=subject, body_html=body_html, body_text=body_text)


def send_confirmation_email(
    email_sender: ConfirmationEmailSenderPort,
    subscriber: ValidSubscriber,
    confirmation_url: str,
    site_name: str,
) -> None:
    """
    Send the confirmation link.

    Raises:
        ConfirmationEmailError: if the transport reports a failure
    """
    message = render_confirmation_email(subscriber.name, confirmation_url, site_name)
    result = email_sender.send(
        subscriber.email,
        message.subject,
        message.body_html,
        message.body_text,
    )
    if not result.ok:
        logger.error(
            "Confirmation email to %s failed: %s", subscriber.email, result.error
        )
        raise ConfirmationEmailError(subscriber.email, result.error)


# --- Run Handlers ---


def run_subscribe(
    inp: SubscribeInput,
    store: SubscriptionRepoPort,
    email_sender: ConfirmationEmailSenderPort,
    config: SubscriptionConfig | None = None,
    *,
    now: datetime | None = None,
) -> SubscribeOutput:
    """
    Handle a subscription request.

    Raises:
        SubscriberValidationError: input rejected
        StoreError: persistence failed
        ConfirmationEmailError: link could not be delivered (record kept)
    """
    cfg = config or SubscriptionConfig()
    subscriber = validate_subscriber(inp, cfg.name_max_length)
    now = now or datetime.now(UTC)

    record = SubscriptionRecord(
        id=uuid4(),
        email=subscriber.email,
        name=subscriber.name,
        status=SubscriptionStatus.PENDING_CONFIRMATION,
        subscribed_at=now,
    )
    token = issue_token(record.id, cfg.token_bytes, now)
    pending = store.insert_pending(record, token)

    if pending.status == SubscriptionStatus.CONFIRMED:
        logger.info("Subscribe for already confirmed subscriber %s", pending.subscriber_id)
        return SubscribeOutput(
            subscriber_id=pending.subscriber_id,
            created=False,
            email_sent=False,
            already_confirmed=True,
        )

    if pending.created:
        logger.info("New pending subscriber %s", pending.subscriber_id)
    elif store.claim_resend(pending.subscriber_id, cfg.resend_cooldown_seconds, now):
        logger.info("Re-sending confirmation to pending subscriber %s", pending.subscriber_id)
    else:
        logger.info(
            "Duplicate subscribe for %s inside resend cooldown, no email sent",
            pending.subscriber_id,
        )
        return SubscribeOutput(
            subscriber_id=pending.subscriber_id,
            created=False,
            email_sent=False,
        )

    url = build_confirmation_url(cfg.base_url, pending.token, cfg.confirmation_path)
    try:
        send_confirmation_email(email_sender, subscriber, url, cfg.site_name)
    except ConfirmationEmailError:
        store.release_resend(pending.subscriber_id)
        raise

    return SubscribeOutput(
        subscriber_id=pending.subscriber_id,
        created=pending.created,
        email_sent=True,
    )


def run_confirm(
    inp: ConfirmInput,
    store: SubscriptionRepoPort,
    *,
    now: datetime | None = None,
) -> ConfirmOutput:
    """
    Handle a confirmation link visit.

    Raises:
        TokenNotFoundError: token was never issued
        StoreError: persistence failed
    """
    subscriber_id = resolve_token(inp.token, store)
    transitioned = store.confirm(subscriber_id, now or datetime.now(UTC))

    if transitioned:
        logger.info("Subscriber %s confirmed", subscriber_id)
    else:
        logger.debug("Subscriber %s was already confirmed", subscriber_id)

    return ConfirmOutput(subscriber_id=subscriber_id, already_confirmed=not transitioned)


def run(
    inp: SubscribeInput | ConfirmInput,
    *,
    store: SubscriptionRepoPort,
    email_sender: ConfirmationEmailSenderPort | None = None,
    config: SubscriptionConfig | None = None,
) -> SubscribeOutput | ConfirmOutput:
    """
    Main entry point for the confirmation workflow.

    Args:
        inp: Input object determining the operation
        store: Subscription store
        email_sender: Email port (required for subscribe)
        config: Workflow configuration

    Returns:
        Output matching the input type
    """
    if isinstance(inp, SubscribeInput):
        if email_sender is None:
            raise ValueError("email_sender is required for subscribe")
        return run_subscribe(inp, store, email_sender, config)
    elif isinstance(inp, ConfirmInput):
        return run_confirm(inp, store)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")

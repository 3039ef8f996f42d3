"""
Newsletter dispatch component.

Broadcast pipeline: auth gate → content check → list confirmed → send each.

Invariants:
- Any auth failure aborts before the store or the email port is touched
- Only confirmed subscribers are listed, so pending ones never receive mail
- One recipient's failure is recorded and the loop moves on
- Sends are sequential; no store transaction is open while sending
"""

from __future__ import annotations

import logging

from letterbox.components.auth.component import BASIC_SCHEME, run_authenticate
from letterbox.components.auth.models import AuthenticatedOperator, AuthenticateInput
from letterbox.components.auth.ports import CredentialRepoPort, PasswordVerifierPort
from letterbox.components.newsletter.models import (
    BroadcastInput,
    DeliveryOutcome,
    DispatchReport,
    InvalidNewsletterError,
    NewsletterIssue,
)
from letterbox.components.newsletter.ports import RecipientSourcePort
from letterbox.core.ports.email import EmailPort, EmailStatus

logger = logging.getLogger(__name__)


def validate_issue(issue: NewsletterIssue) -> NewsletterIssue:
    """
    Check newsletter content before any recipient is listed.

    Raises:
        InvalidNewsletterError: empty title or no body at all
    """
    if not issue.title or not issue.title.strip():
        raise InvalidNewsletterError("Newsletter title is required", "title")
    if not issue.html.strip() and not issue.text.strip():
        raise InvalidNewsletterError(
            "Newsletter needs HTML or plain text content", "content"
        )
    return issue


def dispatch(
    issue: NewsletterIssue,
    recipients: RecipientSourcePort,
    email_sender: EmailPort,
    report: DispatchReport,
) -> DispatchReport:
    """Send `issue` to every confirmed recipient, isolating failures."""
    for recipient in recipients.list_confirmed():
        result = email_sender.send(recipient.email, issue.title, issue.html, issue.text)
        outcome = DeliveryOutcome(
            email=recipient.email,
            status=result.status,
            error=result.error if result.status == EmailStatus.FAILED else None,
            message_id=result.message_id,
        )
        if result.ok:
            report.delivered.append(outcome)
        else:
            logger.warning("Newsletter delivery to %s failed: %s", recipient.email, result.error)
            report.failed.append(outcome)
    return report


def run_broadcast(
    inp: BroadcastInput,
    *,
    recipients: RecipientSourcePort,
    email_sender: EmailPort,
    credential_repo: CredentialRepoPort,
    verifier: PasswordVerifierPort,
    scheme: str = BASIC_SCHEME,
) -> DispatchReport:
    """
    Authenticate the operator and broadcast to confirmed subscribers.

    Raises:
        AuthError: header missing, malformed or wrong credentials
        InvalidNewsletterError: content rejected
        StoreError: listing recipients failed
    """
    operator = run_authenticate(
        AuthenticateInput(inp.authorization), credential_repo, verifier, scheme=scheme
    )
    return run_publish(inp.issue, operator, recipients=recipients, email_sender=email_sender)


def run_publish(
    issue: NewsletterIssue,
    operator: AuthenticatedOperator,
    *,
    recipients: RecipientSourcePort,
    email_sender: EmailPort,
) -> DispatchReport:
    """
    Broadcast on behalf of an operator the auth gate has already admitted.

    Raises:
        InvalidNewsletterError: content rejected
        StoreError: listing recipients failed
    """
    issue = validate_issue(issue)

    report = dispatch(issue, recipients, email_sender, DispatchReport(operator=operator))

    logger.info(
        "Newsletter %r sent by %s: %d delivered, %d failed",
        issue.title,
        operator.username,
        len(report.delivered),
        len(report.failed),
    )
    return report


def run(
    inp: BroadcastInput,
    *,
    recipients: RecipientSourcePort,
    email_sender: EmailPort,
    credential_repo: CredentialRepoPort,
    verifier: PasswordVerifierPort,
    scheme: str = BASIC_SCHEME,
) -> DispatchReport:
    """Main entry point for newsletter dispatch."""
    if isinstance(inp, BroadcastInput):
        return run_broadcast(
            inp,
            recipients=recipients,
            email_sender=email_sender,
            credential_repo=credential_repo,
            verifier=verifier,
            scheme=scheme,
        )
    raise ValueError(f"Unknown input type: {type(inp)}")

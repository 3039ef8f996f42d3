"""
Confirmation workflow unit tests.

Covers:
- Subscribe creates exactly one pending record and sends one link
- Duplicate subscribe idempotence and the resend cooldown
- Email failure leaves the pending record in place
- Confirm transitions once and is idempotent
- Unknown tokens fail
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from urllib.parse import parse_qs, urlparse
from uuid import UUID

import pytest

from letterbox.components.subscribers import SubscriberValidationError
from letterbox.components.subscriptions import (
    ConfirmationEmailError,
    ConfirmInput,
    ConfirmOutput,
    SubscribeInput,
    SubscribeOutput,
    SubscriptionConfig,
    render_confirmation_email,
    run,
    run_confirm,
    run_subscribe,
)
from letterbox.components.tokens import TokenNotFoundError
from letterbox.core.entities import (
    ConfirmationToken,
    PendingInsert,
    SubscriptionRecord,
    SubscriptionStatus,
)
from letterbox.core.ports.db import RecordNotFoundError
from letterbox.core.ports.email import EmailResult

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)

# --- Mock Implementations ---


class MockStore:
    """In-memory subscription store for testing."""

    def __init__(self) -> None:
        self.records: dict[UUID, SubscriptionRecord] = {}
        self.tokens: dict[str, UUID] = {}
        self.issued: dict[UUID, datetime] = {}

    def insert_pending(
        self, record: SubscriptionRecord, token: ConfirmationToken
    ) -> PendingInsert:
        for existing in self.records.values():
            if existing.email.lower() == record.email.lower():
                tok = next(t for t, sid in self.tokens.items() if sid == existing.id)
                return PendingInsert(existing.id, tok, existing.status, created=False)
        self.records[record.id] = record
        self.tokens[token.token] = record.id
        self.issued[record.id] = token.issued_at
        return PendingInsert(record.id, token.token, record.status, created=True)

    def claim_resend(
        self, subscriber_id: UUID, cooldown_seconds: int, now: datetime
    ) -> bool:
        if self.issued[subscriber_id] > now - timedelta(seconds=cooldown_seconds):
            return False
        self.issued[subscriber_id] = now
        return True

    def release_resend(self, subscriber_id: UUID) -> None:
        self.issued[subscriber_id] = datetime.min.replace(tzinfo=UTC)

    def confirm(self, subscriber_id: UUID, now: datetime) -> bool:
        record = self.records.get(subscriber_id)
        if record is None:
            raise RecordNotFoundError("subscriber", str(subscriber_id))
        if record.status == SubscriptionStatus.CONFIRMED:
            return False
        self.records[subscriber_id] = SubscriptionRecord(
            id=record.id,
            email=record.email,
            name=record.name,
            status=SubscriptionStatus.CONFIRMED,
            subscribed_at=record.subscribed_at,
            confirmed_at=now,
        )
        return True

    def find_by_token(self, token: str) -> UUID | None:
        return self.tokens.get(token)

    def token_for(self, subscriber_id: UUID) -> str:
        return next(t for t, sid in self.tokens.items() if sid == subscriber_id)


class MockEmailSender:
    """Records sends; optionally reports failure."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[dict[str, str]] = []

    def send(
        self, recipient: str, subject: str, body_html: str, body_text: str
    ) -> EmailResult:
        self.sent.append(
            {"to": recipient, "subject": subject, "html": body_html, "text": body_text}
        )
        if self.fail:
            return EmailResult.failed(recipient, "connection refused")
        return EmailResult.success(recipient)


@pytest.fixture
def store() -> MockStore:
    return MockStore()


@pytest.fixture
def sender() -> MockEmailSender:
    return MockEmailSender()


@pytest.fixture
def config() -> SubscriptionConfig:
    return SubscriptionConfig(base_url="https://news.example.com", site_name="Example")


def extract_token(url: str) -> str:
    return parse_qs(urlparse(url).query)["token"][0]


def link_from(body: str) -> str:
    start = body.index("https://")
    end = start
    while end < len(body) and not body[end].isspace() and body[end] not in "\"'<":
        end += 1
    return body[start:end]


# --- Rendering ---


class TestRenderConfirmationEmail:
    def test_subject_uses_site_name(self) -> None:
        message = render_confirmation_email("Ann", "https://x.test/c?token=t", "Example")
        assert message.subject == "Confirm your subscription to Example"

    def test_subject_keeps_braces_in_site_name(self) -> None:
        message = render_confirmation_email("Ann", "https://x.test/c?token=t", "{Curly} News")
        assert message.subject == "Confirm your subscription to {Curly} News"

    def test_both_bodies_carry_same_link(self) -> None:
        url = "https://x.test/subscriptions/confirm?token=abc"
        message = render_confirmation_email("Ann", url, "Example")
        assert link_from(message.body_html) == url
        assert link_from(message.body_text) == url

    def test_name_escaped_in_html(self) -> None:
        message = render_confirmation_email("Ann & Co", "https://x.test/c", "Example")
        assert "Ann &amp; Co" in message.body_html
        assert "Ann & Co" in message.body_text


# --- Subscribe ---


class TestRunSubscribe:
    def test_new_subscriber_is_pending_and_emailed(
        self, store: MockStore, sender: MockEmailSender, config: SubscriptionConfig
    ) -> None:
        result = run_subscribe(
            SubscribeInput(name="John Doe", email="john.doe@example.com"),
            store,
            sender,
            config,
            now=NOW,
        )

        assert result.created
        assert result.email_sent
        assert len(store.records) == 1
        record = store.records[result.subscriber_id]
        assert record.email == "john.doe@example.com"
        assert record.name == "John Doe"
        assert record.status == SubscriptionStatus.PENDING_CONFIRMATION

        assert len(sender.sent) == 1
        url = urlparse(link_from(sender.sent[0]["text"]))
        assert url.scheme == "https"
        assert url.netloc == "news.example.com"
        assert url.path == "/subscriptions/confirm"

    def test_emailed_token_resolves_to_subscriber(
        self, store: MockStore, sender: MockEmailSender, config: SubscriptionConfig
    ) -> None:
        result = run_subscribe(
            SubscribeInput(name="Ann", email="ann@example.com"), store, sender, config
        )
        token = extract_token(link_from(sender.sent[0]["text"]))
        assert store.find_by_token(token) == result.subscriber_id

    def test_invalid_input_touches_nothing(
        self, store: MockStore, sender: MockEmailSender
    ) -> None:
        with pytest.raises(SubscriberValidationError) as exc_info:
            run_subscribe(SubscribeInput(name="", email="jd@example.com"), store, sender)
        assert exc_info.value.field == "name"
        assert store.records == {}
        assert sender.sent == []

    def test_duplicate_inside_cooldown_succeeds_without_email(
        self, store: MockStore, sender: MockEmailSender, config: SubscriptionConfig
    ) -> None:
        inp = SubscribeInput(name="Ann", email="ann@example.com")
        first = run_subscribe(inp, store, sender, config, now=NOW)
        second = run_subscribe(inp, store, sender, config, now=NOW + timedelta(seconds=5))

        assert second.success
        assert not second.created
        assert not second.email_sent
        assert second.subscriber_id == first.subscriber_id
        assert len(store.records) == 1
        assert len(sender.sent) == 1

    def test_duplicate_after_cooldown_resends_same_token(
        self, store: MockStore, sender: MockEmailSender, config: SubscriptionConfig
    ) -> None:
        inp = SubscribeInput(name="Ann", email="ann@example.com")
        run_subscribe(inp, store, sender, config, now=NOW)
        later = NOW + timedelta(seconds=config.resend_cooldown_seconds + 1)
        second = run_subscribe(inp, store, sender, config, now=later)

        assert second.email_sent
        assert len(sender.sent) == 2
        tokens = {extract_token(link_from(m["text"])) for m in sender.sent}
        assert len(tokens) == 1

    def test_duplicate_is_case_insensitive(
        self, store: MockStore, sender: MockEmailSender, config: SubscriptionConfig
    ) -> None:
        run_subscribe(SubscribeInput("Ann", "ann@example.com"), store, sender, config)
        run_subscribe(SubscribeInput("Ann", "ANN@example.com"), store, sender, config)
        assert len(store.records) == 1

    def test_confirmed_subscriber_gets_no_email(
        self, store: MockStore, sender: MockEmailSender, config: SubscriptionConfig
    ) -> None:
        inp = SubscribeInput(name="Ann", email="ann@example.com")
        first = run_subscribe(inp, store, sender, config, now=NOW)
        store.confirm(first.subscriber_id, NOW)

        again = run_subscribe(inp, store, sender, config, now=NOW + timedelta(days=1))

        assert again.already_confirmed
        assert not again.email_sent
        assert len(sender.sent) == 1

    def test_email_failure_keeps_pending_record(
        self, store: MockStore, config: SubscriptionConfig
    ) -> None:
        sender = MockEmailSender(fail=True)
        with pytest.raises(ConfirmationEmailError) as exc_info:
            run_subscribe(
                SubscribeInput(name="Ann", email="ann@example.com"), store, sender, config
            )

        assert exc_info.value.email == "ann@example.com"
        assert exc_info.value.error == "connection refused"
        assert len(store.records) == 1
        (record,) = store.records.values()
        assert record.status == SubscriptionStatus.PENDING_CONFIRMATION

    def test_retry_after_email_failure_sends_link(
        self, store: MockStore, sender: MockEmailSender, config: SubscriptionConfig
    ) -> None:
        inp = SubscribeInput(name="Ann", email="ann@example.com")
        sender.fail = True
        with pytest.raises(ConfirmationEmailError):
            run_subscribe(inp, store, sender, config, now=NOW)

        sender.fail = False
        retry = run_subscribe(inp, store, sender, config, now=NOW + timedelta(seconds=5))

        assert retry.email_sent
        assert not retry.created
        assert len(sender.sent) == 2
        assert extract_token(link_from(sender.sent[-1]["text"])) == store.token_for(
            retry.subscriber_id
        )


# --- Confirm ---


class TestRunConfirm:
    def test_confirm_transitions_then_is_idempotent(
        self, store: MockStore, sender: MockEmailSender, config: SubscriptionConfig
    ) -> None:
        sub = run_subscribe(SubscribeInput("Ann", "ann@example.com"), store, sender, config)
        token = store.token_for(sub.subscriber_id)

        first = run_confirm(ConfirmInput(token), store, now=NOW)
        second = run_confirm(ConfirmInput(token), store, now=NOW)

        assert first.subscriber_id == sub.subscriber_id
        assert not first.already_confirmed
        assert second.success
        assert second.already_confirmed
        assert store.records[sub.subscriber_id].status == SubscriptionStatus.CONFIRMED
        assert store.records[sub.subscriber_id].confirmed_at == NOW

    def test_unknown_token_fails(self, store: MockStore) -> None:
        with pytest.raises(TokenNotFoundError):
            run_confirm(ConfirmInput("never-issued"), store)

    def test_empty_token_fails(self, store: MockStore) -> None:
        with pytest.raises(TokenNotFoundError):
            run_confirm(ConfirmInput(""), store)


# --- Dispatcher ---


class TestRun:
    def test_dispatches_subscribe(
        self, store: MockStore, sender: MockEmailSender
    ) -> None:
        out = run(SubscribeInput("Ann", "ann@example.com"), store=store, email_sender=sender)
        assert isinstance(out, SubscribeOutput)

    def test_dispatches_confirm(self, store: MockStore, sender: MockEmailSender) -> None:
        sub = run(SubscribeInput("Ann", "ann@example.com"), store=store, email_sender=sender)
        assert isinstance(sub, SubscribeOutput)
        out = run(ConfirmInput(store.token_for(sub.subscriber_id)), store=store)
        assert isinstance(out, ConfirmOutput)

    def test_subscribe_requires_sender(self, store: MockStore) -> None:
        with pytest.raises(ValueError):
            run(SubscribeInput("Ann", "ann@example.com"), store=store)

    def test_unknown_input_type(self, store: MockStore) -> None:
        with pytest.raises(ValueError):
            run("nope", store=store)  # type: ignore[arg-type]

"""
SQLite Database Adapter.

Implements SubscriptionStorePort and OperatorCredentialStorePort on SQLite.
Uses standard SQL so the same queries port to Postgres.

Concurrency model:
- One short-lived connection per call; nothing is held between calls.
- Writes that touch several rows run under BEGIN IMMEDIATE, which
  serializes writers. The UNIQUE constraint on email is the final guard.
- WAL journal mode so readers never block the writer.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any
from uuid import UUID

from letterbox.core.entities import (
    ConfirmationToken,
    PendingInsert,
    Recipient,
    StoredCredential,
    SubscriptionRecord,
    SubscriptionStatus,
)
from letterbox.core.ports.db import (
    RecordNotFoundError,
    StoreConnectivityError,
    StoreConstraintError,
    StoreError,
)

logger = logging.getLogger(__name__)

# Issuance time written when a send fails, so the next request may resend at once
RESEND_RELEASED_AT = datetime(1970, 1, 1, tzinfo=UTC)

SCHEMA = """
CREATE TABLE IF NOT EXISTS subscriptions (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE COLLATE NOCASE,
    name TEXT NOT NULL,
    status TEXT NOT NULL CHECK(status IN ('pending_confirmation', 'confirmed')),
    subscribed_at TEXT NOT NULL,
    confirmed_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_subscriptions_status ON subscriptions(status, id);

CREATE TABLE IF NOT EXISTS subscription_tokens (
    token TEXT PRIMARY KEY,
    subscriber_id TEXT NOT NULL UNIQUE REFERENCES subscriptions(id) ON DELETE CASCADE,
    issued_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS users (
    user_id TEXT PRIMARY KEY,
    username TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL
);
"""

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def format_dt(dt: datetime) -> str:
    """Format as UTC ISO string with fixed precision so strings sort like times."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s) if s else None


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise sqlite3 exceptions as StoreError subclasses."""
    try:
        yield
    except sqlite3.IntegrityError as e:
        raise StoreConstraintError(str(e)) from e
    except sqlite3.OperationalError as e:
        raise StoreConnectivityError(str(e)) from e
    except sqlite3.Error as e:
        raise StoreError(f"Database error: {e}") from e


def init_schema(db_path: str) -> None:
    """Create tables if missing and switch the database to WAL mode."""
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    with translate_errors():
        conn = sqlite3.connect(db_path)
        try:
            conn.execute("PRAGMA journal_mode = WAL;")
            conn.executescript(SCHEMA)
            conn.commit()
        finally:
            conn.close()
    logger.info("Schema ready at %s", db_path)


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, busy_timeout_seconds: float = 5.0):
        self.db_path = db_path
        self.busy_timeout_seconds = busy_timeout_seconds

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Open a connection in manual transaction mode; always closed on exit."""
        with translate_errors():
            conn = sqlite3.connect(
                self.db_path,
                timeout=self.busy_timeout_seconds,
                isolation_level=None,
            )
            try:
                conn.row_factory = dict_factory
                conn.execute("PRAGMA foreign_keys = ON;")
                yield conn
            finally:
                conn.close()

    @contextmanager
    def _transaction(self, conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
        """Run a write transaction; rolled back on any exception."""
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            if conn.in_transaction:
                conn.rollback()
            raise
        else:
            conn.commit()


# -----------------------------------------------------------------------------
# Subscription Store
# -----------------------------------------------------------------------------


class SQLiteSubscriptionStore(SQLiteRepoBase):
    """SQLite implementation of SubscriptionStorePort and OperatorCredentialStorePort."""

    def __init__(
        self,
        db_path: str,
        busy_timeout_seconds: float = 5.0,
        page_size: int = 100,
    ):
        super().__init__(db_path, busy_timeout_seconds)
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.page_size = page_size

    # --- Writes ---

    def insert_pending(
        self, record: SubscriptionRecord, token: ConfirmationToken
    ) -> PendingInsert:
        try:
            with self._connection() as conn, self._transaction(conn):
                existing = self._find_existing(conn, record.email)
                if existing is not None:
                    return self._ensure_token(conn, existing, token)

                conn.execute(
                    """
                    INSERT INTO subscriptions (id, email, name, status, subscribed_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        str(record.id),
                        record.email,
                        record.name,
                        SubscriptionStatus.PENDING_CONFIRMATION.value,
                        format_dt(record.subscribed_at),
                    ),
                )
                conn.execute(
                    """
                    INSERT INTO subscription_tokens (token, subscriber_id, issued_at)
                    VALUES (?, ?, ?)
                    """,
                    (token.token, str(record.id), format_dt(token.issued_at)),
                )
                return PendingInsert(
                    subscriber_id=record.id,
                    token=token.token,
                    status=SubscriptionStatus.PENDING_CONFIRMATION,
                    created=True,
                )
        except StoreConstraintError:
            # Lost a race on the email constraint: the winner's row is authoritative.
            with self._connection() as conn:
                existing = self._find_existing(conn, record.email)
            if existing is None or existing.token is None:
                raise
            return existing.as_pending_insert()

    def claim_resend(
        self, subscriber_id: UUID, cooldown_seconds: int, now: datetime
    ) -> bool:
        threshold = now - timedelta(seconds=cooldown_seconds)
        with self._connection() as conn:
            cursor = conn.execute(
                """
                UPDATE subscription_tokens SET issued_at = ?
                WHERE subscriber_id = ? AND issued_at <= ?
                """,
                (format_dt(now), str(subscriber_id), format_dt(threshold)),
            )
            return cursor.rowcount == 1

    def release_resend(self, subscriber_id: UUID) -> None:
        with self._connection() as conn:
            conn.execute(
                "UPDATE subscription_tokens SET issued_at = ? WHERE subscriber_id = ?",
                (format_dt(RESEND_RELEASED_AT), str(subscriber_id)),
            )

    def confirm(self, subscriber_id: UUID, now: datetime) -> bool:
        with self._connection() as conn:
            cursor = conn.execute(
                """
                UPDATE subscriptions SET status = ?, confirmed_at = ?
                WHERE id = ? AND status = ?
                """,
                (
                    SubscriptionStatus.CONFIRMED.value,
                    format_dt(now),
                    str(subscriber_id),
                    SubscriptionStatus.PENDING_CONFIRMATION.value,
                ),
            )
            if cursor.rowcount == 1:
                return True

            row = conn.execute(
                "SELECT 1 FROM subscriptions WHERE id = ?", (str(subscriber_id),)
            ).fetchone()
            if row is None:
                raise RecordNotFoundError("subscriber", str(subscriber_id))
            return False

    # --- Reads ---

    def list_confirmed(self) -> Iterator[Recipient]:
        last_id = ""
        while True:
            with self._connection() as conn:
                rows = conn.execute(
                    """
                    SELECT id, email, name FROM subscriptions
                    WHERE status = ? AND id > ?
                    ORDER BY id
                    LIMIT ?
                    """,
                    (SubscriptionStatus.CONFIRMED.value, last_id, self.page_size),
                ).fetchall()

            for row in rows:
                yield Recipient(email=row["email"], name=row["name"])

            if len(rows) < self.page_size:
                return
            last_id = rows[-1]["id"]

    def find_by_token(self, token: str) -> UUID | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT subscriber_id FROM subscription_tokens WHERE token = ?",
                (token,),
            ).fetchone()
            return UUID(row["subscriber_id"]) if row else None

    def get_by_id(self, subscriber_id: UUID) -> SubscriptionRecord | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM subscriptions WHERE id = ?", (str(subscriber_id),)
            ).fetchone()
            return self._map_row(row) if row else None

    def get_by_email(self, email: str) -> SubscriptionRecord | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM subscriptions WHERE email = ?", (email.strip(),)
            ).fetchone()
            return self._map_row(row) if row else None

    def count_by_status(self, status: SubscriptionStatus) -> int:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS n FROM subscriptions WHERE status = ?",
                (status.value,),
            ).fetchone()
            return int(row["n"])

    # --- Operator credentials ---

    def get_operator_credential(self, username: str) -> StoredCredential | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT user_id, username, password_hash FROM users WHERE username = ?",
                (username,),
            ).fetchone()
            if not row:
                return None
            return StoredCredential(
                user_id=UUID(row["user_id"]),
                username=row["username"],
                password_hash=row["password_hash"],
            )

    def save_operator_credential(self, credential: StoredCredential) -> StoredCredential:
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO users (user_id, username, password_hash)
                VALUES (?, ?, ?)
                ON CONFLICT(username) DO UPDATE SET
                    password_hash=excluded.password_hash
                """,
                (str(credential.user_id), credential.username, credential.password_hash),
            )
        return credential

    # --- Internals ---

    def _find_existing(self, conn: sqlite3.Connection, email: str) -> _ExistingRow | None:
        row = conn.execute(
            """
            SELECT s.id, s.status, t.token
            FROM subscriptions s
            LEFT JOIN subscription_tokens t ON t.subscriber_id = s.id
            WHERE s.email = ?
            """,
            (email,),
        ).fetchone()
        if not row:
            return None
        return _ExistingRow(
            subscriber_id=UUID(row["id"]),
            status=SubscriptionStatus(row["status"]),
            token=row["token"],
        )

    def _ensure_token(
        self,
        conn: sqlite3.Connection,
        existing: _ExistingRow,
        token: ConfirmationToken,
    ) -> PendingInsert:
        """Existing record without a token gets the freshly generated one."""
        if existing.token is None:
            logger.warning("Subscriber %s had no token; issuing one", existing.subscriber_id)
            conn.execute(
                """
                INSERT INTO subscription_tokens (token, subscriber_id, issued_at)
                VALUES (?, ?, ?)
                """,
                (token.token, str(existing.subscriber_id), format_dt(token.issued_at)),
            )
            existing = _ExistingRow(existing.subscriber_id, existing.status, token.token)
        return existing.as_pending_insert()

    def _map_row(self, row: dict[str, Any]) -> SubscriptionRecord:
        subscribed_at = parse_dt(row["subscribed_at"])
        assert subscribed_at is not None
        return SubscriptionRecord(
            id=UUID(row["id"]),
            email=row["email"],
            name=row["name"],
            status=SubscriptionStatus(row["status"]),
            subscribed_at=subscribed_at,
            confirmed_at=parse_dt(row["confirmed_at"]),
        )


@dataclass(frozen=True)
class _ExistingRow:
    subscriber_id: UUID
    status: SubscriptionStatus
    token: str | None

    def as_pending_insert(self) -> PendingInsert:
        assert self.token is not None
        return PendingInsert(
            subscriber_id=self.subscriber_id,
            token=self.token,
            status=self.status,
            created=False,
        )

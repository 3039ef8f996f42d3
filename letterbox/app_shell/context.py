"""
Application context.

Built once at startup and handed to every request handler. Holds the store,
the email client and the password hasher behind read-only accessors.
"""

from __future__ import annotations

import logging

from letterbox.adapters.auth.crypto import Argon2PasswordHasher
from letterbox.adapters.dev_email import DevEmailAdapter
from letterbox.adapters.http_email import HttpEmailClient
from letterbox.adapters.sqlite_db import SQLiteSubscriptionStore, init_schema
from letterbox.components.subscriptions.models import SubscriptionConfig
from letterbox.config.models import AppConfig, EmailSettings
from letterbox.core.ports.email import EmailPort

logger = logging.getLogger(__name__)


def build_email_client(settings: EmailSettings) -> EmailPort:
    if settings.backend == "http":
        return HttpEmailClient(
            settings.base_url,
            settings.sender,
            settings.auth_token,
            settings.timeout_seconds,
        )
    return DevEmailAdapter()


class AppContext:
    def __init__(
        self,
        config: AppConfig,
        store: SQLiteSubscriptionStore,
        email_client: EmailPort,
        password_hasher: Argon2PasswordHasher,
    ) -> None:
        self._config = config
        self._store = store
        self._email_client = email_client
        self._password_hasher = password_hasher
        self._subscription_config = config.subscription_config()

    @classmethod
    def create(
        cls,
        config: AppConfig,
        *,
        email_client: EmailPort | None = None,
        init_db: bool = True,
    ) -> AppContext:
        """
        Wire adapters from config.

        Raises EmailConfigError if the configured sender is not a valid address.
        """
        if init_db:
            init_schema(config.database.path)
        store = SQLiteSubscriptionStore(
            config.database.path,
            busy_timeout_seconds=config.database.busy_timeout_seconds,
            page_size=config.newsletter.page_size,
        )
        client = email_client or build_email_client(config.email)
        logger.info(
            "Context ready (db=%s, email=%s)",
            config.database.path,
            type(client).__name__,
        )
        return cls(config, store, client, Argon2PasswordHasher())

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def store(self) -> SQLiteSubscriptionStore:
        return self._store

    @property
    def email_client(self) -> EmailPort:
        return self._email_client

    @property
    def password_hasher(self) -> Argon2PasswordHasher:
        return self._password_hasher

    @property
    def subscription_config(self) -> SubscriptionConfig:
        return self._subscription_config

    @property
    def base_url(self) -> str:
        return self._config.net.base_url

    def close(self) -> None:
        close = getattr(self._email_client, "close", None)
        if close is not None:
            close()

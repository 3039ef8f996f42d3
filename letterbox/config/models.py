from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from letterbox.components.subscriptions.models import SubscriptionConfig
from letterbox.components.tokens.component import MIN_TOKEN_BYTES


class Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class NetSettings(Section):
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)
    base_url: str = "http://127.0.0.1:8000"

    @field_validator("base_url")
    @classmethod
    def _http_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")


class DatabaseSettings(Section):
    path: str = "letterbox.db"
    busy_timeout_seconds: float = Field(default=5.0, gt=0)


class EmailSettings(Section):
    backend: Literal["http", "dev"] = "dev"
    base_url: str = "http://localhost:8025"
    sender: str = "letterbox@example.com"
    auth_token: str = Field(default="", repr=False)
    timeout_ms: int = Field(default=10_000, gt=0)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


class SubscriptionSettings(Section):
    site_name: str = "letterbox"
    name_max_length: int = Field(default=256, gt=0)
    token_bytes: int = Field(default=32, ge=MIN_TOKEN_BYTES)
    resend_cooldown_seconds: int = Field(default=60, ge=0)


class NewsletterSettings(Section):
    page_size: int = Field(default=100, gt=0)


class AuthSettings(Section):
    scheme: str = "Basic"
    realm: str = "publish"


class AppConfig(Section):
    net: NetSettings = Field(default_factory=NetSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    subscriptions: SubscriptionSettings = Field(default_factory=SubscriptionSettings)
    newsletter: NewsletterSettings = Field(default_factory=NewsletterSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)

    def subscription_config(self) -> SubscriptionConfig:
        """Workflow configuration derived from the net and subscriptions sections."""
        return SubscriptionConfig(
            base_url=self.net.base_url,
            site_name=self.subscriptions.site_name,
            name_max_length=self.subscriptions.name_max_length,
            token_bytes=self.subscriptions.token_bytes,
            resend_cooldown_seconds=self.subscriptions.resend_cooldown_seconds,
        )

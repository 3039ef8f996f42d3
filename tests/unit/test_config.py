from pathlib import Path

import pytest

from letterbox.config.loader import load_config
from letterbox.config.models import AppConfig

PROJECT_ROOT = Path(__file__).parent.parent.parent


def write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "letterbox.yaml"
    path.write_text(text)
    return path


def test_shipped_config_is_valid() -> None:
    config = load_config(PROJECT_ROOT / "letterbox.yaml", environ={})
    assert config.auth.scheme == "Basic"
    assert config.subscriptions.token_bytes >= 16


def test_defaults_when_default_file_missing(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = load_config(environ={})
    assert config == AppConfig()


def test_explicit_missing_file_fails(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml", environ={})


def test_config_path_from_env(tmp_path) -> None:
    path = write(tmp_path, "net:\n  base_url: https://news.example.com/\n")
    config = load_config(environ={"LETTERBOX_CONFIG": str(path)})
    assert config.net.base_url == "https://news.example.com"


def test_env_overrides(tmp_path) -> None:
    path = write(tmp_path, "email:\n  backend: dev\n")
    config = load_config(
        path,
        environ={
            "LETTERBOX_BASE_URL": "https://override.example.com",
            "LETTERBOX_DB_PATH": "/tmp/x.db",
            "LETTERBOX_EMAIL_BACKEND": "http",
            "LETTERBOX_EMAIL_URL": "https://api.postmark.test",
            "LETTERBOX_EMAIL_TOKEN": "tok",
        },
    )
    assert config.net.base_url == "https://override.example.com"
    assert config.database.path == "/tmp/x.db"
    assert config.email.backend == "http"
    assert config.email.base_url == "https://api.postmark.test"
    assert config.email.auth_token == "tok"


def test_invalid_yaml(tmp_path) -> None:
    path = write(tmp_path, "net: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_config(path, environ={})


@pytest.mark.parametrize(
    "text",
    [
        "subscriptions:\n  token_bytes: 8\n",
        "email:\n  timeout_ms: 0\n",
        "email:\n  backend: smtp\n",
        "net:\n  base_url: ftp://example.com\n",
        "unknown_section: {}\n",
        "email:\n  timout_ms: 500\n",
        "database:\n  pth: other.db\n",
    ],
)
def test_schema_violations(tmp_path, text: str) -> None:
    with pytest.raises(ValueError, match="Config validation failed"):
        load_config(write(tmp_path, text), environ={})


def test_top_level_must_be_mapping(tmp_path) -> None:
    with pytest.raises(ValueError):
        load_config(write(tmp_path, "- a\n- b\n"), environ={})


def test_subscription_config_derived() -> None:
    config = AppConfig.model_validate(
        {
            "net": {"base_url": "https://news.example.com"},
            "subscriptions": {"site_name": "News", "resend_cooldown_seconds": 5},
        }
    )
    sub = config.subscription_config()
    assert sub.base_url == "https://news.example.com"
    assert sub.site_name == "News"
    assert sub.resend_cooldown_seconds == 5


def test_email_timeout_seconds() -> None:
    assert AppConfig.model_validate({"email": {"timeout_ms": 2500}}).email.timeout_seconds == 2.5

from collections.abc import Iterator
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from letterbox.adapters.dev_email import DevEmailAdapter
from letterbox.adapters.sqlite_db import SQLiteSubscriptionStore, init_schema
from letterbox.api.main import create_app
from letterbox.app_shell.context import AppContext
from letterbox.config.models import AppConfig
from letterbox.core.entities import StoredCredential

BASE_URL = "http://127.0.0.1:8000"
OPERATOR_USERNAME = "admin"
OPERATOR_PASSWORD = "everythinghastostartsomewhere"


@pytest.fixture
def db_path(tmp_path) -> str:
    path = str(tmp_path / "letterbox.db")
    init_schema(path)
    return path


@pytest.fixture
def store(db_path: str) -> SQLiteSubscriptionStore:
    return SQLiteSubscriptionStore(db_path, page_size=2)


@pytest.fixture
def email_client() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def app_config(db_path: str) -> AppConfig:
    return AppConfig.model_validate(
        {
            "net": {"base_url": BASE_URL},
            "database": {"path": db_path},
            "newsletter": {"page_size": 2},
        }
    )


@pytest.fixture
def test_ctx(app_config: AppConfig, email_client: DevEmailAdapter) -> AppContext:
    """
    Full AppContext backed by a temporary SQLite DB and the dev email adapter.
    """
    return AppContext.create(app_config, email_client=email_client)


@pytest.fixture
def operator(test_ctx: AppContext) -> StoredCredential:
    credential = StoredCredential(
        user_id=uuid4(),
        username=OPERATOR_USERNAME,
        password_hash=test_ctx.password_hasher.hash_password(OPERATOR_PASSWORD),
    )
    return test_ctx.store.save_operator_credential(credential)


@pytest.fixture
def client(test_ctx: AppContext) -> Iterator[TestClient]:
    with TestClient(create_app(test_ctx)) as c:
        yield c

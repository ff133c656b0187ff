import os

os.environ["ENV"] = "test"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from salesbot.config import Settings
from salesbot.db import Base
import salesbot.models  # noqa: F401
from salesbot.stores.conversation_store import SQLConversationStore
from salesbot.stores.module_store import SQLModuleStore

pytest_plugins = [
    "tests.fixtures.module_fixtures",
    "tests.fixtures.backend_fixtures",
    "tests.fixtures.app_fixtures",
]


@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture(scope="function")
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def module_store(session_factory):
    return SQLModuleStore(session_factory)


@pytest.fixture(scope="function")
def conversation_store(session_factory):
    return SQLConversationStore(session_factory)


@pytest.fixture(scope="function")
def settings():
    return Settings(
        messenger_verify_token="verify-me",
        messenger_app_secret=None,
        telegram_webhook_secret=None,
    )

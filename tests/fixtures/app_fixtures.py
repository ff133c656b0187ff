"""Fixtures for application state and the HTTP client."""

import pytest
from fastapi.testclient import TestClient

from salesbot.core.app_state import AppState
from salesbot.main import create_app


@pytest.fixture(scope="function")
def app_state(module_store, conversation_store, registry, settings):
    return AppState(
        module_store, conversation_store, registry=registry, settings=settings
    )


@pytest.fixture(scope="function")
def client(app_state):
    app = create_app(testing=True, state=app_state)
    with TestClient(app) as c:
        yield c


def put_module(client, module):
    """Create or replace a module through the API."""
    return client.put(f"/modules/{module.id}", json=module.model_dump(mode="json"))

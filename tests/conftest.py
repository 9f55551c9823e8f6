import pytest
from fastapi.testclient import TestClient

from courtflow.config import DEFAULT_POLICY, get_policy
from courtflow.main import app


def override_get_policy():
    """Pin the default policy so a developer's .env cannot change results"""
    return DEFAULT_POLICY


@pytest.fixture(name="client")
def client_fixture():
    """Provide a test client with the policy dependency overridden

    Override MUST be set BEFORE TestClient() and stay in place for the
    entire duration.
    """
    app.dependency_overrides[get_policy] = override_get_policy

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()

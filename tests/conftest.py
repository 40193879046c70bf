import pytest
from fastapi.testclient import TestClient

from auth import dependencies as auth_dependencies
from main import app

USER_ID = 1


@pytest.fixture
def client():
    # No lifespan: the DB pool is never opened; tests patch repositories instead.
    app.dependency_overrides[auth_dependencies.get_current_user_id] = lambda: USER_ID
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anon_client():
    app.dependency_overrides.clear()
    return TestClient(app)

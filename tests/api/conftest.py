"""
Pytest configuration for API integration tests
"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="function")
def client():
    """
    Create a test client with properly initialized app state.
    Each test gets a fresh client to avoid state contamination.
    """
    from core.session_manager import SessionManager
    from main import app

    session_manager = SessionManager(max_sessions=10)

    # Set in app state (managers only, services are built per request)
    app.state.session_manager = session_manager
    app.state.debug = False

    # Create test client (no context manager to avoid running the lifespan)
    test_client = TestClient(app, raise_server_exceptions=False)

    yield test_client

    session_manager.cleanup()


@pytest.fixture
def session_manager(client):
    """Session manager the client's app is using"""
    from main import app

    return app.state.session_manager


@pytest.fixture
def open_session(client):
    """Factory creating a session through the API and returning its id"""

    def _open(tool: str) -> str:
        response = client.post("/api/session", json={"tool": tool})
        assert response.status_code == 200
        return response.json()["session_id"]

    return _open

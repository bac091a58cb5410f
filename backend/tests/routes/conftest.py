# backend/tests/routes/conftest.py
"""HTTP client wired to the per-test database session and recording channels."""

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies.database import get_db
from app.api.dependencies.services import get_notification_service
from app.main import app


@pytest.fixture
def client(db, notification_service):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_notification_service] = lambda: notification_service
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()

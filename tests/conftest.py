import os
import sys

import pytest

CURRENT_DIR = os.path.dirname(__file__)
SERVICE_ROOT = os.path.dirname(CURRENT_DIR)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

# must be in place before student_service.main builds its module-level app
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SEED_DEMO_DATA", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from fastapi.testclient import TestClient  # noqa: E402

from student_service.config import Settings  # noqa: E402
from student_service.main import create_app  # noqa: E402

VALID_STUDENT = {
    "name": "Ann Lee",
    "email": "ann@x.edu",
    "age": 20,
    "grade": "Sophomore",
    "major": "Physics",
    "gpa": 3.5,
    "enrollmentDate": "2024-01-10",
}


@pytest.fixture
def settings():
    """Settings for the test environment"""
    return Settings(
        SECRET_KEY="test-secret",
        BCRYPT_ROUNDS=4,
        RATE_LIMIT_ENABLED=False,
        SEED_DEMO_DATA=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    """Fresh app per test, so the in-memory stores start empty."""
    return create_app(settings)


@pytest.fixture
def client(app):
    yield TestClient(app)


@pytest.fixture
def user(app):
    return app.state.users.create(email="test@example.com", password="password123", name="Test User")


@pytest.fixture
def token(app, user):
    return app.state.token_service.issue(user)


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_payload():
    return dict(VALID_STUDENT)

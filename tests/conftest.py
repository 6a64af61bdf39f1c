import os
from datetime import datetime, timedelta, timezone

import pytest

# Must be set before the application is imported
os.environ["TESTING"] = "1"
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ["TEST_DATABASE_URL"] = "sqlite://"
os.environ["SEED_PHARMACIES"] = "0"

from fastapi.testclient import TestClient  # noqa: E402

from sehat_saathi.api.deps import get_storage  # noqa: E402
from sehat_saathi.core.security import TokenService, UserRole  # noqa: E402
from sehat_saathi.core.timeutils import utcnow  # noqa: E402
from sehat_saathi.main import app  # noqa: E402
from sehat_saathi.models.user import User  # noqa: E402
from sehat_saathi.storage.memory import MemoryStorage  # noqa: E402

PASSWORD = "TestPassword123!"


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def token_service():
    return TokenService(secret=os.environ["JWT_SECRET"])


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


def registration(name, email, role="patient", specialization=None, password=PASSWORD):
    data = {
        "name": name,
        "email": email,
        "password": password,
        "confirmPassword": password,
        "role": role,
    }
    if specialization is not None:
        data["specialization"] = specialization
    return data


def register(client, name, email, role="patient", specialization=None):
    """Register through the API and return (user, headers)."""
    response = client.post(
        "/api/auth/register",
        json=registration(name, email, role, specialization),
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return body["user"], {"Authorization": f"Bearer {body['token']}"}


def future_iso(days=2, hour=9, minute=0):
    when = datetime.now(timezone.utc) + timedelta(days=days)
    return when.replace(hour=hour, minute=minute, second=0, microsecond=0).isoformat()


def make_user(storage, name, email, role, specialization=None):
    """Insert a user directly into a store, bypassing registration."""
    user = User(
        id=f"{role}-{email}",
        name=name,
        email=email,
        password_hash="not-a-real-hash",
        role=UserRole(role),
        specialization=specialization,
        created_at=utcnow(),
    )
    return storage.create_user(user)


@pytest.fixture
def doctor(client):
    return register(client, "Dr. A", "dr.a@example.com", "doctor", "General Medicine")


@pytest.fixture
def other_doctor(client):
    return register(client, "Dr. B", "dr.b@example.com", "doctor", "Pediatrics")


@pytest.fixture
def patient(client):
    return register(client, "Patient P", "p@example.com")


@pytest.fixture
def other_patient(client):
    return register(client, "Patient Q", "q@example.com")

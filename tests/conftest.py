"""
Test configuration for the clinic API.
"""
import os

# Settings are read at import time, so the test environment goes in first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "development"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "60"
os.environ["ADMIN_BOOTSTRAP_TOKEN"] = "test-bootstrap-token"
for name in ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_SERVICE_SID",
             "BOOTSTRAP_ADMIN_EMAIL", "BOOTSTRAP_ADMIN_PASSWORD"):
    os.environ[name] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clinic_api.database import Base, get_db
from clinic_api.main import app
from clinic_api.auth.models import UserRole
from clinic_api.auth.registry import IdentityRegistry
from clinic_api.core.otp import LocalOTPProvider, get_otp_provider
from clinic_api.core.security import hash_password, issue_access_token

# Create test database engine
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Create test session factory
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def db():
    """
    Create a fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def otp_provider():
    """OTP provider injected into the app; modules override this fixture to swap it."""
    return LocalOTPProvider()


@pytest.fixture(scope="function")
def client(db, otp_provider):
    """
    Create a test client with a test database session.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_otp_provider] = lambda: otp_provider

    with TestClient(app) as client:
        yield client

    app.dependency_overrides = {}


@pytest.fixture
def register(client):
    """POST /api/auth/register with a default name."""
    def _register(**payload):
        body = {"name": "Test Patient"}
        body.update(payload)
        return client.post("/api/auth/register", json=body)
    return _register


@pytest.fixture
def patient(register):
    response = register(email="patient@example.com", password="secret123", phone="9876543210")
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def patient_headers(patient):
    return bearer(patient["token"])


@pytest.fixture
def other_patient_headers(register):
    response = register(name="Other Patient", email="other@example.com", password="secret123")
    assert response.status_code == 201
    return bearer(response.json()["token"])


@pytest.fixture
def admin(db):
    return IdentityRegistry(db).create(
        name="Clinic Admin",
        email="admin@example.com",
        password_hash=hash_password("adminpass"),
        role=UserRole.ADMIN
    )


@pytest.fixture
def admin_headers(admin):
    return bearer(issue_access_token(admin))

"""Pytest configuration and fixtures."""

import os
import smtplib

# Schema is managed by the fixtures below, not by the app lifespan
os.environ["AUTO_CREATE_SCHEMA"] = "false"
os.environ.pop("SMTP_HOST", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from postboard.api.dependencies import get_email_service  # noqa: E402
from postboard.config import get_settings  # noqa: E402
from postboard.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from postboard.main import app  # noqa: E402
from postboard.models.user import User  # noqa: E402
from postboard.services.credentials import CredentialService  # noqa: E402

DEFAULT_PASSWORD = "Str0ng!pw"  # noqa: S105


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


class FakeEmailService:
    """Records password setup emails instead of sending them."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, str, str]] = []

    def send_password_setup_email(self, email: str, username: str, token: str) -> None:
        if self.fail:
            raise smtplib.SMTPServerDisconnected("Connection unexpectedly closed")
        self.sent.append((email, username, token))


# Use test database - any SQLAlchemy URL via TEST_DATABASE_URL, SQLite locally
SQLALCHEMY_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///./test.db")

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
if engine.dialect.name == "sqlite":
    event.listen(engine, "connect", enable_sqlite_foreign_keys)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def outbox():
    """Email service double shared by the API and service tests."""
    return FakeEmailService()


@pytest.fixture
def failing_outbox():
    """Email service double whose transport always fails."""
    return FakeEmailService(fail=True)


@pytest.fixture
def credentials(db, settings):
    return CredentialService(db, settings)


@pytest.fixture(scope="function")
def client(db, outbox):
    """Create a test client with database and email overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: outbox
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register(client, db):
    """Return a helper that creates an account, sets its password and logs in."""

    def _register(username: str, email: str, password: str = DEFAULT_PASSWORD) -> AuthHeaders:
        response = client.post("/api/v1/users", json={"username": username, "email": email})
        assert response.status_code == 201
        user_id = response.json()["id"]

        token = db.query(User).filter(User.id == user_id).one().password_reset_token
        response = client.post(
            "/api/v1/auth/set-password",
            json={"token": token, "password": password, "confirm_password": password},
        )
        assert response.status_code == 200

        response = client.post(
            "/api/v1/auth/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200
        access_token = response.json()["access_token"]
        return AuthHeaders(
            {"Authorization": f"Bearer {access_token}"}, user_id=user_id, email=email
        )

    return _register


@pytest.fixture
def auth_headers(register):
    """Create a user and return auth headers with user info."""
    return register("testuser", "test@example.com")


@pytest.fixture
def admin_headers(register):
    """Create an administrator and return auth headers."""
    return register("boss", "boss@admin.com")

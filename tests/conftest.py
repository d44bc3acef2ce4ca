"""Shared test configuration and fixtures.

Tests run against an in-memory SQLite database and a token service with a
test-scoped secret; neither touches the process-wide instances.
"""

import os

# Must be set before taskforge reads its settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-process-secret")
os.environ["BCRYPT_ROUNDS"] = "4"

from collections.abc import Callable, Generator
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel

from taskforge.api.deps import get_db_session
from taskforge.db.session import build_engine
from taskforge.main import app
from taskforge.models import Task, User
from taskforge.services.passwords import hash_password
from taskforge.services.tokens import TokenService, get_token_service

TEST_SECRET = "test-secret-for-api-tests"


@dataclass
class RegisteredUser:
    """A user registered through the API."""

    id: int
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database with all tables."""
    engine = build_engine("sqlite://")
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(secret=TEST_SECRET, lifetime=timedelta(hours=1))


@pytest.fixture
def stale_token_service() -> TokenService:
    """Same secret as token_service, but its clock runs three hours behind."""
    return TokenService(
        secret=TEST_SECRET,
        lifetime=timedelta(hours=1),
        clock=lambda: datetime.now(timezone.utc) - timedelta(hours=3),
    )


def _make_user(db_session: Session, username: str) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=hash_password("Secret123"),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user(db_session: Session) -> User:
    return _make_user(db_session, "alice")


@pytest.fixture
def other_user(db_session: Session) -> User:
    return _make_user(db_session, "bob")


@pytest.fixture
def make_task(db_session: Session) -> Callable[..., Task]:
    """Insert a task directly, bypassing the API."""

    def _make(user_id: int, title: str = "Task", **fields) -> Task:
        task = Task(user_id=user_id, title=title, **fields)
        db_session.add(task)
        db_session.commit()
        db_session.refresh(task)
        return task

    return _make


@pytest.fixture
def client(engine: Engine, token_service: TokenService) -> Generator[TestClient, None, None]:
    """API client wired to the test database and token service."""

    def override_db_session() -> Generator[Session, None, None]:
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_token_service] = lambda: token_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client: TestClient) -> Callable[..., RegisteredUser]:
    """Register a user through the API and return its id and token."""

    def _register(
        username: str,
        email: str | None = None,
        password: str = "Secret123",
    ) -> RegisteredUser:
        response = client.post(
            "/api/auth/register",
            json={
                "username": username,
                "email": email or f"{username}@example.com",
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return RegisteredUser(id=body["user_id"], token=body["token"])

    return _register

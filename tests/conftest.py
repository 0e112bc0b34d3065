"""
Test configuration and fixtures.

Provides:
- In-memory SQLite engine per test (tables created fresh)
- Database session bound to that engine
- Two account holders (u1, u2) owning test records
- TestClient with the session dependency overridden and JWT headers
"""
import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

os.environ.setdefault("JWT_SECRET", "test_jwt_secret")

from app.db.config import create_db_engine, get_session  # noqa: E402
from app.db.init import init_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.user import User  # noqa: E402
from app.routers.auth import create_jwt_token  # noqa: E402


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database; StaticPool keeps one connection for all threads."""
    test_engine = create_db_engine("sqlite://", poolclass=StaticPool)
    init_db(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


def _make_user(db: Session, user_id: str) -> User:
    user = User(id=user_id, email=f"{user_id}@example.com", password_hash="not-a-bcrypt-hash")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db: Session) -> User:
    return _make_user(db, "u1")


@pytest.fixture
def other_user(db: Session) -> User:
    return _make_user(db, "u2")


# =============================================================================
# HTTP Fixtures
# =============================================================================

@pytest.fixture
def client(db: Session) -> Generator[TestClient, None, None]:
    def override_get_session():
        yield db

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_jwt_token(user.id, user.email)}"}


@pytest.fixture
def auth_headers(user: User) -> dict:
    return auth_headers_for(user)


@pytest.fixture
def other_auth_headers(other_user: User) -> dict:
    return auth_headers_for(other_user)

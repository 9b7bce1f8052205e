"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["ENVIRONMENT"] = "test"
os.environ["CORS_ORIGINS"] = '["http://localhost:3000"]'
os.environ["NOTIFIER_PROVIDER"] = "console"
os.environ.pop("SENTRY_DSN", None)

from authentication.auth import issue_account_token  # noqa: E402
from repositories.database import Base, get_db  # noqa: E402
import repositories.db_models as db_models  # noqa: E402
from services.merge_session_store import (  # noqa: E402
    MergeSessionStore,
    get_merge_session_store,
)

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FrozenClock:
    """Controllable clock for expiry tests."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session."""
    return db_session


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def session_store() -> MergeSessionStore:
    """Empty merge session store, isolated per test."""
    return MergeSessionStore()


@pytest.fixture(scope="function")
def client(db_session, session_store):
    """Create a test client with overridden database and session store."""
    from main import app
    from helpers.rate_limiter import limiter

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_merge_session_store] = lambda: session_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _insert_account(db_session, **fields) -> db_models.Account:
    fields.setdefault("question_count", 0)
    fields.setdefault("answer_count", 0)
    fields.setdefault("login_count", 0)
    account = db_models.Account(**fields)
    db_session.add(account)
    db_session.commit()
    db_session.refresh(account)
    return account


@pytest.fixture
def make_account(db_session):
    """Factory inserting accounts with zeroed counters unless given."""

    def _make(**fields) -> db_models.Account:
        return _insert_account(db_session, **fields)

    return _make


@pytest.fixture
def complete_account(db_session) -> db_models.Account:
    """A long-lived account with a rich profile and Q&A history."""
    return _insert_account(
        db_session,
        id="+919035283755",
        full_name="Rahul Sharma",
        email="rahul@example.com",
        whatsapp_number="+919035283755",
        maritime_rank="Chief Engineer",
        current_ship_name="MV Ocean Star",
        current_city="Mumbai",
        current_latitude="19.07",
        current_longitude="72.87",
        question_count=12,
        answer_count=30,
        login_count=25,
        last_login=datetime(2026, 1, 5, tzinfo=timezone.utc),
    )


@pytest.fixture
def bare_account(db_session) -> db_models.Account:
    """A near-empty account created later under the national number form."""
    return _insert_account(
        db_session,
        id="9035283755",
        full_name=None,
        email="9035283755@whatsapp.local",
        question_count=2,
    )


@pytest.fixture
def single_account(db_session) -> db_models.Account:
    """An account that no other account collides with."""
    return _insert_account(
        db_session,
        id="+918888777766",
        full_name="Anita Desai",
        email="anita@example.com",
        maritime_rank="Second Officer",
    )


@pytest.fixture
def admin_account(db_session) -> db_models.Account:
    return _insert_account(
        db_session,
        id="admin-001",
        full_name="Platform Admin",
        email="admin@example.com",
        is_platform_admin=True,
    )


@pytest.fixture
def admin_headers(admin_account) -> dict:
    token = issue_account_token(admin_account.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(single_account) -> dict:
    token = issue_account_token(single_account.id)
    return {"Authorization": f"Bearer {token}"}

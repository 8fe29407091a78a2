"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.database import Base, get_db
from src.main import app
from src.schemas.user import UserCreate
from src.services.users import register_user


class AuthHeaders(dict):
    """Dict subclass that also stores the fixture user's id, email and token."""

    def __init__(
        self, *args, user_id: int | None = None, email: str = "", token: str = "", **kwargs
    ):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email
        self.token = token


USER_ONE = {"name": "Mike", "email": "mike@example.com", "password": "56what!!"}
USER_TWO = {"name": "Andrew", "email": "andrew@example.com", "password": "myhouse099@@"}


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace(
        "/task_manager", "/task_manager_test"
    )
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    from src import models  # noqa: F401

    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

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


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _seed_user(db, data: dict) -> AuthHeaders:
    user, token = register_user(db, UserCreate(**data))
    return AuthHeaders(
        {"Authorization": f"Bearer {token}"},
        user_id=user.id,
        email=data["email"],
        token=token,
    )


@pytest.fixture
def user_one(db):
    """Seed the primary fixture user; its signup token sits at index 0."""
    return _seed_user(db, USER_ONE)


@pytest.fixture
def user_two(db):
    """Seed a second, unrelated user."""
    return _seed_user(db, USER_TWO)

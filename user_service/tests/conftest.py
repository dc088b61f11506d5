"""
Pytest configuration and fixtures for user service tests.
"""

import os
from datetime import datetime, timedelta
from typing import Any, AsyncGenerator, Callable

import pytest

# Set up test environment variables before importing anything else
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("USER_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("ALGORITHM", "HS256")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "30")
os.environ.setdefault("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from user_service.app.core.database import UserServiceDatabaseManager
from user_service.app.core.password_security import SecurityUtils
from user_service.app.models.user import User, UserRole
from user_service.app.utils.jwt_handler import Principal


@pytest.fixture
async def test_database_manager() -> AsyncGenerator[UserServiceDatabaseManager, None]:
    """Fresh in-memory database per test."""
    manager = UserServiceDatabaseManager(
        database_url="sqlite+aiosqlite:///:memory:", echo=False
    )
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
def test_session_maker(test_database_manager: UserServiceDatabaseManager) -> Any:
    return test_database_manager.async_session_maker


@pytest.fixture
async def db_session(test_session_maker: Any) -> AsyncGenerator[Any, None]:
    async with test_session_maker() as session:
        yield session


@pytest.fixture
async def seller(db_session: Any) -> User:
    """A stored seller whose password is "password123"."""
    user = User(
        email="seller@example.com",
        name="Ada Seller",
        role=UserRole.SELLER,
        password_hash=SecurityUtils.hash_password("password123"),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def make_principal() -> Callable[..., Principal]:
    """Build the Principal the auth middleware would attach."""

    def _make(user_id: str, roles: tuple = ("SELLER",)) -> Principal:
        return Principal(
            user_id=user_id,
            email=f"{user_id}@example.com",
            roles=list(roles),
            expires_at=datetime.now() + timedelta(hours=1),
            token=f"token-of-{user_id}",
        )

    return _make

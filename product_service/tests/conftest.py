"""
Pytest configuration and fixtures for product service tests.
"""

import os
from datetime import datetime, timedelta
from typing import Any, AsyncGenerator, Callable

import pytest

# Set up test environment variables before importing anything else
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("PRODUCT_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("ALGORITHM", "HS256")
os.environ.setdefault("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")
os.environ.setdefault("MEDIA_SERVICE_URL", "http://media-service:8003")
os.environ.setdefault("MEDIA_PUBLIC_URL", "http://localhost:8003/api/v1/media")
os.environ.setdefault("CONSUMER_RETRY_DELAY", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from product_service.app.core.database import ProductServiceDatabaseManager
from product_service.app.models.product import DeletedOwner, Product  # noqa: F401
from product_service.app.utils.jwt_handler import Principal


@pytest.fixture
async def test_database_manager() -> AsyncGenerator[ProductServiceDatabaseManager, None]:
    """Fresh in-memory database per test."""
    manager = ProductServiceDatabaseManager(
        database_url="sqlite+aiosqlite:///:memory:", echo=False
    )
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
def test_session_maker(test_database_manager: ProductServiceDatabaseManager) -> Any:
    return test_database_manager.async_session_maker


@pytest.fixture
async def db_session(test_session_maker: Any) -> AsyncGenerator[Any, None]:
    """Create a test database session with proper cleanup."""
    async with test_session_maker() as session:
        yield session


@pytest.fixture
def make_principal() -> Callable[..., Principal]:
    """Build the Principal the auth middleware would attach."""

    def _make(user_id: str = "seller-1", roles: tuple = ("SELLER",)) -> Principal:
        return Principal(
            user_id=user_id,
            email=f"{user_id}@example.com",
            roles=list(roles),
            expires_at=datetime.now() + timedelta(hours=1),
            token=f"token-of-{user_id}",
        )

    return _make

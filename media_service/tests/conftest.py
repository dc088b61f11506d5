"""
Pytest configuration and fixtures for media service tests.
"""

import os
from datetime import datetime, timedelta
from typing import Any, AsyncGenerator, Callable

import pytest

# Set up test environment variables before importing anything else
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("MEDIA_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("ALGORITHM", "HS256")
os.environ.setdefault("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")
os.environ.setdefault("PRODUCT_SERVICE_URL", "http://product-service:8002")
os.environ.setdefault("MEDIA_PUBLIC_URL", "http://localhost:8003/api/v1/media")
os.environ.setdefault("MAX_UPLOAD_SIZE", "1024")
os.environ.setdefault("CONSUMER_RETRY_DELAY", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from media_service.app.core.database import MediaServiceDatabaseManager
from media_service.app.models.media import DeletedOwner, Media  # noqa: F401
from media_service.app.utils.file_storage import MediaStorage
from media_service.app.utils.jwt_handler import Principal

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
async def test_database_manager() -> AsyncGenerator[MediaServiceDatabaseManager, None]:
    """Fresh in-memory database per test."""
    manager = MediaServiceDatabaseManager(
        database_url="sqlite+aiosqlite:///:memory:", echo=False
    )
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
def test_session_maker(test_database_manager: MediaServiceDatabaseManager) -> Any:
    return test_database_manager.async_session_maker


@pytest.fixture
async def db_session(test_session_maker: Any) -> AsyncGenerator[Any, None]:
    async with test_session_maker() as session:
        yield session


@pytest.fixture
def storage(tmp_path) -> MediaStorage:
    return MediaStorage(str(tmp_path / "uploads"))


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def make_principal() -> Callable[..., Principal]:
    def _make(user_id: str = "seller-1", roles: tuple = ("SELLER",)) -> Principal:
        return Principal(
            user_id=user_id,
            email=f"{user_id}@example.com",
            roles=list(roles),
            expires_at=datetime.now() + timedelta(hours=1),
            token=f"token-of-{user_id}",
        )

    return _make

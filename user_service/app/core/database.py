from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ..models.base import UserServiceBase
from ..utils.logging import setup_user_logging as setup_logging
from .settings import get_settings

logger = setup_logging("user_service.database", log_level=get_settings().LOG_LEVEL)

POSTGRES_POOL: Dict[str, Any] = {
    "pool_size": 20,
    "max_overflow": 40,
    "pool_timeout": 45,
    "pool_recycle": 3600,
    "pool_pre_ping": True,
    "connect_args": {"command_timeout": 30},
}


def engine_options(database_url: str, echo: bool = False) -> Dict[str, Any]:
    """Engine keyword arguments for the backend named by database_url"""
    if not database_url.startswith("sqlite"):
        return {"echo": echo, **POSTGRES_POOL}

    options: Dict[str, Any] = {
        "echo": echo,
        "connect_args": {"timeout": 60, "check_same_thread": False},
    }
    if ":memory:" in database_url or database_url.endswith("://"):
        # Every session must see the same in-memory database
        options["poolclass"] = StaticPool
    return options


class UserServiceDatabaseManager:
    """Owns the async engine and session factory of the account store."""

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self.async_engine = create_async_engine(
            database_url, **engine_options(database_url, echo)
        )
        self.async_session_maker = async_sessionmaker(
            bind=self.async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.debug(
            "Database engine created",
            extra={"backend": self.async_engine.dialect.name, "operation": "engine_init"},
        )

    async def create_tables(self) -> None:
        try:
            async with self.async_engine.begin() as conn:
                await conn.run_sync(UserServiceBase.metadata.create_all)
        except Exception as e:
            # A concurrent instance may have won the race
            logger.warning(
                "Could not create tables",
                extra={"error": str(e), "operation": "create_tables"},
            )
            return
        logger.info("Tables ready", extra={"operation": "create_tables"})

    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.async_session_maker() as session:
            yield session

    async def close(self) -> None:
        await self.async_engine.dispose()
        logger.info("Database engine disposed", extra={"operation": "database_close"})


settings = get_settings()
database_manager = UserServiceDatabaseManager(
    database_url=settings.USER_DATABASE_URL, echo=settings.DEBUG
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in database_manager.get_async_session():
        yield session

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthorizationError, NotFoundError
from ..core.password_security import SecurityUtils
from ..core.settings import get_settings
from ..events.event_producers import UserEventProducer
from ..models.user import User
from ..repository.user_repository import UserRepository
from ..schemas.user import UserProfileResponse, UserUpdateRequest
from ..utils.jwt_handler import Principal
from ..utils.logging import setup_user_logging as setup_logging

settings = get_settings()
logger = setup_logging("user_service.users", log_level=settings.LOG_LEVEL)


class UserService:
    """Account reads, profile updates and account deletion."""

    def __init__(
        self, session: AsyncSession, event_publisher: Optional[UserEventProducer] = None
    ):
        self.session = session
        self.event_publisher = event_publisher
        self.user_repository = UserRepository(session)

    async def _get_user(self, user_id: str) -> User:
        user = await self.user_repository.query_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def get_profile(self, principal: Principal) -> UserProfileResponse:
        return UserProfileResponse.model_validate(await self._get_user(principal.user_id))

    async def get_user_by_id(self, user_id: str) -> UserProfileResponse:
        """Public profile, used to show seller details next to products"""
        return UserProfileResponse.model_validate(await self._get_user(user_id))

    async def update_profile(
        self, principal: Principal, data: UserUpdateRequest
    ) -> UserProfileResponse:
        user = await self._get_user(principal.user_id)

        if data.new_password:
            if not SecurityUtils.verify_password(
                data.current_password or "", user.password_hash
            ):
                raise AuthorizationError("Incorrect current password")
            user.password_hash = SecurityUtils.hash_password(data.new_password)

        if data.name:
            user.name = data.name

        if data.avatar is not None:
            user.avatar = data.avatar or None

        user = await self.user_repository.update(user)
        logger.info(
            "User profile updated",
            extra={
                "user_id": user.id,
                "password_changed": bool(data.new_password),
                "operation": "update_profile",
            },
        )
        return UserProfileResponse.model_validate(user)

    async def delete_account(
        self, principal: Principal, correlation_id: Optional[str] = None
    ) -> None:
        """Delete the row, then announce user.deleted for the dependent stores"""
        user = await self._get_user(principal.user_id)
        user_id = user.id

        await self.user_repository.delete(user)
        logger.info(
            "User account deleted",
            extra={
                "user_id": user_id,
                "correlation_id": correlation_id,
                "operation": "delete_account",
            },
        )

        if self.event_publisher is None:
            logger.error(
                "Event publisher unavailable, user deleted event not published",
                extra={
                    "user_id": user_id,
                    "topic": settings.KAFKA_TOPIC_USER_DELETED,
                    "payload": user_id,
                    "operation": "publish_user_deleted_skipped",
                },
            )
            return

        await self.event_publisher.publish_user_deleted(
            user_id, correlation_id=correlation_id
        )

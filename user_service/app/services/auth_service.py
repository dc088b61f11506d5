from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthenticationError, ConflictError
from ..core.password_security import SecurityUtils
from ..core.settings import get_settings
from ..models.user import User
from ..repository.user_repository import UserRepository
from ..schemas.user import (
    UserLoginRequest,
    UserLoginResponse,
    UserProfileResponse,
    UserRegistrationRequest,
)
from ..utils.jwt_handler import JWTHandler
from ..utils.logging import setup_user_logging as setup_logging

settings = get_settings()
logger = setup_logging("user_service.auth", log_level=settings.LOG_LEVEL)

jwt_handler = JWTHandler(secret_key=settings.SECRET_KEY, algorithm=settings.ALGORITHM)


class AuthService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repository = UserRepository(session)

    async def register_user(self, data: UserRegistrationRequest) -> UserProfileResponse:
        """Register a new account; emails are unique case-insensitively"""
        email = data.email.lower()

        if await self.user_repository.query_email(email):
            logger.warning(
                "Registration failed, email already exists",
                extra={"email": email, "operation": "register_conflict"},
            )
            raise ConflictError("Email already registered")

        user = User(
            email=email,
            name=data.name,
            role=data.role,
            password_hash=SecurityUtils.hash_password(data.password),
        )
        try:
            user = await self.user_repository.create(user)
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await self.session.rollback()
            raise ConflictError("Email already registered")

        logger.info(
            "User registered",
            extra={
                "user_id": user.id,
                "role": user.role.value,
                "operation": "register_user",
            },
        )
        return UserProfileResponse.model_validate(user)

    async def authenticate_user(self, data: UserLoginRequest) -> UserLoginResponse:
        user = await self.user_repository.query_email(data.email)

        if user is None:
            SecurityUtils.reject_unknown_account()
            raise AuthenticationError("Invalid email or password")

        if not SecurityUtils.verify_password(data.password, user.password_hash):
            logger.warning(
                "Login failed, wrong password",
                extra={"user_id": user.id, "operation": "login_failed"},
            )
            raise AuthenticationError("Invalid email or password")

        token = jwt_handler.issue_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role.value,
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
        logger.info(
            "User logged in", extra={"user_id": user.id, "operation": "login"}
        )
        return UserLoginResponse(
            token=token,
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            avatar_url=user.avatar,
        )

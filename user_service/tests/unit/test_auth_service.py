from unittest.mock import AsyncMock

import pytest
from jose import jwt
from sqlalchemy.exc import IntegrityError

from user_service.app.core.exceptions import AuthenticationError, ConflictError
from user_service.app.core.settings import get_settings
from user_service.app.models.user import UserRole
from user_service.app.schemas.user import UserLoginRequest, UserRegistrationRequest
from user_service.app.services.auth_service import AuthService


class TestAuthService:
    """Unit tests for registration and login against an in-memory store."""

    @pytest.fixture
    def auth_service(self, db_session):
        return AuthService(db_session)

    @pytest.fixture
    def registration(self):
        return UserRegistrationRequest(
            name="New Client",
            email="New.Client@Example.com",
            password="StrongPass123",
            role=UserRole.CLIENT,
        )

    # Tests for register_user method
    @pytest.mark.asyncio
    async def test_register_user_success(self, auth_service, registration):
        result = await auth_service.register_user(registration)

        assert result.id
        assert result.email == "new.client@example.com"
        assert result.role == UserRole.CLIENT
        assert result.avatar is None

    @pytest.mark.asyncio
    async def test_register_stores_hash_not_password(
        self, auth_service, registration
    ):
        result = await auth_service.register_user(registration)

        stored = await auth_service.user_repository.query_id(result.id)
        assert stored.password_hash != "StrongPass123"
        assert stored.password_hash.startswith("$2")

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, auth_service, registration, seller):
        duplicate = registration.model_copy(update={"email": "SELLER@example.com"})

        with pytest.raises(ConflictError):
            await auth_service.register_user(duplicate)

    @pytest.mark.asyncio
    async def test_register_race_reports_conflict(self, auth_service, registration):
        auth_service.user_repository.create = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("unique"))
        )

        with pytest.raises(ConflictError):
            await auth_service.register_user(registration)

    # Tests for authenticate_user method
    @pytest.mark.asyncio
    async def test_login_returns_token_and_profile(self, auth_service, seller):
        result = await auth_service.authenticate_user(
            UserLoginRequest(email="seller@example.com", password="password123")
        )

        settings = get_settings()
        claims = jwt.decode(
            result.token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        assert result.id == seller.id
        assert result.name == "Ada Seller"
        assert result.role == UserRole.SELLER
        assert claims["user_id"] == seller.id
        assert claims["email"] == "seller@example.com"
        assert claims["roles"] == ["SELLER"]
        assert claims["type"] == "access"
        assert "exp" in claims and "iat" in claims

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, auth_service, seller):
        with pytest.raises(AuthenticationError):
            await auth_service.authenticate_user(
                UserLoginRequest(email="seller@example.com", password="wrong-password")
            )

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, auth_service):
        with pytest.raises(AuthenticationError):
            await auth_service.authenticate_user(
                UserLoginRequest(email="nobody@example.com", password="password123")
            )

from typing import Optional

from fastapi import APIRouter, status
from fastapi.responses import Response

from ...core.settings import get_settings
from ...schemas.user import (
    UserLoginRequest,
    UserLoginResponse,
    UserProfileResponse,
    UserRegistrationRequest,
)
from ...services.auth_service import AuthService
from ...utils.logging import setup_user_logging
from ..dependencies import AuthServiceDep, CorrelationIdDep

logger = setup_user_logging("auth_api")
router = APIRouter(prefix="/auth")


@router.post(
    "/register",
    response_model=UserProfileResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    data: UserRegistrationRequest,
    service: AuthService = AuthServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> UserProfileResponse:
    result = await service.register_user(data)
    logger.info(
        "User registered via API",
        extra={"user_id": result.id, "correlation_id": correlation_id},
    )
    return result


@router.post("/login", response_model=UserLoginResponse, status_code=status.HTTP_200_OK)
async def login(
    response: Response,
    data: UserLoginRequest,
    service: AuthService = AuthServiceDep,
) -> UserLoginResponse:
    result = await service.authenticate_user(data)

    # Browser clients send the token back as a cookie
    settings = get_settings()
    response.set_cookie(
        key="access_token",
        value=result.token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.ENVIRONMENT.lower() == "production",
    )
    return result

from typing import Optional

from fastapi import APIRouter, Response, status

from ...schemas.user import UserProfileResponse, UserUpdateRequest
from ...services.user_service import UserService
from ...utils.jwt_handler import Principal
from ...utils.logging import setup_user_logging
from ..dependencies import AuthenticatedPrincipalDep, CorrelationIdDep, UserServiceDep

logger = setup_user_logging("users_api")
router = APIRouter(prefix="/users")


@router.get("/me", response_model=UserProfileResponse)
async def get_my_profile(
    principal: Principal = AuthenticatedPrincipalDep,
    service: UserService = UserServiceDep,
) -> UserProfileResponse:
    return await service.get_profile(principal)


@router.put("/me", response_model=UserProfileResponse)
async def update_my_profile(
    data: UserUpdateRequest,
    principal: Principal = AuthenticatedPrincipalDep,
    service: UserService = UserServiceDep,
) -> UserProfileResponse:
    return await service.update_profile(principal, data)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_account(
    principal: Principal = AuthenticatedPrincipalDep,
    service: UserService = UserServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> Response:
    await service.delete_account(principal, correlation_id=correlation_id)
    logger.info(
        "Account deletion requested",
        extra={"user_id": principal.user_id, "correlation_id": correlation_id},
    )
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie("access_token")
    return response


@router.get("/{user_id}", response_model=UserProfileResponse)
async def get_user_by_id(
    user_id: str,
    service: UserService = UserServiceDep,
) -> UserProfileResponse:
    """Public seller profile"""
    return await service.get_user_by_id(user_id)

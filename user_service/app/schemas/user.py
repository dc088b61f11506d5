from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from ..models.user import UserRole

# --------------------------------------------------------------
# Authentication Schemas
# --------------------------------------------------------------


class UserRegistrationRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=50, examples=["Ada Seller"])
    email: EmailStr = Field(..., examples=["user@example.com"])
    password: str = Field(
        ..., min_length=8, max_length=100, examples=["strongpassword123"]
    )
    role: UserRole = Field(..., examples=[UserRole.SELLER])


class UserLoginRequest(BaseModel):
    email: EmailStr = Field(..., examples=["user@example.com"])
    password: str = Field(..., examples=["strongpassword123"])


class UserLoginResponse(BaseModel):
    token: str
    id: str
    email: str
    name: str
    role: UserRole
    avatar_url: Optional[str] = None


# --------------------------------------------------------------
# Account Schemas
# --------------------------------------------------------------


class UserProfileResponse(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserUpdateRequest(BaseModel):
    """Partial profile update; a new password needs the current one"""

    name: Optional[str] = Field(None, min_length=2, max_length=50)
    avatar: Optional[str] = Field(None, max_length=512)
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(None, min_length=8, max_length=100)

    @model_validator(mode="after")
    def require_current_password(self) -> "UserUpdateRequest":
        if self.new_password and not self.current_password:
            raise ValueError("Current password is required to set a new password")
        return self

import enum
from typing import Optional

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import UserServiceBaseModel


class UserRole(str, enum.Enum):
    SELLER = "SELLER"
    CLIENT = "CLIENT"


class User(UserServiceBaseModel):
    __tablename__ = "users"

    # Authentication fields
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Profile
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=16),
        default=UserRole.CLIENT,
        nullable=False,
    )
    avatar: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

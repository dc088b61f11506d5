"""
User Service Models
"""

from .base import UserServiceBase, UserServiceBaseModel
from .user import User, UserRole

__all__ = [
    "UserServiceBase",
    "UserServiceBaseModel",
    "User",
    "UserRole",
]

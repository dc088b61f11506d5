"""
User Service error taxonomy.
"""


class UserServiceError(Exception):
    """Base class for user service domain errors"""


class AuthenticationError(UserServiceError):
    """Credentials do not match a known account"""


class AuthorizationError(UserServiceError, PermissionError):
    """Caller may not act on the account"""


class NotFoundError(UserServiceError, LookupError):
    """Referenced user does not exist"""


class ConflictError(UserServiceError):
    """Email address is already registered"""

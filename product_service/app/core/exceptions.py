"""
Product Service error taxonomy.

AuthorizationError and NotFoundError surface to API callers; TransportError
and MalformedPayloadError stay inside the cascade, bridge and reconciliation
paths where they are logged and never propagated to the end user.
"""


class ProductServiceError(Exception):
    """Base class for product service domain errors"""


class AuthorizationError(ProductServiceError, PermissionError):
    """Actor is not the owner of the resource"""


class NotFoundError(ProductServiceError, LookupError):
    """Referenced entity does not exist"""


class TransportError(ProductServiceError):
    """Event publish/consume or synchronous service call failed"""


class MalformedPayloadError(ProductServiceError, ValueError):
    """Event payload does not match any recognized shape"""

"""
Media Service error taxonomy.

AuthorizationError and NotFoundError surface to API callers. TransportError
(reference removal calls into the product service) and MalformedPayloadError
(cascade events) are logged where they occur and never reach the end user.
"""


class MediaServiceError(Exception):
    """Base class for media service domain errors"""


class AuthorizationError(MediaServiceError, PermissionError):
    """Actor is not the owner of the media"""


class NotFoundError(MediaServiceError, LookupError):
    """Referenced media does not exist"""


class InvalidUploadError(MediaServiceError, ValueError):
    """Uploaded file is not an accepted image or is too large"""


class TransportError(MediaServiceError):
    """Synchronous call into the product service failed"""


class MalformedPayloadError(MediaServiceError, ValueError):
    """Event payload does not match any recognized shape"""

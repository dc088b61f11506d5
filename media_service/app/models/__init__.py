from .base import MediaServiceBase, MediaServiceBaseModel
from .media import DeletedOwner, Media

__all__ = [
    "MediaServiceBase",
    "MediaServiceBaseModel",
    "Media",
    "DeletedOwner",
]

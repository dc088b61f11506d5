"""
Product Service Event Schemas
=============================

Re-exports the cascade topic names and payload codec.
"""

from .event_schemas import (
    PRODUCT_DELETED,
    USER_DELETED,
    CascadeResult,
    ProductDeletedEvent,
    encode_product_deleted,
    parse_user_deleted,
)

__all__ = [
    "PRODUCT_DELETED",
    "USER_DELETED",
    "CascadeResult",
    "ProductDeletedEvent",
    "encode_product_deleted",
    "parse_user_deleted",
]

from .event_schemas import (
    PRODUCT_DELETED,
    USER_DELETED,
    CascadeResult,
    ProductDeletion,
    parse_product_deleted,
    parse_user_deleted,
)

__all__ = [
    "PRODUCT_DELETED",
    "USER_DELETED",
    "CascadeResult",
    "ProductDeletion",
    "parse_product_deleted",
    "parse_user_deleted",
]

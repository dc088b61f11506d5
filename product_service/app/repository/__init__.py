"""Repository layer for Product Service"""

from .product_repository import DeletedOwnerRepository, ProductRepository

__all__ = [
    "ProductRepository",
    "DeletedOwnerRepository",
]

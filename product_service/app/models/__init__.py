from .base import ProductServiceBase, ProductServiceBaseModel
from .product import DeletedOwner, Product

__all__ = [
    "ProductServiceBase",
    "ProductServiceBaseModel",
    "Product",
    "DeletedOwner",
]

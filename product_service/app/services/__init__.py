"""Service layer for Product Service"""

from .product_service import ProductService
from .reconciliation_service import OrphanReconciler

__all__ = [
    "ProductService",
    "OrphanReconciler",
]

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductBase(BaseModel):
    name: str = Field(
        ..., min_length=2, max_length=100, description="Product name (2-100 chars)"
    )
    description: Optional[str] = Field(None, max_length=500)
    price: float = Field(..., ge=0, description="Product price (non-negative)")
    quantity: int = Field(..., ge=0, description="Units in stock (non-negative)")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name cannot be empty or whitespace only")
        return v.strip()


class ProductCreate(ProductBase):
    pass


class ProductUpdate(ProductBase):
    """Full replacement of the editable fields, as the storefront sends them"""

    pass


class ProductResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    seller_id: str
    media_ids: List[str] = []
    image_urls: List[str] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReconciliationReport(BaseModel):
    products_scanned: int = 0
    products_updated: int = 0
    references_cleaned: int = 0

    @property
    def summary(self) -> str:
        return (
            f"Cleaned up {self.references_cleaned} orphaned media references "
            "from products"
        )

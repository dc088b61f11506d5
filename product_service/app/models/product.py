from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import ProductServiceBase, ProductServiceBaseModel, utc_now


class Product(ProductServiceBaseModel):
    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Owner, a user id from the user service (no FK: different store)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # Display order of the product's images; always reassign, never mutate in place
    media_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)


class DeletedOwner(ProductServiceBase):
    """Tombstone of a user whose deletion event has been accepted"""

    __tablename__ = "deleted_owners"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    deleted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=utc_now, nullable=False
    )

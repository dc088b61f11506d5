from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import MediaServiceBase, MediaServiceBaseModel, utc_now


class Media(MediaServiceBaseModel):
    __tablename__ = "media"

    original_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)

    # Storage key relative to MEDIA_STORAGE_DIR
    file_path: Mapped[str] = mapped_column(String(255), nullable=False)

    # Owner and optional product back-reference (ids from other stores, no FKs)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    product_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, index=True
    )

    url: Mapped[str] = mapped_column(String(500), nullable=False, default="")


class DeletedOwner(MediaServiceBase):
    """Tombstone of a user whose deletion event has been accepted"""

    __tablename__ = "deleted_owners"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    deleted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=utc_now, nullable=False
    )

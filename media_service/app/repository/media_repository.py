"""Media repository for database operations"""

from typing import Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.media import DeletedOwner, Media


class MediaRepository:
    """Repository for media database operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_media(self, media: Media) -> Media:
        self.db.add(media)
        await self.db.commit()
        await self.db.refresh(media)
        return media

    async def get_media_by_id(self, media_id: str) -> Optional[Media]:
        """Get media by ID"""
        query = select(Media).where(Media.id == media_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_by_ids(self, media_ids: Iterable[str]) -> List[Media]:
        ids = list(dict.fromkeys(media_ids))
        if not ids:
            return []
        query = select(Media).where(Media.id.in_(ids))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_by_user(self, user_id: str) -> List[Media]:
        query = select(Media).where(Media.user_id == user_id).order_by(Media.created_at)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_by_product(self, product_id: str) -> List[Media]:
        query = (
            select(Media)
            .where(Media.product_id == product_id)
            .order_by(Media.created_at)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def set_product(self, media: Media, product_id: str) -> Media:
        media.product_id = product_id
        await self.db.commit()
        await self.db.refresh(media)
        return media

    async def delete_media(self, media: Media) -> None:
        """Hard delete media"""
        await self.db.delete(media)
        await self.db.commit()

    async def delete_many(self, media: List[Media]) -> int:
        """
        Delete the given records in one statement.

        Returns the number of rows actually removed, which is lower than
        len(media) when a concurrent delivery got to some of them first.
        """
        if not media:
            return 0
        ids = [m.id for m in media]
        result = await self.db.execute(
            delete(Media)
            .where(Media.id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        for item in media:
            if item in self.db:
                self.db.expunge(item)
        return result.rowcount or 0


class DeletedOwnerRepository:
    """Tombstones of owners whose deletion event has been accepted"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def is_deleted(self, user_id: str) -> bool:
        return await self.db.get(DeletedOwner, user_id) is not None

    async def record(self, user_id: str) -> bool:
        """Write a tombstone; False when one already exists"""
        if await self.is_deleted(user_id):
            return False

        self.db.add(DeletedOwner(user_id=user_id))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            return False
        return True

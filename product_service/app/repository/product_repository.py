"""Product repository for database operations"""

from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.product import DeletedOwner, Product
from ..schemas.product import ProductCreate, ProductUpdate


class ProductRepository:
    """Repository for product database operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_product(self, product_data: ProductCreate, user_id: str) -> Product:
        """Create a new product owned by user_id"""
        product = Product(
            name=product_data.name,
            description=product_data.description,
            price=product_data.price,
            quantity=product_data.quantity,
            user_id=user_id,
            media_ids=[],
        )

        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        """Get product by ID"""
        query = select(Product).where(Product.id == product_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_products(self, seller_id: Optional[str] = None) -> List[Product]:
        """List products, optionally restricted to one seller"""
        query = select(Product).order_by(Product.created_at)
        if seller_id:
            query = query.where(Product.user_id == seller_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_products_by_user(self, user_id: str) -> List[Product]:
        """All products owned by user_id"""
        query = select(Product).where(Product.user_id == user_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update_product(
        self, product: Product, product_data: ProductUpdate
    ) -> Product:
        """Update product"""
        for field, value in product_data.model_dump().items():
            setattr(product, field, value)

        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def delete_product(self, product: Product) -> None:
        """Hard delete product"""
        await self.db.delete(product)
        await self.db.commit()

    async def add_media_id(self, product: Product, media_id: str) -> bool:
        """Append media_id to the product's display list; False if already present"""
        current = list(product.media_ids or [])
        if media_id in current:
            return False

        product.media_ids = current + [media_id]
        await self.db.commit()
        await self.db.refresh(product)
        return True

    async def remove_media_ids(
        self, product_id: str, media_ids: Iterable[str]
    ) -> Optional[int]:
        """
        Remove the given ids from the product's current list in one update.

        Reads the row fresh so ids appended since the caller's snapshot survive.
        Returns how many ids were actually removed, or None when the product
        no longer exists.
        """
        to_remove = set(media_ids)
        product = await self.get_product_by_id(product_id)
        if not product:
            return None

        await self.db.refresh(product)
        current = list(product.media_ids or [])
        kept = [media_id for media_id in current if media_id not in to_remove]
        if len(kept) != len(current):
            product.media_ids = kept
            await self.db.commit()
            await self.db.refresh(product)
        return len(current) - len(kept)


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
            # A concurrent redelivery wrote it first
            await self.db.rollback()
            return False
        return True

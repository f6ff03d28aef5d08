from dataclasses import asdict
from typing import List, Optional

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import Database
from shared.config.settings import Settings

from .models import (
    Ad,
    Category,
    Product,
    build_ads_table,
    build_categories_table,
    build_products_table,
)


class CatalogRepository:
    """Read side of the catalog; writes happen in catalog management, except for seeding."""

    def __init__(self, database: Database, settings: Settings):
        self.ads = build_ads_table(database.metadata, settings.ads_table_name)
        self.categories = build_categories_table(database.metadata, settings.categories_table_name)
        self.products = build_products_table(database.metadata, settings.products_table_name)

    async def list_ads(self, db: AsyncSession) -> List[Ad]:
        result = await db.execute(select(self.ads))
        return [Ad(**row) for row in result.mappings().all()]

    async def list_categories(self, db: AsyncSession) -> List[Category]:
        result = await db.execute(select(self.categories))
        return [Category(**row) for row in result.mappings().all()]

    async def list_products(self, db: AsyncSession, category_id: str) -> List[Product]:
        result = await db.execute(
            select(self.products).where(self.products.c.category_id == category_id)
        )
        return [Product(**row) for row in result.mappings().all()]

    async def get_product(self, db: AsyncSession, product_id: str) -> Optional[Product]:
        result = await db.execute(select(self.products).where(self.products.c.id == product_id))
        row = result.mappings().first()
        return Product(**row) if row else None

    async def add_product(self, db: AsyncSession, product: Product) -> Product:
        await db.execute(insert(self.products).values(**asdict(product)))
        await db.commit()
        return product

    async def add_category(self, db: AsyncSession, category: Category) -> Category:
        await db.execute(insert(self.categories).values(**asdict(category)))
        await db.commit()
        return category

    async def add_ad(self, db: AsyncSession, ad: Ad) -> Ad:
        await db.execute(insert(self.ads).values(**asdict(ad)))
        await db.commit()
        return ad

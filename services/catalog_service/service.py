from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from .repository import CatalogRepository
from .schemas import AdResponse, CategoryResponse, ProductResponse


class CatalogService:

    def __init__(self, catalog: CatalogRepository):
        self.catalog = catalog

    async def list_ads(self, db: AsyncSession) -> List[AdResponse]:
        return [AdResponse.model_validate(a) for a in await self.catalog.list_ads(db)]

    async def list_categories(self, db: AsyncSession) -> List[CategoryResponse]:
        return [CategoryResponse.model_validate(c) for c in await self.catalog.list_categories(db)]

    async def list_products(self, db: AsyncSession, category_id: str) -> List[ProductResponse]:
        products = await self.catalog.list_products(db, category_id)
        return [ProductResponse.model_validate(p) for p in products]

from dataclasses import asdict
from typing import List, Optional

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import Database

from .models import DeliveryAddress, build_delivery_addresses_table


class DeliveryAddressRepository:

    def __init__(self, database: Database, table_name: str):
        self.table = build_delivery_addresses_table(database.metadata, table_name)

    async def create(self, db: AsyncSession, address: DeliveryAddress) -> DeliveryAddress:
        await db.execute(insert(self.table).values(**asdict(address)))
        await db.commit()
        return address

    async def get_by_id(self, db: AsyncSession, address_id: str) -> Optional[DeliveryAddress]:
        result = await db.execute(select(self.table).where(self.table.c.id == address_id))
        row = result.mappings().first()
        return DeliveryAddress(**row) if row else None

    async def list_by_user(self, db: AsyncSession, user_id: str) -> List[DeliveryAddress]:
        result = await db.execute(select(self.table).where(self.table.c.user_id == user_id))
        return [DeliveryAddress(**row) for row in result.mappings().all()]

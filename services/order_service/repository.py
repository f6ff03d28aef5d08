from dataclasses import asdict
from typing import List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import Database

from .models import Order, OrderItem, build_order_items_table, build_orders_table


class OrderRepository:

    def __init__(self, database: Database, orders_table_name: str, items_table_name: str):
        self.orders = build_orders_table(database.metadata, orders_table_name)
        self.items = build_order_items_table(database.metadata, items_table_name)

    async def create_order(self, db: AsyncSession, order: Order) -> Order:
        await db.execute(insert(self.orders).values(**asdict(order)))
        await db.commit()
        return order

    async def create_item(self, db: AsyncSession, item: OrderItem) -> OrderItem:
        await db.execute(insert(self.items).values(**asdict(item)))
        await db.commit()
        return item

    async def get_order(self, db: AsyncSession, order_id: str) -> Optional[Order]:
        result = await db.execute(select(self.orders).where(self.orders.c.id == order_id))
        row = result.mappings().first()
        return Order(**row) if row else None

    async def list_by_user(self, db: AsyncSession, user_id: str) -> List[Order]:
        # Scan filtered on the indexed user_id column; no pagination.
        result = await db.execute(
            select(self.orders)
            .where(self.orders.c.user_id == user_id)
            .order_by(self.orders.c.created_at.desc())
        )
        return [Order(**row) for row in result.mappings().all()]

    async def list_items(self, db: AsyncSession, order_id: str) -> List[OrderItem]:
        result = await db.execute(select(self.items).where(self.items.c.order_id == order_id))
        return [OrderItem(**row) for row in result.mappings().all()]

    async def update_status(
        self,
        db: AsyncSession,
        order_id: str,
        status: str,
        expected_status: Optional[str] = None,
    ) -> Optional[Order]:
        """
        Sets the status by primary key. With expected_status the write is
        conditional and returns None when the stored status no longer matches.
        """
        stmt = update(self.orders).where(self.orders.c.id == order_id).values(status=status)
        if expected_status is not None:
            stmt = stmt.where(self.orders.c.status == expected_status)
        result = await db.execute(stmt)
        await db.commit()
        if result.rowcount == 0:
            return None
        return await self.get_order(db, order_id)

    async def delete_items(self, db: AsyncSession, order_id: str) -> int:
        result = await db.execute(delete(self.items).where(self.items.c.order_id == order_id))
        await db.commit()
        return result.rowcount

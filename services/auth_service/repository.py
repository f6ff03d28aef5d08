from datetime import datetime
from typing import Optional

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import Database
from shared.errors import Conflict

from .models import User, build_users_table


class UserRepository:

    def __init__(self, database: Database, table_name: str):
        self.table = build_users_table(database.metadata, table_name)

    async def create(self, db: AsyncSession, user: User) -> User:
        """Conditional write: the store rejects a second row with the same phone."""
        try:
            await db.execute(
                insert(self.table).values(
                    id=user.id,
                    name=user.name,
                    phone=user.phone,
                    otp=user.otp,
                    otp_expires_at=user.otp_expires_at,
                )
            )
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            raise Conflict("Phone number already registered") from exc
        return user

    async def get_by_id(self, db: AsyncSession, user_id: str) -> Optional[User]:
        result = await db.execute(select(self.table).where(self.table.c.id == user_id))
        row = result.mappings().first()
        return User(**row) if row else None

    async def get_by_phone(self, db: AsyncSession, phone: str) -> Optional[User]:
        result = await db.execute(select(self.table).where(self.table.c.phone == phone))
        row = result.mappings().first()
        return User(**row) if row else None

    async def set_otp(self, db: AsyncSession, user_id: str, otp: str, expires_at: datetime) -> None:
        await db.execute(
            update(self.table)
            .where(self.table.c.id == user_id)
            .values(otp=otp, otp_expires_at=expires_at)
        )
        await db.commit()

    async def clear_otp(self, db: AsyncSession, user_id: str) -> None:
        await db.execute(
            update(self.table)
            .where(self.table.c.id == user_id)
            .values(otp=None, otp_expires_at=None)
        )
        await db.commit()

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, MetaData, String, Table


@dataclass
class User:
    id: str
    name: str
    phone: str
    otp: Optional[str] = None
    otp_expires_at: Optional[datetime] = None


def build_users_table(metadata: MetaData, name: str) -> Table:
    # The unique index on phone is the secondary index and backs the
    # conditional write used by registration.
    return Table(
        name,
        metadata,
        Column("id", String(36), primary_key=True),
        Column("name", String(255), nullable=False),
        Column("phone", String(32), nullable=False, unique=True, index=True),
        Column("otp", String(16), nullable=True),
        Column("otp_expires_at", DateTime(timezone=True), nullable=True),
    )

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Column, Float, MetaData, String, Table


@dataclass
class DeliveryAddress:
    id: str
    user_id: str
    name: str
    address_line: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None


def build_delivery_addresses_table(metadata: MetaData, name: str) -> Table:
    return Table(
        name,
        metadata,
        Column("id", String(36), primary_key=True),
        Column("user_id", String(36), nullable=False, index=True),
        Column("name", String(255), nullable=False),
        Column("address_line", String(1024), nullable=False),
        Column("latitude", Float, nullable=True),
        Column("longitude", Float, nullable=True),
    )

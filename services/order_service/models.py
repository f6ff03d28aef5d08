import enum
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, MetaData, String, Table


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DELIVERING = "delivering"
    DELIVERED = "delivered"
    CANCELED = "canceled"


# Customer cancellation is the only transition checked here; fulfilment
# progress arrives from the trusted operator side and is applied as-is.
CANCELABLE_FROM = OrderStatus.PENDING

# Statuses the fulfilment side may push through the internal endpoint.
OPERATOR_STATUSES = (OrderStatus.CONFIRMED, OrderStatus.DELIVERING, OrderStatus.DELIVERED)


@dataclass
class Order:
    id: str
    user_id: str
    total: float
    status: str
    delivery_address_id: str
    created_at: datetime


@dataclass
class OrderItem:
    id: str
    order_id: str
    product_id: str
    name: str
    price: float  # snapshot at order time
    quantity: int

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


def build_orders_table(metadata: MetaData, name: str) -> Table:
    return Table(
        name,
        metadata,
        Column("id", String(36), primary_key=True),
        Column("user_id", String(36), nullable=False, index=True),
        Column("total", Float, nullable=False),  # calculated at creation
        Column("status", String(32), nullable=False, default=OrderStatus.PENDING.value),
        Column("delivery_address_id", String(36), nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False),
    )


def build_order_items_table(metadata: MetaData, name: str) -> Table:
    return Table(
        name,
        metadata,
        Column("id", String(36), primary_key=True),
        Column("order_id", String(36), nullable=False, index=True),
        Column("product_id", String(36), nullable=False),
        Column("name", String(255), nullable=False),
        Column("price", Float, nullable=False),
        Column("quantity", Integer, nullable=False),
    )

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from shared.schemas import CamelModel

from .models import OrderStatus


class OrderItemCreate(CamelModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=1)


class OrderCreate(CamelModel):
    # Only ids and quantities are accepted; prices always come from the catalog.
    delivery_address_id: str = Field(min_length=1)
    items: List[OrderItemCreate] = Field(min_length=1)


class OrderStatusUpdate(CamelModel):
    status: OrderStatus


class OrderItemResponse(CamelModel):
    id: str
    order_id: str
    product_id: str
    name: str
    price: float
    quantity: int


class OrderResponse(CamelModel):
    id: str
    user_id: str
    total: float
    status: str
    delivery_address_id: str
    created_at: datetime


class OrderDetailResponse(CamelModel):
    order: OrderResponse
    items: Optional[List[OrderItemResponse]] = None

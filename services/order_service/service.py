import uuid
from datetime import datetime, timezone
from typing import List

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.address_service.repository import DeliveryAddressRepository
from services.catalog_service.repository import CatalogRepository
from services.notification_service.publisher import OrderEventPublisher
from shared.errors import (
    Forbidden,
    InternalError,
    InvalidTransition,
    NotFound,
    UnprocessableEntity,
    ValidationError,
)
from shared.observability.metrics import delivery_orders_canceled_total, delivery_orders_created_total
from shared.security import AuthUser

from .models import CANCELABLE_FROM, OPERATOR_STATUSES, Order, OrderItem, OrderStatus
from .repository import OrderRepository
from .schemas import OrderCreate, OrderDetailResponse, OrderItemResponse, OrderResponse

logger = structlog.get_logger(__name__)


class OrderService:

    def __init__(
        self,
        orders: OrderRepository,
        addresses: DeliveryAddressRepository,
        catalog: CatalogRepository,
        publisher: OrderEventPublisher,
    ):
        self.orders = orders
        self.addresses = addresses
        self.catalog = catalog
        self.publisher = publisher

    async def create_order(self, db: AsyncSession, user: AuthUser, data: OrderCreate) -> OrderDetailResponse:
        # 1. Delivery address must exist and belong to the caller
        address = await self.addresses.get_by_id(db, data.delivery_address_id)
        if not address:
            raise UnprocessableEntity(
                f"Invalid delivery address: {data.delivery_address_id} not found"
            )
        if address.user_id != user.id:
            raise Forbidden("You can only use delivery addresses that belong to you")

        # 2. Price every line from the catalog, never from the client
        order_id = str(uuid.uuid4())
        total = 0.0
        items: List[OrderItem] = []
        for line in data.items:
            product = await self.catalog.get_product(db, line.product_id)
            if not product:
                raise UnprocessableEntity(f"Invalid product ID {line.product_id}: product not found")

            item = OrderItem(
                id=str(uuid.uuid4()),
                order_id=order_id,
                product_id=product.id,
                name=product.name,
                price=product.price,
                quantity=line.quantity,
            )
            total += item.line_total
            items.append(item)

        # 3. Persist order, then items. No rollback if an item write fails;
        #    the order stays and the caller can re-read it.
        order = await self.orders.create_order(db, Order(
            id=order_id,
            user_id=user.id,
            total=total,
            status=OrderStatus.PENDING.value,
            delivery_address_id=address.id,
            created_at=datetime.now(timezone.utc),
        ))
        saved_items = [await self.orders.create_item(db, item) for item in items]

        delivery_orders_created_total.inc()
        logger.info("order_created", order_id=order.id, user_id=user.id, total=total, items=len(items))

        # 4. Notify downstream, best-effort
        await self._publish_status(order)

        return OrderDetailResponse(
            order=OrderResponse.model_validate(order),
            items=[OrderItemResponse.model_validate(i) for i in saved_items],
        )

    async def cancel_order(self, db: AsyncSession, user: AuthUser, order_id: str) -> OrderResponse:
        order = await self._get_owned_order(db, user, order_id, "You can only cancel your own orders")

        if order.status != CANCELABLE_FROM.value:
            raise InvalidTransition("Only pending orders can be canceled")

        # Conditional on the status still being pending at write time
        updated = await self.orders.update_status(
            db, order.id, OrderStatus.CANCELED.value, expected_status=CANCELABLE_FROM.value
        )
        if updated is None:
            raise InvalidTransition("Only pending orders can be canceled")

        delivery_orders_canceled_total.inc()
        logger.info("order_canceled", order_id=order.id, user_id=user.id)

        await self._publish_status(updated)
        return OrderResponse.model_validate(updated)

    async def get_order_details(self, db: AsyncSession, user: AuthUser, order_id: str) -> OrderDetailResponse:
        order = await self._get_owned_order(db, user, order_id, "You can only view your own orders")
        items = await self.orders.list_items(db, order.id)
        return OrderDetailResponse(
            order=OrderResponse.model_validate(order),
            items=[OrderItemResponse.model_validate(i) for i in items],
        )

    async def list_user_orders(self, db: AsyncSession, user: AuthUser) -> List[OrderResponse]:
        orders = await self.orders.list_by_user(db, user.id)
        return [OrderResponse.model_validate(o) for o in orders]

    async def apply_status_update(self, db: AsyncSession, order_id: str, status: OrderStatus) -> OrderResponse:
        """Fulfilment progress from the trusted operator side; not re-validated here."""
        if status not in OPERATOR_STATUSES:
            raise ValidationError(f"Status {status.value} cannot be set by the fulfilment side")

        updated = await self.orders.update_status(db, order_id, status.value)
        if updated is None:
            raise NotFound("Order not found")

        logger.info("order_status_updated", order_id=order_id, status=status.value)
        await self._publish_status(updated)
        return OrderResponse.model_validate(updated)

    async def delete_items(self, db: AsyncSession, order_id: str) -> int:
        """Explicit cleanup of an order's items; nothing calls this implicitly."""
        deleted = await self.orders.delete_items(db, order_id)
        logger.info("order_items_deleted", order_id=order_id, count=deleted)
        return deleted

    async def _get_owned_order(self, db: AsyncSession, user: AuthUser, order_id: str, denial: str) -> Order:
        order = await self.orders.get_order(db, order_id)
        if not order:
            raise NotFound("Order not found")
        if order.user_id != user.id:
            raise Forbidden(denial)
        return order

    async def _publish_status(self, order: Order) -> None:
        try:
            await self.publisher.publish(order.id, order.status, order.user_id)
        except InternalError as exc:
            # The mutation already succeeded; a lost event only costs a notification.
            logger.warning(
                "order_event_publish_failed",
                order_id=order.id,
                status=order.status,
                error=exc.message,
            )

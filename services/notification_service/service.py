import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.repository import UserRepository
from services.order_service.repository import OrderRepository
from shared.errors import NotFound
from shared.messaging import NotificationChannel

from .schemas import OrderNotification

logger = structlog.get_logger(__name__)


class NotificationService:
    """
    Builds and publishes the customer-facing order status message.

    Order and user are read live, so the text reflects what is on record when
    the event is consumed rather than what was true when it was queued. A
    missing order or user fails the whole notification.
    """

    def __init__(self, orders: OrderRepository, users: UserRepository, channel: NotificationChannel):
        self.orders = orders
        self.users = users
        self.channel = channel

    async def send_order_status_notification(
        self, db: AsyncSession, order_id: str, status: str, user_id: str
    ) -> OrderNotification:
        order = await self.orders.get_order(db, order_id)
        if not order:
            raise NotFound(f"Failed to get order details: order {order_id} not found")

        user = await self.users.get_by_id(db, user_id)
        if not user:
            raise NotFound(f"Failed to get user details: user {user_id} not found")

        notification = OrderNotification(
            order_id=order.id,
            status=status,
            message=f"Your order #{order.id} has been updated to {status}",
            customer_id=user.id,
        )
        await self.channel.publish(
            subject=f"Order Status Update: {status}",
            message=notification.model_dump_json(by_alias=True),
            attributes={"OrderId": order.id, "Status": status},
        )
        logger.info("notification_published", order_id=order.id, status=status)
        return notification

from shared.schemas import CamelModel


class OrderStatusEvent(CamelModel):
    """Queue message: {orderId, status, userId}."""
    order_id: str
    status: str
    user_id: str


class OrderNotification(CamelModel):
    """Payload published on the notification channel."""
    order_id: str
    status: str
    message: str
    customer_id: str

import structlog

from shared.errors import InternalError
from shared.messaging import OrderQueue
from shared.observability.metrics import delivery_order_events_published_total

from .schemas import OrderStatusEvent

logger = structlog.get_logger(__name__)


class OrderEventPublisher:
    """Sends order-status events to the queue. Failures are raised, never hidden."""

    def __init__(self, queue: OrderQueue):
        self.queue = queue

    async def publish(self, order_id: str, status: str, user_id: str) -> None:
        event = OrderStatusEvent(order_id=order_id, status=status, user_id=user_id)
        try:
            await self.queue.send(event.model_dump_json(by_alias=True))
        except Exception as exc:
            delivery_order_events_published_total.labels(outcome="failed").inc()
            raise InternalError(f"Failed to send order event to queue: {exc}") from exc

        delivery_order_events_published_total.labels(outcome="success").inc()
        logger.info("order_event_published", order_id=order_id, status=status)

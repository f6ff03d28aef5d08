import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

import structlog
from pydantic import ValidationError

from shared.config.database import Database
from shared.messaging import OrderQueue, QueueMessage
from shared.observability.metrics import delivery_notifications_total

from .schemas import OrderStatusEvent
from .service import NotificationService

logger = structlog.get_logger(__name__)


@dataclass
class BatchResult:
    sent: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    dead_letter: List[str] = field(default_factory=list)
    poison: List[str] = field(default_factory=list)


class OrderEventConsumer:
    """
    Drains order-status events and forwards them to the notification channel.

    Delivery is at-least-once: a message is acked after its notification went
    out, or when it cannot be parsed at all (poison, dropped). A failed
    notification is released back to the queue for another attempt until it
    has been delivered max_attempts times, then it is dead-lettered. One
    message never stops the rest of the batch, queue errors included.
    """

    def __init__(
        self,
        queue: OrderQueue,
        notifications: NotificationService,
        database: Database,
        batch_size: int = 10,
        wait_seconds: int = 20,
        max_attempts: int = 5,
    ):
        self.queue = queue
        self.notifications = notifications
        self.database = database
        self.batch_size = batch_size
        self.wait_seconds = wait_seconds
        self.max_attempts = max_attempts

    async def process_message(self, message: QueueMessage) -> str:
        try:
            event = OrderStatusEvent.model_validate_json(message.body)
        except ValidationError as e:
            logger.error("order_event_unparseable", body=message.body, error=str(e))
            delivery_notifications_total.labels(outcome="poison").inc()
            await self._settle("ack", message)
            return "poison"

        logger.info(
            "order_event_processing",
            order_id=event.order_id,
            status=event.status,
            attempt=message.attempts,
        )
        try:
            async with self.database.session() as db:
                await self.notifications.send_order_status_notification(
                    db, event.order_id, event.status, event.user_id
                )
        except Exception as e:
            if message.attempts >= self.max_attempts:
                logger.error(
                    "notification_dead_lettered",
                    order_id=event.order_id,
                    status=event.status,
                    attempts=message.attempts,
                    error=str(e),
                )
                delivery_notifications_total.labels(outcome="dead_letter").inc()
                await self._settle("dead_letter", message)
                return "dead_letter"

            logger.error(
                "notification_failed",
                order_id=event.order_id,
                status=event.status,
                attempt=message.attempts,
                error=str(e),
            )
            delivery_notifications_total.labels(outcome="failed").inc()
            await self._settle("release", message)
            return "failed"

        delivery_notifications_total.labels(outcome="sent").inc()
        await self._settle("ack", message)
        return "sent"

    async def _settle(self, action: str, message: QueueMessage) -> None:
        # An unsettled message stays in flight and comes back once its visibility lapses.
        try:
            await getattr(self.queue, action)(message)
        except Exception as e:
            logger.error("queue_settle_failed", action=action, error=str(e))

    async def process_batch(self, messages: List[QueueMessage]) -> BatchResult:
        result = BatchResult()
        for message in messages:
            outcome = await self.process_message(message)
            getattr(result, outcome).append(message.body)
        return result

    async def poll_once(self, wait_seconds: Optional[int] = None) -> BatchResult:
        wait = self.wait_seconds if wait_seconds is None else wait_seconds
        messages = await self.queue.receive(max_messages=self.batch_size, wait_seconds=wait)
        return await self.process_batch(messages)

    async def run(self, stop: asyncio.Event) -> None:
        logger.info("consumer_started", batch_size=self.batch_size, max_attempts=self.max_attempts)
        while not stop.is_set():
            result = await self.poll_once()
            if result.failed or result.dead_letter:
                logger.warning(
                    "batch_partially_failed",
                    failed=len(result.failed),
                    dead_letter=len(result.dead_letter),
                )
        logger.info("consumer_stopped")

from typing import Tuple

from redis.asyncio import Redis

from shared.config.settings import Settings

from .channel import InMemoryNotificationChannel, NotificationChannel, RedisNotificationChannel
from .queue import InMemoryOrderQueue, OrderQueue, RedisOrderQueue


def build_messaging(settings: Settings) -> Tuple[OrderQueue, NotificationChannel]:
    """Redis in deployed environments, process-local memory for development and tests."""
    if settings.messaging_backend == "memory":
        return InMemoryOrderQueue(), InMemoryNotificationChannel()

    redis = Redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    return (
        RedisOrderQueue(redis, settings.order_queue_name, settings.queue_visibility_timeout_seconds),
        RedisNotificationChannel(redis, settings.notification_channel),
    )

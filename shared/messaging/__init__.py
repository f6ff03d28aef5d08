from .channel import (
    InMemoryNotificationChannel,
    NotificationChannel,
    PublishedNotification,
    RedisNotificationChannel,
)
from .queue import InMemoryOrderQueue, OrderQueue, QueueMessage, RedisOrderQueue
from .factory import build_messaging

__all__ = [
    "InMemoryNotificationChannel",
    "NotificationChannel",
    "PublishedNotification",
    "RedisNotificationChannel",
    "InMemoryOrderQueue",
    "OrderQueue",
    "QueueMessage",
    "RedisOrderQueue",
    "build_messaging",
]

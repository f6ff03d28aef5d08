import json
from dataclasses import dataclass, field
from typing import Dict, List, Protocol

from redis.asyncio import Redis


@dataclass(frozen=True)
class PublishedNotification:
    subject: str
    message: str
    attributes: Dict[str, str] = field(default_factory=dict)


class NotificationChannel(Protocol):
    async def publish(self, subject: str, message: str, attributes: Dict[str, str]) -> None: ...


class InMemoryNotificationChannel:
    def __init__(self):
        self.published: List[PublishedNotification] = []

    async def publish(self, subject: str, message: str, attributes: Dict[str, str]) -> None:
        self.published.append(
            PublishedNotification(subject=subject, message=message, attributes=dict(attributes))
        )


class RedisNotificationChannel:
    """Fan-out over Redis pub/sub; attributes travel in the envelope so subscribers can filter."""

    def __init__(self, redis: Redis, channel: str):
        self.redis = redis
        self.channel = channel

    async def publish(self, subject: str, message: str, attributes: Dict[str, str]) -> None:
        envelope = {"subject": subject, "message": message, "attributes": attributes}
        await self.redis.publish(self.channel, json.dumps(envelope))

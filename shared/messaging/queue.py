"""
At-least-once order-status queue.

Consumers receive a batch, then settle each message: ack() when it was handled
(or chose to drop it), release() when it should be redelivered, dead_letter()
when it has failed too often to keep retrying. Every QueueMessage carries the
number of times it has been delivered, this delivery included.
"""
import asyncio
import json
import time
import uuid
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional, Protocol, Tuple

import structlog
from redis.asyncio import Redis

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class QueueMessage:
    body: str
    receipt: str
    attempts: int = 1


class OrderQueue(Protocol):
    async def send(self, body: str) -> None: ...

    async def receive(self, max_messages: int = 10, wait_seconds: int = 0) -> List[QueueMessage]: ...

    async def ack(self, message: QueueMessage) -> None: ...

    async def release(self, message: QueueMessage) -> None: ...

    async def dead_letter(self, message: QueueMessage) -> None: ...


class InMemoryOrderQueue:
    """Process-local queue for development and tests."""

    def __init__(self):
        # (body, completed deliveries)
        self._pending: Deque[Tuple[str, int]] = deque()
        self._in_flight: Dict[str, Tuple[str, int]] = {}
        self._dead: List[str] = []
        self._available = asyncio.Event()

    async def send(self, body: str) -> None:
        self._pending.append((body, 0))
        self._available.set()

    async def receive(self, max_messages: int = 10, wait_seconds: int = 0) -> List[QueueMessage]:
        if not self._pending and wait_seconds > 0:
            self._available.clear()
            try:
                await asyncio.wait_for(self._available.wait(), timeout=wait_seconds)
            except asyncio.TimeoutError:
                return []

        batch: List[QueueMessage] = []
        while self._pending and len(batch) < max_messages:
            body, delivered = self._pending.popleft()
            receipt = uuid.uuid4().hex
            self._in_flight[receipt] = (body, delivered + 1)
            batch.append(QueueMessage(body=body, receipt=receipt, attempts=delivered + 1))
        return batch

    async def ack(self, message: QueueMessage) -> None:
        self._in_flight.pop(message.receipt, None)

    async def release(self, message: QueueMessage) -> None:
        entry = self._in_flight.pop(message.receipt, None)
        if entry is not None:
            self._pending.append(entry)
            self._available.set()

    async def dead_letter(self, message: QueueMessage) -> None:
        entry = self._in_flight.pop(message.receipt, None)
        if entry is not None:
            self._dead.append(entry[0])

    @property
    def pending(self) -> List[str]:
        return [body for body, _ in self._pending]

    @property
    def in_flight(self) -> List[str]:
        return [body for body, _ in self._in_flight.values()]

    @property
    def dead_letters(self) -> List[str]:
        return list(self._dead)


def _wrap(body: str, delivered: int = 0, message_id: Optional[str] = None) -> str:
    return json.dumps({"id": message_id or uuid.uuid4().hex, "body": body, "delivered": delivered})


def _unwrap(raw: str) -> Tuple[str, int, Optional[str]]:
    """Returns (body, completed deliveries, id). Foreign entries are taken as a fresh body."""
    try:
        envelope = json.loads(raw)
    except ValueError:
        return raw, 0, None
    if not isinstance(envelope, dict) or "body" not in envelope or "id" not in envelope:
        return raw, 0, None
    return envelope["body"], int(envelope.get("delivered", 0)), envelope["id"]


class RedisOrderQueue:
    """
    Reliable-queue pattern on Redis lists plus a visibility sorted set.

    send() pushes an envelope {id, body, delivered} on the left of `name`.
    receive() moves entries from the right of `name` into `<name>:processing`
    and records a visibility deadline for each in `<name>:inflight`. ack()
    removes the entry; release() puts it back with its delivery count bumped;
    dead_letter() parks the body on `<name>:dead`.

    Entries whose deadline passed without being settled (the consumer died)
    are moved back to `name` at the start of the next receive().
    """

    def __init__(self, redis: Redis, name: str, visibility_timeout: int = 300):
        self.redis = redis
        self.name = name
        self.processing = f"{name}:processing"
        self.inflight = f"{name}:inflight"
        self.dead = f"{name}:dead"
        self.visibility_timeout = visibility_timeout

    async def send(self, body: str) -> None:
        await self.redis.lpush(self.name, _wrap(body))

    async def receive(self, max_messages: int = 10, wait_seconds: int = 0) -> List[QueueMessage]:
        await self.reclaim_expired()

        raw_entries: List[str] = []
        if wait_seconds > 0:
            # blmove with timeout 0 would block forever, hence the branch
            first = await self.redis.blmove(self.name, self.processing, wait_seconds, "RIGHT", "LEFT")
            if first is None:
                return []
            raw_entries.append(first)

        while len(raw_entries) < max_messages:
            raw = await self.redis.lmove(self.name, self.processing, "RIGHT", "LEFT")
            if raw is None:
                break
            raw_entries.append(raw)

        if not raw_entries:
            return []

        deadline = time.time() + self.visibility_timeout
        await self.redis.zadd(self.inflight, {raw: deadline for raw in raw_entries})

        batch: List[QueueMessage] = []
        for raw in raw_entries:
            body, delivered, _ = _unwrap(raw)
            batch.append(QueueMessage(body=body, receipt=raw, attempts=delivered + 1))
        return batch

    async def ack(self, message: QueueMessage) -> None:
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.lrem(self.processing, 1, message.receipt)
            pipe.zrem(self.inflight, message.receipt)
            await pipe.execute()

    async def release(self, message: QueueMessage) -> None:
        _, delivered, message_id = _unwrap(message.receipt)
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.lrem(self.processing, 1, message.receipt)
            pipe.zrem(self.inflight, message.receipt)
            pipe.rpush(self.name, _wrap(message.body, delivered + 1, message_id))
            await pipe.execute()

    async def dead_letter(self, message: QueueMessage) -> None:
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.lrem(self.processing, 1, message.receipt)
            pipe.zrem(self.inflight, message.receipt)
            pipe.lpush(self.dead, message.body)
            await pipe.execute()

    async def reclaim_expired(self) -> int:
        """Moves unsettled entries past their visibility deadline back onto the queue."""
        expired = await self.redis.zrangebyscore(self.inflight, "-inf", time.time())
        reclaimed = 0
        for raw in expired:
            # LREM is atomic, so only one reclaiming consumer gets a 1 back.
            if await self.redis.lrem(self.processing, 1, raw):
                body, delivered, message_id = _unwrap(raw)
                await self.redis.rpush(self.name, _wrap(body, delivered + 1, message_id))
                reclaimed += 1
            await self.redis.zrem(self.inflight, raw)
        if reclaimed:
            logger.warning("queue_messages_reclaimed", queue=self.name, count=reclaimed)
        return reclaimed

"""
Per-user realtime fan-out of bookmark sync events.

Every session of a user subscribes to ``bookmarks:{user_id}`` and publishes
envelopes of the form ``{"event": "bookmark-change", "payload": <SyncEvent>}``
after the API confirms a change. Delivery is best-effort: nothing here is a
source of truth, the list endpoint is.
"""
import asyncio
import contextlib
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from pydantic import ValidationError
from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from core.redis import RedisClient
from schemas.sync_event import (
    BookmarkAdded,
    BookmarkDeleted,
    UnknownSyncEventError,
    dump_sync_event,
    parse_sync_event,
)

logger = logging.getLogger(__name__)

CHANNEL_NAMESPACE = "bookmarks"
EVENT_NAME = "bookmark-change"

MessageHandler = Callable[[str], Awaitable[None]]
EventHandler = Callable[[BookmarkAdded | BookmarkDeleted], None]


class RealtimeUnavailableError(Exception):
    """Raised when a subscription cannot be opened on the transport."""


def channel_name(user_id: str) -> str:
    """Broadcast channel carrying one user's sync events."""
    return f"{CHANNEL_NAMESPACE}:{user_id}"


class Subscription(Protocol):
    """Live subscription handle returned by a transport."""

    async def unsubscribe(self) -> None:
        """Stop delivering messages and release the transport resources."""
        ...


class RealtimeTransport(Protocol):
    """Pub/sub transport used by BookmarkChannel."""

    async def publish(self, channel: str, message: str) -> bool:
        """Publish ``message``; returns False when the broker is unreachable."""
        ...

    async def subscribe(self, channel: str, handler: MessageHandler) -> Subscription:
        """Deliver every message published on ``channel`` to ``handler``."""
        ...


class RedisSubscription:
    """Redis pub/sub subscription drained by a background task."""

    def __init__(self, pubsub: PubSub, channel: str, handler: MessageHandler) -> None:
        self._pubsub = pubsub
        self._channel = channel
        self._handler = handler
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        await self._pubsub.subscribe(self._channel)
        self._task = asyncio.create_task(self._listen())

    async def _listen(self) -> None:
        try:
            async for message in self._pubsub.listen():
                if message.get("type") != "message":
                    continue
                await self._deliver(message["data"])
        except RedisError as e:
            logger.warning("Realtime subscription lost channel=%s: %s", self._channel, e)

    async def _deliver(self, data: bytes | str) -> None:
        """Hand one message to the handler; a bad message never ends the listener."""
        try:
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            await self._handler(data)
        except UnicodeDecodeError as e:
            logger.warning("Dropped undecodable message channel=%s: %s", self._channel, e)
        except Exception:
            logger.exception("Realtime handler failed channel=%s", self._channel)

    async def unsubscribe(self) -> None:
        try:
            if self._task is not None:
                self._task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._task
                self._task = None
            await self._pubsub.unsubscribe(self._channel)
        except RedisError as e:
            logger.warning("Redis UNSUBSCRIBE failed: %s", e)
        finally:
            await self._pubsub.aclose()


class RedisRealtimeTransport:
    """RealtimeTransport backed by Redis PUBLISH/SUBSCRIBE."""

    def __init__(self, redis_client: RedisClient) -> None:
        self._redis = redis_client

    async def publish(self, channel: str, message: str) -> bool:
        return await self._redis.publish(channel, message)

    async def subscribe(self, channel: str, handler: MessageHandler) -> RedisSubscription:
        pubsub = self._redis.pubsub()
        if pubsub is None:
            raise RealtimeUnavailableError("Redis is not connected")
        subscription = RedisSubscription(pubsub, channel, handler)
        try:
            await subscription.start()
        except RedisError as e:
            await pubsub.aclose()
            raise RealtimeUnavailableError(f"Could not subscribe to {channel}") from e
        return subscription


class BookmarkChannel:
    """
    One session's view of its user's broadcast channel.

    Holds at most one subscription. Inbound envelopes are decoded into sync
    events; unknown event tags, malformed payloads and events addressed to a
    different user are rejected and logged instead of reaching the handler.
    """

    def __init__(self, transport: RealtimeTransport, user_id: str) -> None:
        self._transport = transport
        self._user_id = user_id
        self._subscription: Subscription | None = None
        self._on_event: EventHandler | None = None

    @property
    def name(self) -> str:
        return channel_name(self._user_id)

    @property
    def is_open(self) -> bool:
        return self._subscription is not None

    async def open(self, on_event: EventHandler) -> None:
        """Subscribe and route decoded events to ``on_event``."""
        if self._subscription is not None:
            raise RuntimeError(f"Channel {self.name} is already open")
        self._on_event = on_event
        self._subscription = await self._transport.subscribe(self.name, self._on_message)
        logger.info("realtime_subscribed channel=%s", self.name)

    async def close(self) -> None:
        """Release the subscription. Safe to call more than once."""
        subscription, self._subscription = self._subscription, None
        self._on_event = None
        if subscription is not None:
            await subscription.unsubscribe()
            logger.info("realtime_unsubscribed channel=%s", self.name)

    async def send(self, event: BookmarkAdded | BookmarkDeleted) -> bool:
        """
        Broadcast an event to every session on this channel.

        Fire-and-forget: returns False (and logs) if the transport could not
        take the message.
        """
        message = json.dumps({"event": EVENT_NAME, "payload": dump_sync_event(event)})
        delivered = await self._transport.publish(self.name, message)
        if not delivered:
            logger.warning("realtime_publish_dropped channel=%s type=%s", self.name, event.type)
        return delivered

    def decode(self, raw: str) -> BookmarkAdded | BookmarkDeleted | None:
        """
        Decode one raw message into a sync event for this user.

        Returns None for envelopes carrying a different event name.

        Raises:
            UnknownSyncEventError: If the payload's tag is not recognized.
            ValueError: If the message is not JSON, the payload is malformed,
                or the event belongs to another user.
        """
        envelope = json.loads(raw)
        if not isinstance(envelope, dict):
            raise ValueError("Realtime message is not an object")
        if envelope.get("event") != EVENT_NAME:
            return None
        event = parse_sync_event(envelope.get("payload"))
        if event.user_id != self._user_id:
            raise ValueError(f"Event for user {event.user_id!r} on channel {self.name}")
        return event

    async def _on_message(self, raw: str) -> None:
        try:
            event = self.decode(raw)
        except UnknownSyncEventError as e:
            logger.warning("Rejected realtime event on %s: %s", self.name, e)
            return
        except (ValidationError, ValueError) as e:
            logger.warning("Rejected malformed realtime message on %s: %s", self.name, e)
            return
        if event is None or self._on_event is None:
            return
        self._on_event(event)

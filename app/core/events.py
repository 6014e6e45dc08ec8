"""
Notification bus for fire-and-forget events between services
Handlers run in-process; events are optionally mirrored to Redis pub/sub
so that other instances can observe them.
"""
import json
import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Events exchanged between services"""
    RECIPE_VIEWED = "recipe.viewed"
    RECIPE_FIRST_RATING = "recipe.first_rating"
    RECIPE_DELETION = "recipe.deletion"


EventHandler = Callable[[Dict[str, Any]], Awaitable[None]]


class NotificationBus:
    """
    Event bus with two delivery modes.

    emit() is fire-and-forget: handlers are scheduled as tasks and the caller
    never waits for them or sees their errors.
    broadcast() awaits every handler and reports which of them failed.
    """

    def __init__(self, redis_url: Optional[str] = None):
        """
        Initialize notification bus.

        Args:
            redis_url: Redis connection URL. If None, events stay in-process.
        """
        self.redis_url = redis_url
        self.redis_client = None

        self._handlers: Dict[EventType, List[EventHandler]] = {
            event_type: [] for event_type in EventType
        }
        self._pending: Set[asyncio.Task] = set()

        logger.info(f"NotificationBus initialized with {'Redis mirror' if redis_url else 'in-process'} delivery")

    async def connect(self):
        """Connect to Redis if configured"""
        if self.redis_url:
            try:
                import redis.asyncio as redis
                self.redis_client = redis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True
                )
                await self.redis_client.ping()
                logger.info("Connected to Redis for event mirroring")
            except Exception as e:
                logger.warning(f"Failed to connect to Redis, delivering in-process only: {e}")
                self.redis_client = None

    async def disconnect(self):
        """Wait for in-flight events, then disconnect from Redis"""
        await self.drain()
        if self.redis_client:
            await self.redis_client.close()
            self.redis_client = None
            logger.info("Disconnected from Redis")

    def subscribe(self, event_type: EventType, handler: EventHandler):
        """Register a handler for an event type"""
        self._handlers[event_type].append(handler)
        logger.debug(f"Handler {_handler_name(handler)} subscribed to {event_type.value}")

    def handlers_for(self, event_type: EventType) -> List[EventHandler]:
        return list(self._handlers[event_type])

    def _get_channel_key(self, event_type: EventType) -> str:
        """Get Redis channel key for an event type"""
        return f"events:{event_type.value}"

    def emit(self, event_type: EventType, payload: Dict[str, Any]) -> None:
        """
        Emit an event without waiting for its handlers.

        Never raises. Must be called from a running event loop.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error(f"Cannot emit {event_type.value}: no running event loop")
            return

        for handler in self.handlers_for(event_type):
            self._track(loop.create_task(self._run_handler(event_type, handler, payload)))

        if self.redis_client:
            self._track(loop.create_task(self._mirror(event_type, payload)))

    async def broadcast(self, event_type: EventType, payload: Dict[str, Any]) -> List[str]:
        """
        Deliver an event and wait for every handler.

        Returns:
            Names of the handlers that failed (empty when all succeeded)
        """
        handlers = self.handlers_for(event_type)
        results = await asyncio.gather(
            *(handler(payload) for handler in handlers),
            return_exceptions=True
        )

        failed = []
        for handler, result in zip(handlers, results):
            if isinstance(result, BaseException):
                name = _handler_name(handler)
                logger.error(f"Handler {name} failed for {event_type.value}: {result}")
                failed.append(name)

        await self._mirror(event_type, payload)
        return failed

    async def drain(self):
        """Wait until every emitted event has been handled"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _track(self, task: asyncio.Task):
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _run_handler(self, event_type: EventType, handler: EventHandler, payload: Dict[str, Any]):
        try:
            await handler(payload)
        except Exception as e:
            logger.error(f"Handler {_handler_name(handler)} failed for {event_type.value}: {e}")

    async def _mirror(self, event_type: EventType, payload: Dict[str, Any]):
        if not self.redis_client:
            return
        try:
            event_json = json.dumps({"event": event_type.value, "payload": payload}, default=str)
            await self.redis_client.publish(self._get_channel_key(event_type), event_json)
            logger.debug(f"Mirrored {event_type.value} to Redis")
        except Exception as e:
            logger.warning(f"Failed to mirror {event_type.value} to Redis: {e}")


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", repr(handler))

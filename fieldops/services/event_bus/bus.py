"""
In-process event bus.

Import progress, import completion and ``client:imported`` hand-offs travel
over this bus so the import pipeline never waits on, or fails because of, a
downstream consumer.
"""
import asyncio
import logging
import uuid
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional
from datetime import datetime, timezone

logger = logging.getLogger("fieldops.eventbus")

Subscriber = Callable[[Dict[str, Any]], Awaitable[Any]]

MAX_HISTORY = 100


def _event_name(event_type) -> str:
    return getattr(event_type, "value", event_type)


class EventBus:
    """
    Publish/subscribe bus keyed by event type.

    Subscribers of one event type are awaited in subscription order. A
    subscriber that raises is logged and recorded under its id; delivery to
    the remaining subscribers continues and the publisher only sees False.
    """

    def __init__(self):
        """Initialize the event bus."""
        self._subscribers: Dict[str, Dict[str, Subscriber]] = {}
        self._lock = asyncio.Lock()
        self._initialized = False
        self._event_history: Deque[Dict[str, Any]] = deque(maxlen=MAX_HISTORY)
        self._failed_deliveries: Dict[str, Deque[Dict[str, Any]]] = {}

    async def initialize(self) -> None:
        if self._initialized:
            return

        logger.info("Initializing event bus")
        self._initialized = True

    async def shutdown(self) -> None:
        """Drop every subscription."""
        logger.info("Shutting down event bus")
        self._initialized = False

        async with self._lock:
            self._subscribers.clear()

    async def publish(self, event_type: str, data: Dict[str, Any]) -> bool:
        """
        Deliver an event to its subscribers.

        The payload is copied and stamped with ``event_type``, ``event_id``
        and a ``timestamp`` (unless it has one); the caller's dict is not
        modified.

        Args:
            event_type: Event type, e.g. ``import:progress``
            data: Event payload

        Returns:
            bool: True if every subscriber handled the event
        """
        if not self._initialized:
            await self.initialize()

        name = _event_name(event_type)

        async with self._lock:
            subscribers = list(self._subscribers.get(name, {}).items())

        if not subscribers:
            logger.debug(f"No subscribers for event: {name}")
            return True

        payload = dict(data)
        payload.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
        payload["event_type"] = name
        payload["event_id"] = str(uuid.uuid4())

        self._event_history.append({
            "event_type": name,
            "event_id": payload["event_id"],
            "tenant_id": payload.get("tenant_id"),
            "subscribers": [subscriber_id for subscriber_id, _ in subscribers],
            "timestamp": payload["timestamp"],
        })

        delivered = True
        for subscriber_id, callback in subscribers:
            try:
                await callback(payload)
            except asyncio.CancelledError:
                logger.warning(f"Subscriber {subscriber_id} was cancelled during event {name}")
                raise
            except Exception as e:
                logger.error(f"Error in subscriber {subscriber_id} for {name}: {e}", exc_info=True)
                self._record_failure(subscriber_id, name, payload["event_id"], e)
                delivered = False

        return delivered

    def _record_failure(self, subscriber_id: str, event_name: str, event_id: str, error: Exception) -> None:
        failures = self._failed_deliveries.setdefault(subscriber_id, deque(maxlen=MAX_HISTORY))
        failures.append({
            "event_type": event_name,
            "event_id": event_id,
            "error": str(error),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    async def subscribe(
        self,
        event_type: str,
        callback: Subscriber,
        subscriber_id: Optional[str] = None,
    ) -> str:
        """
        Subscribe a coroutine function to an event type.

        Subscribing again with the same id replaces the callback in place.

        Returns:
            str: Subscriber ID
        """
        if not self._initialized:
            await self.initialize()

        name = _event_name(event_type)
        if subscriber_id is None:
            subscriber_id = f"{callback.__module__}.{callback.__name__}_{uuid.uuid4().hex[:8]}"

        async with self._lock:
            subscribers = self._subscribers.setdefault(name, {})
            if subscriber_id not in subscribers:
                logger.info(f"Subscribed to {name}: {subscriber_id}")
            subscribers[subscriber_id] = callback

        return subscriber_id

    async def unsubscribe(self, event_type: str, subscriber_id: str) -> bool:
        """
        Remove a subscription.

        Returns:
            bool: True if unsubscribed, False if not found
        """
        name = _event_name(event_type)

        async with self._lock:
            subscribers = self._subscribers.get(name, {})
            if subscriber_id not in subscribers:
                return False
            del subscribers[subscriber_id]
            self._failed_deliveries.pop(subscriber_id, None)

        logger.info(f"Unsubscribed from {name}: {subscriber_id}")
        return True

    def get_subscriber_count(self, event_type: Optional[str] = None) -> int:
        if event_type:
            return len(self._subscribers.get(_event_name(event_type), {}))
        return sum(len(subscribers) for subscribers in self._subscribers.values())

    def get_event_history(self, limit: int = 10) -> List[Dict[str, Any]]:
        return list(self._event_history)[-limit:]

    def get_failed_deliveries(self, subscriber_id: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
        if subscriber_id:
            return {subscriber_id: list(self._failed_deliveries.get(subscriber_id, []))}
        return {sid: list(failures) for sid, failures in self._failed_deliveries.items()}


# Singleton instance
_event_bus = EventBus()


def get_event_bus() -> EventBus:
    """Get the singleton event bus instance."""
    return _event_bus

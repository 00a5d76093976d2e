"""Per-user real-time delivery of ledger mutation events."""

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from nutrition_ledger.domain.events import LedgerEvent

_logger = logging.getLogger(__name__)


class Broadcaster(Protocol):
    """Receives ledger events after they have been persisted."""

    async def publish(self, event: LedgerEvent) -> None:
        """Deliver an event to the user's subscribers."""


def user_topic(user_id: UUID) -> str:
    """Return the topic name for a user."""
    return f"user:{user_id}"


@dataclass
class TopicBroadcaster(Broadcaster):
    """In-process fan-out of events to per-user subscriber queues.

    Delivery is at-most-once: a subscriber whose queue is full misses the
    event, and nothing is retained for users with no subscribers.
    """

    max_queue_size: int = 100
    _topics: dict[str, list[asyncio.Queue[LedgerEvent]]] = field(
        default_factory=lambda: defaultdict(list)
    )

    def subscribe(self, user_id: UUID) -> asyncio.Queue[LedgerEvent]:
        """Register a new subscriber queue for the user's topic."""
        queue: asyncio.Queue[LedgerEvent] = asyncio.Queue(maxsize=self.max_queue_size)
        self._topics[user_topic(user_id)].append(queue)
        return queue

    def unsubscribe(self, user_id: UUID, queue: asyncio.Queue[LedgerEvent]) -> None:
        """Remove a subscriber queue; unknown queues are ignored."""
        topic = user_topic(user_id)
        subscribers = self._topics.get(topic, [])
        if queue in subscribers:
            subscribers.remove(queue)
        if not subscribers:
            self._topics.pop(topic, None)

    def subscriber_count(self, user_id: UUID) -> int:
        """Return the number of live subscribers for the user."""
        return len(self._topics.get(user_topic(user_id), []))

    async def publish(self, event: LedgerEvent) -> None:
        """Fan the event out to every subscriber of the user's topic."""
        topic = user_topic(event.user_id)
        for queue in list(self._topics.get(topic, [])):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                _logger.warning(
                    "Dropping %s event for slow subscriber on %s", event.type, topic
                )

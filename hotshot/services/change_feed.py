"""In-process change notifications for committed store writes.

Subscribers ask for one table plus equality filters on the changed row (the
``question_id=eq.<id>`` style predicate) and consume events as an async iterator.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"

_CLOSED = object()


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event: str
    record: dict[str, Any] = field(default_factory=dict)


class Subscription:
    def __init__(self, feed: "ChangeFeed", table: str, filters: dict[str, Any]):
        self.feed = feed
        self.table = table
        self.filters = filters
        self.closed = False
        self._queue: asyncio.Queue = asyncio.Queue()

    def matches(self, event: ChangeEvent) -> bool:
        if event.table != self.table:
            return False
        return all(event.record.get(key) == value for key, value in self.filters.items())

    def deliver(self, event: ChangeEvent) -> None:
        if not self.closed:
            self._queue.put_nowait(event)

    def drain(self) -> list[ChangeEvent]:
        """Pop every event already queued without waiting."""
        events = []
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is _CLOSED:
                self._queue.put_nowait(_CLOSED)
                break
            events.append(item)
        return events

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.feed.unsubscribe(self)
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self):
        return self

    async def __anext__(self) -> ChangeEvent:
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item


class ChangeFeed:
    def __init__(self):
        self._subscriptions: list[Subscription] = []

    def subscribe(self, table: str, **filters: Any) -> Subscription:
        subscription = Subscription(self, table, filters)
        self._subscriptions.append(subscription)
        logger.debug("Subscribed table=%s filters=%s", table, filters)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def publish(self, event: ChangeEvent) -> None:
        for subscription in list(self._subscriptions):
            if subscription.matches(event):
                subscription.deliver(event)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

"""In-process realtime change feed.

Route handlers publish row-level INSERT/UPDATE events after they commit;
SSE endpoints subscribe with a table, an event filter and optional column
equality filters (``{"ticket_id": 7}``). Publishing is safe from the sync
handlers FastAPI runs in its thread pool: each subscription remembers its
event loop and events are handed over with ``call_soon_threadsafe``.

There is no replay, ordering or at-least-once guarantee. Consumers must
tolerate duplicates and gaps.
"""
import asyncio
import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from resolvix.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class ChangeEvent:
    id: str
    table: str
    event_type: str  # INSERT | UPDATE
    record: dict
    timestamp: str

    def to_sse(self) -> str:
        lines = [
            f"id: {self.id}",
            f"event: {self.table}.{self.event_type.lower()}",
            f"data: {json.dumps(self.record, default=str)}",
        ]
        return "\n".join(lines) + "\n\n"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(eq=False)
class Subscription:
    table: str
    event_types: frozenset[str]
    filters: dict[str, Any]
    queue: asyncio.Queue
    loop: asyncio.AbstractEventLoop
    closed: bool = field(default=False)

    def matches(self, event: ChangeEvent) -> bool:
        if event.table != self.table or event.event_type not in self.event_types:
            return False
        return all(event.record.get(k) == v for k, v in self.filters.items())

    async def get(self, timeout: Optional[float] = None) -> Optional[ChangeEvent]:
        """Next matching event, or None on timeout."""
        try:
            return await asyncio.wait_for(self.queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None


class ChangeFeed:
    def __init__(self, max_queue_size: int = 256):
        self._max_queue_size = max_queue_size
        self._subscriptions: set[Subscription] = set()
        self._lock = threading.Lock()

    def subscribe(
        self,
        table: str,
        event_types: tuple[str, ...] = ("INSERT",),
        **filters: Any,
    ) -> Subscription:
        """Register a subscription. Must be called from inside a running event loop."""
        sub = Subscription(
            table=table,
            event_types=frozenset(e.upper() for e in event_types),
            filters=filters,
            queue=asyncio.Queue(maxsize=self._max_queue_size),
            loop=asyncio.get_running_loop(),
        )
        with self._lock:
            self._subscriptions.add(sub)
        logger.debug("Subscribed to %s %s filters=%s", table, sorted(sub.event_types), filters)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        sub.closed = True
        with self._lock:
            self._subscriptions.discard(sub)

    def publish(self, table: str, event_type: str, record: dict) -> ChangeEvent:
        event = ChangeEvent(
            id=str(uuid4()),
            table=table,
            event_type=event_type.upper(),
            record=record,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        with self._lock:
            targets = [s for s in self._subscriptions if s.matches(event)]
        for sub in targets:
            try:
                sub.loop.call_soon_threadsafe(self._deliver, sub, event)
            except RuntimeError:
                # Subscriber's loop is gone (client disconnected mid-shutdown).
                self.unsubscribe(sub)
        return event

    def _deliver(self, sub: Subscription, event: ChangeEvent) -> None:
        if sub.closed:
            return
        try:
            sub.queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning("Change feed queue full for %s subscriber, dropping it", sub.table)
            self.unsubscribe(sub)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)


_change_feed: Optional[ChangeFeed] = None


def get_change_feed() -> ChangeFeed:
    global _change_feed
    if _change_feed is None:
        _change_feed = ChangeFeed(max_queue_size=settings.CHANGE_FEED_QUEUE_SIZE)
    return _change_feed


async def sse_stream(sub: Subscription, heartbeat_seconds: float = 15.0):
    """Yield SSE frames for a subscription until the client goes away."""
    feed = get_change_feed()
    try:
        yield ": connected\n\n"
        while not sub.closed:
            event = await sub.get(timeout=heartbeat_seconds)
            if event is None:
                yield ": heartbeat\n\n"
                continue
            yield event.to_sse()
    finally:
        feed.unsubscribe(sub)

"""StreamManager — per-channel event buffering and SSE subscriber management."""

from __future__ import annotations

import asyncio
from collections import defaultdict, deque
from typing import Any, AsyncGenerator

from .events import DEFAULT_CHANNEL, LedgerEventType, SSEEvent


class StreamManager:
    """Broadcasts ledger events to subscribed read-only consumers.

    Each channel has:
    - A list of subscriber queues (asyncio.Queue instances)
    - A bounded buffer of recent events for replay on reconnect
    - A monotonically increasing sequence counter
    """

    def __init__(self, buffer_size: int = 500) -> None:
        self._subscribers: dict[str, list[asyncio.Queue[SSEEvent]]] = defaultdict(list)
        self._buffers: dict[str, deque[SSEEvent]] = defaultdict(lambda: deque(maxlen=buffer_size))
        self._sequences: dict[str, int] = defaultdict(int)

    def subscriber_count(self, channel: str = DEFAULT_CHANNEL) -> int:
        return len(self._subscribers.get(channel, []))

    async def subscribe(self, channel: str = DEFAULT_CHANNEL) -> asyncio.Queue[SSEEvent]:
        """Create and return a new subscriber queue for a channel."""
        queue: asyncio.Queue[SSEEvent] = asyncio.Queue()
        self._subscribers[channel].append(queue)
        return queue

    async def unsubscribe(self, channel: str, queue: asyncio.Queue[SSEEvent]) -> None:
        """Remove a subscriber queue from a channel."""
        subs = self._subscribers.get(channel, [])
        if queue in subs:
            subs.remove(queue)

    async def emit(self, channel: str, event: SSEEvent) -> None:
        """Broadcast an event to all subscribers and buffer it for replay."""
        self._buffers[channel].append(event)
        for queue in self._subscribers[channel]:
            await queue.put(event)

    async def publish(
        self,
        event_type: LedgerEventType,
        data: dict[str, Any],
        channel: str = DEFAULT_CHANNEL,
    ) -> SSEEvent:
        """Build the next event in the channel's sequence and emit it."""
        self._sequences[channel] += 1
        event = SSEEvent(
            event_type=event_type,
            data=data,
            sequence_id=self._sequences[channel],
            channel=channel,
        )
        await self.emit(channel, event)
        return event

    def buffered(self, channel: str = DEFAULT_CHANNEL) -> list[SSEEvent]:
        return list(self._buffers.get(channel, ()))

    async def event_generator(
        self, channel: str = DEFAULT_CHANNEL, last_event_id: int | None = None
    ) -> AsyncGenerator[str, None]:
        """Async generator yielding SSE strings for a channel.

        If last_event_id is provided, replays buffered events with
        sequence_id > last_event_id before switching to live events.
        """
        queue = await self.subscribe(channel)
        try:
            # SSE comment as connection heartbeat (ignored by browsers)
            yield ": connected\n\n"

            # Replay missed events from buffer
            if last_event_id is not None:
                for event in self.buffered(channel):
                    if event.sequence_id > last_event_id:
                        yield event.to_sse_string()

            # Stream live events
            while True:
                event = await queue.get()
                yield event.to_sse_string()
        finally:
            await self.unsubscribe(channel, queue)

"""
In-process change feed for the support realtime channels.

Subscribers get an `asyncio.Queue` per topic; `publish` fans an event out to
every queue of that topic. Topics used by the app:

- ``support``: any support chat opened, closed or written to (admin inbox)
- ``support:<chat_id>``: new messages of one support chat

Publishers are the sync route handlers, which FastAPI runs in its threadpool,
so each queue remembers the event loop of its subscriber and events are handed
over with `call_soon_threadsafe`.

Single process only; events are not persisted and a subscriber that is not
connected when an event is published never sees it.
"""

import asyncio
import logging
import threading

from fastapi.encoders import jsonable_encoder

logger = logging.getLogger("uvicorn")

SUPPORT_TOPIC = "support"


def support_chat_topic(chat_id) -> str:
    return f"{SUPPORT_TOPIC}:{chat_id}"


class ChangeFeed:

    def __init__(self):
        self._subscribers: dict[str, dict[asyncio.Queue, asyncio.AbstractEventLoop]] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: str) -> asyncio.Queue:
        """Register a queue for `topic`. Must be called from the subscriber's event loop."""
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        with self._lock:
            self._subscribers.setdefault(topic, {})[queue] = loop
        return queue

    def unsubscribe(self, topic: str, queue: asyncio.Queue) -> None:
        with self._lock:
            queues = self._subscribers.get(topic)
            if not queues:
                return
            queues.pop(queue, None)
            if not queues:
                del self._subscribers[topic]

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscribers.get(topic, ()))

    def publish(self, topic: str, event: dict) -> int:
        """
        Deliver `event` (made JSON-safe) to every subscriber of `topic`.

        Safe to call from any thread.

        Returns
        -------
        int
            Number of queues the event was handed to.
        """
        payload = jsonable_encoder(event)
        with self._lock:
            targets = list(self._subscribers.get(topic, {}).items())
        delivered = 0
        for queue, loop in targets:
            try:
                loop.call_soon_threadsafe(queue.put_nowait, payload)
                delivered += 1
            except RuntimeError as e:
                # Subscriber loop already closed; its queue goes with it.
                logger.warning(f"Dropping subscriber of {topic}: {e}")
                self.unsubscribe(topic, queue)
        return delivered


change_feed = ChangeFeed()
"""Process-wide feed shared by the routers and the websocket endpoints."""

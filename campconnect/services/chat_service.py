"""
Chat Service - direct messages and their live subscription.

A thread is the message history between exactly two users. Its id is the
two user ids sorted and joined with "_", so both sides resolve the same
thread and no pair ever gets two.

Messages live in one collection keyed by thread_id:
{
    "thread_id": "a1_b2",
    "sender_id": "a1",
    "sender_name": "Asha Rao",
    "message": "hi",
    "timestamp": datetime
}

LIVE UPDATES:
- MessageHub is the process-wide publisher. ChatService.send publishes every
  stored message to it.
- MessageSubscription is the handle one socket owns. It yields the whole
  thread, sorted by timestamp, every time something changes, and must be
  cancelled when the socket goes away.
"""

import asyncio
import logging
import threading
from typing import Dict, List, Optional, Set, Callable

from pymongo import ASCENDING
from pymongo.collection import Collection

from campconnect.core.errors import ValidationError
from campconnect.db.mongodb import get_collection, backend_call, serialize_doc, utcnow, COLLECTIONS
from campconnect.schemas.schemas import ChatMessage, ThreadSnapshot

logger = logging.getLogger(__name__)


def thread_id(user_a: str, user_b: str) -> str:
    """Order-independent id of the thread between two users."""
    return "_".join(sorted([user_a, user_b]))


def _order_key(message: ChatMessage):
    return (message.timestamp, message.id)


# ============================================================
# SUBSCRIPTIONS
# ============================================================

class MessageSubscription:
    """
    Live view of one thread, owned by exactly one consumer.

    Iterate it to receive ThreadSnapshots: first the initial history, then
    one snapshot per new message. Messages are kept sorted by timestamp no
    matter what order they are pushed in. Iteration ends after cancel().

    Usage:
        subscription = hub.subscribe(thread_id, loader)
        try:
            async for snapshot in subscription:
                ...
        finally:
            subscription.cancel()
    """

    def __init__(self, hub: "MessageHub", thread: str):
        self.thread_id = thread
        self._hub = hub
        self._loop = asyncio.get_running_loop()
        self._queue: asyncio.Queue = asyncio.Queue()
        self._messages: Dict[str, ChatMessage] = {}
        self._initial: Optional[List[ChatMessage]] = None
        self.cancelled = False

    @property
    def messages(self) -> List[ChatMessage]:
        return sorted(self._messages.values(), key=_order_key)

    def snapshot(self) -> ThreadSnapshot:
        messages = self.messages
        return ThreadSnapshot(
            thread_id=self.thread_id,
            messages=messages,
            latest_message_id=messages[-1].id if messages else None,
        )

    def load(self, history: List[ChatMessage]) -> None:
        """Seed with the stored history. Queued as the first snapshot."""
        self._initial = history
        self._loop.call_soon_threadsafe(self._queue.put_nowait, None)

    def push(self, message: ChatMessage) -> None:
        """Deliver a new message. Safe to call from any thread."""
        if not self.cancelled:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, message)

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self._hub.unsubscribe(self)
        # Wake a consumer blocked on the queue so iteration can end
        self._loop.call_soon_threadsafe(self._queue.put_nowait, _CLOSED)
        logger.debug(f"Subscription to {self.thread_id} cancelled")

    def __aiter__(self):
        return self

    async def __anext__(self) -> ThreadSnapshot:
        while True:
            if self.cancelled:
                raise StopAsyncIteration

            item = await self._queue.get()
            if item is _CLOSED:
                raise StopAsyncIteration

            if item is None:
                for message in self._initial or []:
                    self._messages.setdefault(message.id, message)
                self._initial = None
                return self.snapshot()

            if item.id in self._messages:
                continue
            self._messages[item.id] = item
            return self.snapshot()


_CLOSED = object()


class MessageHub:
    """Routes stored messages to the subscriptions of their thread."""

    def __init__(self):
        self._subscriptions: Dict[str, Set[MessageSubscription]] = {}
        self._lock = threading.Lock()

    def subscribe(self, thread: str, loader: Callable[[], List[ChatMessage]]) -> MessageSubscription:
        """
        Open a subscription, then load history.

        Registering before the load means a message stored in between is
        delivered by push as well as by the load; the subscription keeps one.
        """
        subscription = MessageSubscription(self, thread)
        with self._lock:
            self._subscriptions.setdefault(thread, set()).add(subscription)
        logger.debug(f"Subscription to {thread} opened")

        try:
            subscription.load(loader())
        except Exception:
            subscription.cancel()
            raise
        return subscription

    def unsubscribe(self, subscription: MessageSubscription) -> None:
        with self._lock:
            subscribers = self._subscriptions.get(subscription.thread_id)
            if subscribers is None:
                return
            subscribers.discard(subscription)
            if not subscribers:
                del self._subscriptions[subscription.thread_id]

    def publish(self, thread: str, message: ChatMessage) -> None:
        with self._lock:
            subscribers = list(self._subscriptions.get(thread, ()))
        for subscription in subscribers:
            subscription.push(message)

    def subscriber_count(self, thread: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(thread, ()))


# Singleton instance
_message_hub: MessageHub = None


def get_message_hub() -> MessageHub:
    """Get or create the message hub (singleton pattern)"""
    global _message_hub
    if _message_hub is None:
        _message_hub = MessageHub()
    return _message_hub


# ============================================================
# SERVICE
# ============================================================

class ChatService:

    def __init__(self, hub: Optional[MessageHub] = None):
        self.collection: Collection = get_collection(COLLECTIONS["messages"])
        self.hub = hub or get_message_hub()

    def history(self, user_id: str, peer_id: str) -> List[ChatMessage]:
        """The thread's messages, oldest first."""
        thread = thread_id(user_id, peer_id)
        with backend_call("fetch messages"):
            docs = list(
                self.collection.find({"thread_id": thread}).sort([("timestamp", ASCENDING), ("_id", ASCENDING)])
            )
        return [self._to_message(doc) for doc in docs]

    def send(self, sender: dict, peer_id: str, text: str) -> ChatMessage:
        """
        Append a message to the thread and publish it.

        Args:
            sender: sender's profile (needs `id` and `name`)
            peer_id: the other participant
            text: message body, stored as typed
        """
        if not text.strip():
            raise ValidationError("Message is required", "Please type a message", field="message")

        doc = {
            "thread_id": thread_id(sender["id"], peer_id),
            "sender_id": sender["id"],
            "sender_name": sender["name"],
            "message": text,
            "timestamp": utcnow(),
        }
        with backend_call("send message"):
            self.collection.insert_one(doc)

        message = self._to_message(doc)
        self.hub.publish(doc["thread_id"], message)
        return message

    def subscribe(self, user_id: str, peer_id: str) -> MessageSubscription:
        """Live subscription to the thread. Call from inside the event loop."""
        return self.hub.subscribe(
            thread_id(user_id, peer_id),
            lambda: self.history(user_id, peer_id),
        )

    @staticmethod
    def _to_message(doc: dict) -> ChatMessage:
        return ChatMessage(**serialize_doc(doc))

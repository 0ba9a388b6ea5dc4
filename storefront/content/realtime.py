"""Change feed: a payload-free "something changed" signal per collection.

Every successful write on a collection notifies that collection's
subscribers. Callbacks receive no arguments; they are expected to re-fetch
whatever they display. Subscriptions are independent, so the same page can
hold several and cancel each one on its own.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], None]


@dataclass(frozen=True)
class Subscription:
    """Handle returned by ChangeFeed.subscribe; pass it back to unsubscribe."""

    collection: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


class ChangeFeed:
    def __init__(self):
        self._subscribers: dict[str, dict[str, ChangeCallback]] = {}

    def subscribe(self, collection: str, on_change: ChangeCallback) -> Subscription:
        subscription = Subscription(collection=collection)
        self._subscribers.setdefault(collection, {})[subscription.id] = on_change
        logger.debug(f"Subscribed {subscription.id} to {collection}")
        return subscription

    def unsubscribe(self, subscription: Subscription | None) -> None:
        if subscription is None:
            return
        callbacks = self._subscribers.get(subscription.collection)
        if callbacks and callbacks.pop(subscription.id, None) is not None:
            logger.debug(f"Unsubscribed {subscription.id} from {subscription.collection}")
            if not callbacks:
                del self._subscribers[subscription.collection]

    def publish(self, collection: str) -> int:
        """Notify every subscriber of `collection`. Returns how many were called."""
        callbacks = list(self._subscribers.get(collection, {}).values())
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.warning(f"Change callback for {collection} failed: {e}")
        if callbacks:
            logger.debug(f"Notified {len(callbacks)} subscriber(s) of {collection} change")
        return len(callbacks)

    def subscriber_count(self, collection: str | None = None) -> int:
        if collection is not None:
            return len(self._subscribers.get(collection, {}))
        return sum(len(c) for c in self._subscribers.values())

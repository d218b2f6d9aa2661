"""Typed publish/subscribe bus for feed window updates."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from marketplace_feed.domain.entities import FeedUpdate

logger = logging.getLogger(__name__)

FeedListener = Callable[[FeedUpdate], None]


class FeedSubscription:
    """Owned handle of a bus subscriber; call :meth:`unsubscribe` when done."""

    def __init__(self, bus: "FeedEventBus", listener: FeedListener) -> None:
        self._bus = bus
        self.listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._bus._remove(self)


class FeedEventBus:
    """Deliver :class:`FeedUpdate` payloads to every active subscriber."""

    def __init__(self) -> None:
        self._subscriptions: list[FeedSubscription] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: FeedListener) -> FeedSubscription:
        subscription = FeedSubscription(self, listener)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def publish(self, update: FeedUpdate) -> None:
        """Call every subscriber with ``update``; a failing one does not stop the rest."""

        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            try:
                subscription.listener(update)
            except Exception:
                logger.exception(
                    "Feed subscriber failed handling '%s' for viewer %s",
                    update.reason,
                    update.viewer_id,
                )

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def _remove(self, subscription: FeedSubscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)


feed_event_bus = FeedEventBus()


__all__ = ["FeedEventBus", "FeedListener", "FeedSubscription", "feed_event_bus"]

"""Utility helpers to push feed windows to websocket subscribers."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Mapping

from anyio import from_thread

from marketplace_feed.domain.entities import FeedItem, FeedUpdate, FeedWindow

from .feed_events import FeedEventBus, FeedSubscription, feed_event_bus
from .manager import FeedConnectionManager, channel_for, feed_connection_manager


class FeedUpdatePublisher:
    """Forward bus updates to the websocket channel of the affected viewer."""

    def __init__(self, manager: FeedConnectionManager, bus: FeedEventBus) -> None:
        self._manager = manager
        self._bus = bus
        self._subscription: FeedSubscription | None = None

    def start(self) -> None:
        if self._subscription is None:
            self._subscription = self._bus.subscribe(self.dispatch)

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def dispatch(self, update: FeedUpdate) -> None:
        """Schedule ``update`` to be delivered to its viewer's open sockets."""

        channel = channel_for(update.kind.value, update.viewer_id)
        if not self._manager.connection_count(channel):
            return

        message = {
            "type": "feed",
            "reason": update.reason,
            "data": serialize_feed_window(update.window),
        }
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            from_thread.run(self._manager.send_to_channel, channel, message)
        else:
            loop.create_task(self._manager.send_to_channel(channel, message))


def serialize_feed_window(window: FeedWindow) -> dict[str, Any]:
    """Return a JSON-serializable representation of ``window``."""

    return {
        "events": [serialize_feed_item(item) for item in window.events],
        "total_count": window.total_count,
        "display_count": window.display_count,
        "has_more": window.has_more,
        "unread_count": window.unread_count,
        "loading": window.loading,
        "loading_more": window.loading_more,
        "error": window.error,
        "degraded_sources": list(window.degraded_sources),
        "live": window.live,
        "refreshed_at": _iso_or_none(window.refreshed_at),
    }


def serialize_feed_item(item: FeedItem) -> dict[str, Any]:
    event = item.event
    return {
        "id": event.id,
        "category": event.category.value,
        "kind": event.kind,
        "title": event.title,
        "description": event.description,
        "timestamp": event.timestamp.isoformat(),
        "priority": event.priority.value,
        "avatar_url": event.avatar_url,
        "read": item.read,
        "source": _plain(event.source_ref),
    }


def _plain(value: Any) -> Any:
    """Convert mappings, sequences and datetimes nested in ``value`` to JSON types."""

    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_plain(item) for item in value]
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _iso_or_none(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


feed_update_publisher = FeedUpdatePublisher(feed_connection_manager, feed_event_bus)


__all__ = [
    "FeedUpdatePublisher",
    "feed_update_publisher",
    "serialize_feed_item",
    "serialize_feed_window",
]

"""Realtime change and feed notification helpers for the infrastructure layer."""

from .change_feed import (
    ChangeFeedBroker,
    ChangeSubscription,
    change_feed_broker,
    install_change_hooks,
)
from .feed_events import FeedEventBus, FeedSubscription, feed_event_bus
from .manager import FeedConnectionManager, channel_for, feed_connection_manager
from .publisher import (
    FeedUpdatePublisher,
    feed_update_publisher,
    serialize_feed_item,
    serialize_feed_window,
)

__all__ = [
    "ChangeFeedBroker",
    "ChangeSubscription",
    "change_feed_broker",
    "install_change_hooks",
    "FeedEventBus",
    "FeedSubscription",
    "feed_event_bus",
    "FeedConnectionManager",
    "channel_for",
    "feed_connection_manager",
    "FeedUpdatePublisher",
    "feed_update_publisher",
    "serialize_feed_item",
    "serialize_feed_window",
]

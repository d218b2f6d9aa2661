"""Domain entities exposed by the application."""

from .activity_event import (
    ActivityCategory,
    ActivityEvent,
    FeedItem,
    Priority,
    build_event_id,
    freeze_record,
)
from .change_event import CHANGE_INSERT, CHANGE_UPDATE, ChangeEvent
from .feed_window import FeedKind, FeedUpdate, FeedWindow

__all__ = [
    "ActivityCategory",
    "ActivityEvent",
    "FeedItem",
    "Priority",
    "build_event_id",
    "freeze_record",
    "CHANGE_INSERT",
    "CHANGE_UPDATE",
    "ChangeEvent",
    "FeedKind",
    "FeedUpdate",
    "FeedWindow",
]

"""Domain entities describing what a feed consumer sees."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .activity_event import FeedItem


class FeedKind(str, Enum):
    """The two feeds assembled by the engine."""

    ACTIVITIES = "activities"
    NOTIFICATIONS = "notifications"


@dataclass(frozen=True)
class FeedWindow:
    """Snapshot of the visible prefix of a feed.

    ``total_count`` and ``unread_count`` describe the whole feed, not only
    ``events``.
    """

    events: list[FeedItem] = field(default_factory=list)
    total_count: int = 0
    display_count: int = 0
    has_more: bool = False
    unread_count: int = 0
    loading: bool = False
    loading_more: bool = False
    error: str | None = None
    degraded_sources: list[str] = field(default_factory=list)
    live: bool = False
    refreshed_at: datetime | None = None


@dataclass(frozen=True)
class FeedUpdate:
    """Payload published on the feed event bus after every window change."""

    viewer_id: str
    kind: FeedKind
    window: FeedWindow
    reason: str


__all__ = ["FeedKind", "FeedUpdate", "FeedWindow"]

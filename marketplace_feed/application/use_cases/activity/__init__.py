"""Use cases assembling the aggregated activity and notification feeds."""

from .live_updates import LiveUpdateListener, RefreshCoalescer
from .merge import merge_events
from .normalizer import NORMALIZERS, normalize_records
from .read_state import LocalReadTier, ReadStateTracker, ServerReadTier
from .registry import (
    FeedServiceFactory,
    FeedSessionRegistry,
    admin_authorizer,
    build_read_state_store,
)
from .service import ActivityFeedService
from .windowing import FeedWindowController

__all__ = [
    "ActivityFeedService",
    "FeedServiceFactory",
    "FeedSessionRegistry",
    "FeedWindowController",
    "LiveUpdateListener",
    "LocalReadTier",
    "NORMALIZERS",
    "ReadStateTracker",
    "RefreshCoalescer",
    "ServerReadTier",
    "admin_authorizer",
    "build_read_state_store",
    "merge_events",
    "normalize_records",
]

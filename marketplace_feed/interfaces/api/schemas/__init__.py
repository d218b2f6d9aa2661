from .feed import ActivityEventRead, FeedWindowRead, MarkReadRequest, UnreadCountRead

__all__ = [
    "ActivityEventRead",
    "FeedWindowRead",
    "MarkReadRequest",
    "UnreadCountRead",
]

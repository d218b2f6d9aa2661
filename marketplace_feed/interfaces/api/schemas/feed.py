"""Pydantic models describing feed windows and acknowledgement payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ActivityEventRead(BaseModel):
    """One event of a feed window, with the viewer's read flag overlaid."""

    id: str = Field(..., description="Stable event identifier")
    category: str = Field(..., description="Source category of the event")
    kind: str = Field(..., description="Fine-grained event type")
    title: str
    description: str
    timestamp: datetime = Field(..., description="Moment the event occurred")
    priority: str
    avatar_url: str | None = None
    read: bool = False
    source: dict[str, Any] = Field(
        default_factory=dict,
        description="Snapshot of the source record the event was built from",
    )


class FeedWindowRead(BaseModel):
    """Visible prefix of a feed plus its loading state."""

    model_config = ConfigDict(from_attributes=True)

    events: list[ActivityEventRead] = Field(default_factory=list)
    total_count: int = 0
    display_count: int = 0
    has_more: bool = False
    unread_count: int = 0
    loading: bool = False
    loading_more: bool = False
    error: str | None = None
    degraded_sources: list[str] = Field(default_factory=list)
    live: bool = False
    refreshed_at: datetime | None = None


class MarkReadRequest(BaseModel):
    """Payload used to acknowledge a batch of feed events."""

    ids: list[str] = Field(..., min_length=1, description="Event identifiers")

    def unique_ids(self) -> list[str]:
        """Return the non-blank identifiers without duplicates, preserving order."""

        unique: list[str] = []
        seen: set[str] = set()
        for event_id in self.ids:
            event_id = event_id.strip()
            if not event_id or event_id in seen:
                continue
            seen.add(event_id)
            unique.append(event_id)
        return unique


class UnreadCountRead(BaseModel):
    unread_count: int


__all__ = ["ActivityEventRead", "FeedWindowRead", "MarkReadRequest", "UnreadCountRead"]

"""Domain entity describing an item of the aggregated activity feed."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class ActivityCategory(str, Enum):
    """Fixed set of domain-event categories surfaced in the feed."""

    REGISTRATION = "registration"
    BOOKING_STATE = "booking_state"
    LISTING_STATE = "listing_state"
    REVIEW = "review"
    PAYMENT = "payment"
    SUPPORT_TICKET = "support_ticket"
    BOOKING_MODIFICATION = "booking_modification"
    CONVERSATION = "conversation"
    FAVORITE = "favorite"
    ANNOUNCEMENT = "announcement"
    MODERATION = "moderation"
    USER_STATUS_CHANGE = "user_status_change"
    PAYOUT_REQUEST = "payout_request"
    REFUND = "refund"


class Priority(str, Enum):
    """Business priority assigned to an event at normalization time."""

    LOW = "low"
    NORMAL = "normal"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


def build_event_id(
    category: ActivityCategory | str, record_id: Any, *discriminators: Any
) -> str:
    """Return the deterministic id of an event.

    ``discriminators`` are the volatile fields (status, update time, ...) that
    make successive states of the same record distinct events. Empty values
    are skipped so a missing discriminator does not produce a trailing
    separator.
    """

    if record_id is None or record_id == "":
        raise ValueError("record_id is required to build an event id")

    prefix = category.value if isinstance(category, ActivityCategory) else str(category)
    parts = [prefix, _id_part(record_id)]
    parts.extend(_id_part(value) for value in discriminators if value not in (None, ""))
    return "_".join(parts)


def _id_part(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def freeze_record(record: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return a read-only deep snapshot of ``record``."""

    return MappingProxyType(copy.deepcopy(dict(record)))


@dataclass(frozen=True)
class ActivityEvent:
    """Canonical, source-agnostic representation of a feed event.

    Events are projections rebuilt on every aggregation pass; they carry no
    read flag (see :class:`FeedItem`).
    """

    id: str
    category: ActivityCategory
    kind: str
    title: str
    description: str
    timestamp: datetime
    priority: Priority = Priority.NORMAL
    source_ref: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    avatar_url: str | None = None


@dataclass(frozen=True)
class FeedItem:
    """An :class:`ActivityEvent` overlaid with the viewer's read state."""

    event: ActivityEvent
    read: bool = False


__all__ = [
    "ActivityCategory",
    "ActivityEvent",
    "FeedItem",
    "Priority",
    "build_event_id",
    "freeze_record",
]

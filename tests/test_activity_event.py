"""Tests for the canonical event entity and its identifiers."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone

import pytest

from marketplace_feed.domain.entities import (
    ActivityCategory,
    ActivityEvent,
    FeedItem,
    Priority,
    build_event_id,
    freeze_record,
)


def test_build_event_id_joins_category_record_and_discriminators():
    updated = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

    event_id = build_event_id(ActivityCategory.LISTING_STATE, "l1", "active", updated)

    assert event_id == f"listing_state_l1_active_{updated.isoformat()}"


def test_build_event_id_skips_missing_discriminators():
    assert build_event_id(ActivityCategory.PAYMENT, "p1", None, "") == "payment_p1"
    assert build_event_id("custom", 7, Priority.HIGH) == "custom_7_high"


@pytest.mark.parametrize("record_id", [None, ""])
def test_build_event_id_requires_a_record_id(record_id):
    with pytest.raises(ValueError):
        build_event_id(ActivityCategory.REVIEW, record_id)


def test_successive_states_of_a_record_get_distinct_ids():
    pending = build_event_id(ActivityCategory.SUPPORT_TICKET, "t1", "open")
    resolved = build_event_id(ActivityCategory.SUPPORT_TICKET, "t1", "resolved")

    assert pending != resolved


def test_freeze_record_returns_read_only_deep_copy():
    original = {"id": "b1", "listing": {"name": "Loft"}}

    frozen = freeze_record(original)
    original["listing"]["name"] = "Changed"

    assert frozen["listing"]["name"] == "Loft"
    with pytest.raises(TypeError):
        frozen["id"] = "other"  # type: ignore[index]


def test_activity_event_and_feed_item_are_immutable():
    event = ActivityEvent(
        id="review_r1",
        category=ActivityCategory.REVIEW,
        kind="review_created",
        title="New Review Submitted",
        description="Sam left a 5-star review",
        timestamp=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )
    item = FeedItem(event=event, read=True)

    assert event.priority is Priority.NORMAL
    assert dict(event.source_ref) == {}
    with pytest.raises(dataclasses.FrozenInstanceError):
        event.title = "changed"  # type: ignore[misc]
    with pytest.raises(dataclasses.FrozenInstanceError):
        item.read = False  # type: ignore[misc]

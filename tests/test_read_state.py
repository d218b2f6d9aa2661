"""Tests for the two-tier read-state tracker and its durable store."""

from __future__ import annotations

import json

import pytest

from conftest import BASE_TIME, make_event

from marketplace_feed.application.use_cases.activity import (
    LocalReadTier,
    ReadStateTracker,
    ServerReadTier,
)
from marketplace_feed.domain.entities import ActivityCategory, ActivityEvent, freeze_record
from marketplace_feed.infrastructure.models import NotificationModel, ProfileModel
from marketplace_feed.infrastructure.read_state_store import (
    InMemoryReadStateStore,
    JsonFileReadStateStore,
)


class CountingStore(InMemoryReadStateStore):
    def __init__(self) -> None:
        super().__init__()
        self.puts = 0

    def put(self, viewer_id, event_ids):
        self.puts += 1
        super().put(viewer_id, event_ids)


def _notification_event(row_id: str, *, read: bool = False) -> ActivityEvent:
    return ActivityEvent(
        id=row_id,
        category=ActivityCategory.PAYMENT,
        kind="notification_payment",
        title="Payment",
        description="Payment failed",
        timestamp=BASE_TIME,
        source_ref=freeze_record({"id": row_id, "read": read}),
    )


def _tracker(session_factory, store, viewer_id="viewer-1") -> ReadStateTracker:
    return ReadStateTracker(viewer_id, ServerReadTier(session_factory), LocalReadTier(store))


def test_server_ids_are_recognised_structurally():
    assert ReadStateTracker.is_server_id("0f8fad5b-d9cb-469f-a165-70867728950e") is True
    assert ReadStateTracker.is_server_id("booking_state_b1_pending") is False
    assert ReadStateTracker.is_server_id("0f8fad5b") is False


def test_marking_a_synthesized_event_is_idempotent(session_factory):
    store = CountingStore()
    tracker = _tracker(session_factory, store)
    event = make_event(1)

    tracker.mark_read(event.id)
    tracker.mark_read(event.id)

    assert tracker.is_read(event) is True
    assert store.puts == 1
    assert store.get("viewer-1") == {event.id}


def test_mark_all_read_unions_synthesized_ids_in_one_write(session_factory):
    store = CountingStore()
    store.put("viewer-1", {"conversation_c0"})
    store.puts = 0
    tracker = _tracker(session_factory, store)

    tracker.mark_all_read(["conversation_c0", "conversation_c1", "conversation_c2"])
    tracker.mark_all_read(["conversation_c1"])

    assert store.puts == 1
    assert store.get("viewer-1") == {"conversation_c0", "conversation_c1", "conversation_c2"}


def test_read_state_is_scoped_per_viewer(session_factory):
    store = InMemoryReadStateStore()
    _tracker(session_factory, store, "viewer-1").mark_read("conversation_c1")

    other = _tracker(session_factory, store, "viewer-2")

    assert other.is_read(make_event(1)) is False


def test_server_tier_updates_the_viewers_row_only(session_factory, seed):
    viewer = seed.add(ProfileModel, first_name="Ada", role="admin")
    stranger = seed.add(ProfileModel, first_name="Eve", role="admin")
    own_row = seed.add(
        NotificationModel, user_id=viewer, category="payment", title="t", message="m"
    )
    foreign_row = seed.add(
        NotificationModel, user_id=stranger, category="payment", title="t", message="m"
    )
    store = CountingStore()
    tracker = _tracker(session_factory, store, viewer)

    tracker.mark_read(own_row)
    tracker.mark_read(foreign_row)

    assert tracker.is_read(_notification_event(own_row)) is True
    assert store.puts == 0
    with session_factory() as session:
        assert session.get(NotificationModel, own_row).read is True
        assert session.get(NotificationModel, foreign_row).read is False


def test_tiers_never_cross(session_factory):
    row_id = "0f8fad5b-d9cb-469f-a165-70867728950e"
    store = InMemoryReadStateStore()
    store.put("viewer-1", {row_id})
    tracker = _tracker(session_factory, store)

    assert tracker.is_read(_notification_event(row_id, read=False)) is False
    assert tracker.is_read(_notification_event(row_id, read=True)) is True


def test_tracker_requires_a_viewer(session_factory):
    with pytest.raises(ValueError):
        _tracker(session_factory, InMemoryReadStateStore(), "")


def test_json_store_round_trip(tmp_path):
    store = JsonFileReadStateStore(tmp_path / "state")

    store.put("viewer/1", {"b", "a"})

    assert JsonFileReadStateStore(tmp_path / "state").get("viewer/1") == {"a", "b"}
    files = list((tmp_path / "state").iterdir())
    assert [path.name for path in files] == ["viewer%2F1.json"]
    assert json.loads(files[0].read_text(encoding="utf-8")) == ["a", "b"]


def test_json_store_ignores_unreadable_files(tmp_path):
    store = JsonFileReadStateStore(tmp_path)
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "object.json").write_text('{"a": 1}', encoding="utf-8")

    assert store.get("broken") == set()
    assert store.get("object") == set()
    assert store.get("missing") == set()


def test_json_store_requires_a_viewer(tmp_path):
    with pytest.raises(ValueError):
        JsonFileReadStateStore(tmp_path).put("", {"a"})


def test_json_store_keeps_similar_viewer_ids_apart(tmp_path):
    store = JsonFileReadStateStore(tmp_path)

    store.put("a/b", {"first"})
    store.put("a_b", {"second"})
    store.put("..", {"third"})

    assert store.get("a/b") == {"first"}
    assert store.get("a_b") == {"second"}
    assert store.get("..") == {"third"}
    names = sorted(path.name for path in tmp_path.iterdir())
    assert names == ["...json", "a%2Fb.json", "a_b.json"]

"""Tests for mapping raw source records onto canonical events."""

from __future__ import annotations

from conftest import BASE_TIME, at

from marketplace_feed.application.use_cases.activity import (
    NORMALIZERS,
    merge_events,
    normalize_records,
)
from marketplace_feed.domain.entities import ActivityCategory, Priority
from marketplace_feed.infrastructure.sources import ACTIVITY_CONNECTORS, NOTIFICATION_CONNECTOR

PARTNER = {"id": "p1", "first_name": "Pat", "last_name": "Partner", "avatar_url": "pat.png"}
SEEKER = {"id": "s1", "first_name": "Sam", "last_name": "Seeker", "avatar_url": None}
LISTING = {"id": "l1", "name": "Sunny Loft"}


def _one(source, record):
    events = normalize_records(source, [record])
    assert len(events) == 1
    return events[0]


def test_every_connector_has_a_normalizer():
    names = {connector.name for connector in (*ACTIVITY_CONNECTORS, NOTIFICATION_CONNECTOR)}

    assert names == set(NORMALIZERS)


def test_pending_booking_uses_creation_time_and_high_priority():
    record = {
        "id": "b1",
        "status": "pending",
        "created_at": BASE_TIME,
        "updated_at": BASE_TIME,
        "listing": LISTING,
        "seeker": SEEKER,
    }

    event = _one("bookings", record)

    assert event.category is ActivityCategory.BOOKING_STATE
    assert event.kind == "booking_pending"
    assert event.title == "New Booking Request"
    assert event.description == "Sam Seeker requested booking for Sunny Loft"
    assert event.timestamp == BASE_TIME
    assert event.priority is Priority.HIGH
    assert event.source_ref["listing"]["name"] == "Sunny Loft"


def test_booking_status_change_uses_update_time_in_time_and_id():
    record = {
        "id": "b1",
        "status": "cancelled",
        "created_at": BASE_TIME,
        "updated_at": at(30),
        "listing": LISTING,
        "seeker": SEEKER,
    }

    event = _one("bookings", record)

    assert event.timestamp == at(30)
    assert event.priority is Priority.MEDIUM
    assert event.id.endswith(at(30).isoformat())
    assert event.title == "Booking Cancelled"


def test_listing_transition_yields_submission_and_transition_events():
    record = {
        "id": "l1",
        "name": "Sunny Loft",
        "status": "active",
        "created_at": BASE_TIME,
        "updated_at": at(45),
        "partner": PARTNER,
    }

    events = merge_events(normalize_records("listings", [record]))

    assert [event.kind for event in events] == ["listing_active", "listing_pending"]
    assert events[0].id != events[1].id
    assert events[0].timestamp == at(45)
    assert events[1].timestamp == BASE_TIME
    assert events[0].priority is Priority.NORMAL
    assert events[1].priority is Priority.HIGH
    assert events[1].avatar_url == "pat.png"


def test_untouched_pending_listing_yields_only_the_submission():
    record = {
        "id": "l2",
        "name": "Quiet Room",
        "status": "pending",
        "created_at": BASE_TIME,
        "updated_at": BASE_TIME,
        "partner": None,
    }

    event = _one("listings", record)

    assert event.kind == "listing_pending"
    assert event.description == 'Unknown Partner submitted space "Quiet Room"'


def test_resubmitted_listing_is_a_separate_event():
    record = {
        "id": "l3",
        "name": "Studio",
        "status": "pending",
        "rejected_at": at(10),
        "created_at": BASE_TIME,
        "updated_at": at(20),
        "partner": PARTNER,
    }

    events = normalize_records("listings", [record])

    assert {event.kind for event in events} == {"listing_pending", "listing_resubmitted"}
    assert len({event.id for event in events}) == 2


def test_rejected_listing_needs_attention():
    record = {
        "id": "l4",
        "name": "Studio",
        "status": "rejected",
        "created_at": BASE_TIME,
        "updated_at": at(5),
        "partner": PARTNER,
    }

    transition = merge_events(normalize_records("listings", [record]))[0]

    assert transition.kind == "listing_rejected"
    assert transition.priority is Priority.HIGH


def test_review_with_missing_joins_uses_placeholders():
    record = {"id": "r1", "rating": 1, "created_at": BASE_TIME, "listing": None, "seeker": None}

    event = _one("reviews", record)

    assert event.priority is Priority.HIGH
    assert event.description == 'User left a 1-star review for "Unknown Space"'


def test_payment_status_is_part_of_the_id():
    record = {"id": "pay1", "status": "failed", "amount": 42.5, "created_at": BASE_TIME}

    event = _one("payment_logs", record)

    assert event.id == "payment_pay1_failed"
    assert event.priority is Priority.HIGH
    assert "$42.50" in event.description


def test_support_ticket_priority_and_transition():
    opened = {
        "id": "t1",
        "subject": "Door code",
        "status": "open",
        "priority": "urgent",
        "created_at": BASE_TIME,
        "updated_at": at(3),
        "requester": SEEKER,
    }
    resolved = dict(opened, status="resolved", priority="high", updated_at=at(60))

    opened_event = _one("support_tickets", opened)
    resolved_event = _one("support_tickets", resolved)

    assert opened_event.kind == "support_ticket"
    assert opened_event.timestamp == BASE_TIME
    assert opened_event.priority is Priority.URGENT
    assert resolved_event.kind == "ticket_resolved"
    assert resolved_event.timestamp == at(60)
    assert resolved_event.priority is Priority.HIGH
    assert opened_event.id != resolved_event.id


def test_moderation_action_reads_in_past_tense():
    approve = {"id": "m1", "action": "approve", "target_type": "listing", "created_at": BASE_TIME}
    reject = dict(approve, id="m2", action="reject", reason="Blurry photos")

    assert _one("moderation_actions", approve).description == "Admin approved listing"
    rejected = _one("moderation_actions", reject)
    assert rejected.description == "Admin rejected listing: Blurry photos"
    assert rejected.priority is Priority.HIGH


def test_user_reinstatement_and_suspension():
    reinstated = {
        "id": "h1",
        "old_status": "suspended",
        "new_status": "active",
        "created_at": BASE_TIME,
        "subject": SEEKER,
        "changed_by": {"id": "a1", "first_name": "Ada", "last_name": None, "avatar_url": None},
    }
    suspended = dict(reinstated, id="h2", old_status="active", new_status="suspended")

    reinstated_event = _one("user_status_history", reinstated)
    suspended_event = _one("user_status_history", suspended)

    assert reinstated_event.priority is Priority.MEDIUM
    assert reinstated_event.description == "Sam Seeker was reinstated by Ada"
    assert suspended_event.priority is Priority.HIGH
    assert suspended_event.title == "User Suspended"


def test_payout_timestamps_follow_status():
    pending = {
        "id": "po1",
        "status": "pending",
        "amount": 100,
        "partner_name": "Pat's Spaces",
        "requested_at": BASE_TIME,
        "processed_at": None,
        "updated_at": at(1),
        "partner": None,
    }
    paid = dict(pending, status="successful", processed_at=at(90), updated_at=at(90))

    pending_event = _one("payout_requests", pending)
    paid_event = _one("payout_requests", paid)

    assert pending_event.timestamp == BASE_TIME
    assert pending_event.priority is Priority.MEDIUM
    assert pending_event.description == "Pat's Spaces requested payout of $100.00"
    assert paid_event.timestamp == at(90)
    assert paid_event.priority is Priority.NORMAL


def test_failed_refund_is_high_priority():
    record = {
        "id": "rf1",
        "status": "failed",
        "amount": 20,
        "created_at": BASE_TIME,
        "processed_at": at(15),
        "updated_at": at(15),
        "listing": LISTING,
        "seeker": SEEKER,
    }

    event = _one("refunds", record)

    assert event.timestamp == at(15)
    assert event.priority is Priority.HIGH
    assert event.title == "Refund Failed"


def test_announcement_prefers_publish_date():
    record = {"id": "an1", "title": "Holiday hours", "publish_date": at(5), "created_at": BASE_TIME}

    event = _one("announcements", record)

    assert event.timestamp == at(5)
    assert event.description == 'New announcement: "Holiday hours"'


def test_stored_notification_keeps_its_row_id():
    row_id = "0f8fad5b-d9cb-469f-a165-70867728950e"
    record = {
        "id": row_id,
        "category": "not-a-category",
        "priority": "urgent",
        "title": "Heads up",
        "message": "Payout failed",
        "read": False,
        "created_at": BASE_TIME,
    }

    event = _one("notifications", record)

    assert event.id == row_id
    assert event.category is ActivityCategory.ANNOUNCEMENT
    assert event.priority is Priority.URGENT
    assert event.description == "Payout failed"


def test_iso_strings_are_accepted_as_timestamps():
    event = _one("conversations", {"id": "c1", "created_at": "2024-05-01T12:00:00Z"})

    assert event.timestamp == BASE_TIME
    assert event.priority is Priority.LOW


def test_record_without_timestamp_is_excluded():
    assert normalize_records("favorites", [{"id": "f1", "created_at": None}]) == []


def test_broken_record_does_not_drop_the_rest():
    good = {"id": "c2", "created_at": BASE_TIME}

    events = normalize_records("conversations", [{"created_at": BASE_TIME}, good])

    assert [event.id for event in events] == ["conversation_c2"]


def test_unknown_source_yields_nothing():
    assert normalize_records("invoices", [{"id": "i1", "created_at": BASE_TIME}]) == []

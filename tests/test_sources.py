"""Tests for the read-only source connectors."""

from __future__ import annotations

from conftest import BASE_TIME, at

from marketplace_feed.domain.entities import ActivityCategory, FeedKind
from marketplace_feed.infrastructure.models import (
    AnnouncementModel,
    BookingModel,
    ListingModel,
    NotificationModel,
    PaymentLogModel,
    ProfileModel,
)
from marketplace_feed.infrastructure.sources import (
    ACTIVITY_CONNECTORS,
    NOTIFICATION_CONNECTOR,
    SourceConnector,
    connector_filters,
    connectors_for,
    run_connector,
)

CONNECTORS = {connector.name: connector for connector in ACTIVITY_CONNECTORS}


def test_feeds_are_composed_of_the_expected_connectors():
    assert len(connectors_for(FeedKind.ACTIVITIES)) == 14
    notifications = connectors_for(FeedKind.NOTIFICATIONS)
    assert notifications[0] is NOTIFICATION_CONNECTOR
    assert len(notifications) == 15
    assert connector_filters(FeedKind.NOTIFICATIONS, "v1") == {"notifications": {"user_id": "v1"}}
    assert connector_filters(FeedKind.ACTIVITIES, "v1") == {}


def test_failing_source_reports_an_error_instead_of_raising(session_factory):
    def explode(session, limit, filters):
        raise RuntimeError("relation does not exist")

    broken = SourceConnector("reviews", ActivityCategory.REVIEW, ("reviews",), explode)

    result = run_connector(broken, session_factory)

    assert result.failed is True
    assert result.rows == []
    assert result.error == "relation does not exist"


def test_bookings_carry_joined_listing_and_seeker(session_factory, seed):
    partner = seed.add(ProfileModel, first_name="Pat", role="partner")
    seeker = seed.add(ProfileModel, first_name="Sam", last_name="Seeker")
    listing = seed.add(ListingModel, partner_id=partner, name="Sunny Loft")
    seed.add(BookingModel, listing_id=listing, seeker_id=seeker, created_at=BASE_TIME)
    seed.add(BookingModel, listing_id=None, seeker_id=None, created_at=at(1))

    result = run_connector(CONNECTORS["bookings"], session_factory)

    assert not result.failed
    by_listing = {bool(row["listing"]): row for row in result.rows}
    assert by_listing[True]["listing"]["name"] == "Sunny Loft"
    assert by_listing[True]["seeker"]["last_name"] == "Seeker"
    assert by_listing[False]["seeker"] is None


def test_limit_bounds_each_source(session_factory, seed):
    for minute in range(5):
        seed.add(ProfileModel, first_name=f"User {minute}", created_at=at(minute))

    result = run_connector(CONNECTORS["profiles"], session_factory, limit=3)

    assert [row["first_name"] for row in result.rows] == ["User 4", "User 3", "User 2"]


def test_only_settled_payments_and_published_announcements(session_factory, seed):
    seed.add(PaymentLogModel, status="succeeded", amount=10)
    seed.add(PaymentLogModel, status="processing", amount=10)
    seed.add(AnnouncementModel, title="Live", status="published", publish_date=BASE_TIME)
    seed.add(AnnouncementModel, title="Draft", status="draft")

    payments = run_connector(CONNECTORS["payment_logs"], session_factory)
    announcements = run_connector(CONNECTORS["announcements"], session_factory)

    assert [row["status"] for row in payments.rows] == ["succeeded"]
    assert [row["title"] for row in announcements.rows] == ["Live"]


def test_notifications_are_scoped_to_the_viewer(session_factory, seed):
    viewer = seed.add(ProfileModel, first_name="Ada", role="admin")
    other = seed.add(ProfileModel, first_name="Eve", role="admin")
    own = seed.add(NotificationModel, user_id=viewer, category="payment", title="t", message="m")
    seed.add(NotificationModel, user_id=other, category="payment", title="t", message="m")

    unscoped = run_connector(NOTIFICATION_CONNECTOR, session_factory)
    scoped = run_connector(NOTIFICATION_CONNECTOR, session_factory, filters={"user_id": viewer})

    assert unscoped.rows == []
    assert [row["id"] for row in scoped.rows] == [own]
    assert scoped.rows[0]["read"] is False


def test_unknown_filters_are_ignored(session_factory, seed):
    seed.add(ProfileModel, first_name="Ada")

    result = run_connector(CONNECTORS["profiles"], session_factory, filters={"colour": "blue"})

    assert len(result.rows) == 1

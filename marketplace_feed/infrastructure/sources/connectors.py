"""Source connectors: one query per domain-event category."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session, aliased

from marketplace_feed.domain.entities import ActivityCategory, ChangeEvent, FeedKind
from marketplace_feed.infrastructure.models import (
    AnnouncementModel,
    BookingModel,
    BookingModificationModel,
    ConversationModel,
    FavoriteModel,
    ListingModel,
    ModerationActionModel,
    NotificationModel,
    PaymentLogModel,
    PayoutRequestModel,
    ProfileModel,
    RefundModel,
    ReviewModel,
    SupportTicketModel,
    UserStatusHistoryModel,
)

from .base import ChangePredicate, Filters, SourceConnector, apply_filters, row_to_record

PAYMENT_STATUSES_SHOWN = ("succeeded", "failed")


def _person_columns(alias: Any, relation: str) -> list[Any]:
    return [
        alias.id.label(f"{relation}__id"),
        alias.first_name.label(f"{relation}__first_name"),
        alias.last_name.label(f"{relation}__last_name"),
        alias.avatar_url.label(f"{relation}__avatar_url"),
    ]


def _listing_columns(alias: Any) -> list[Any]:
    return [alias.id.label("listing__id"), alias.name.label("listing__name")]


def _records(query: Any) -> list[dict[str, Any]]:
    return [row_to_record(row) for row in query.all()]


def fetch_registrations(session: Session, limit: int, filters: Filters) -> list[dict[str, Any]]:
    query = session.query(
        ProfileModel.id,
        ProfileModel.first_name,
        ProfileModel.last_name,
        ProfileModel.role,
        ProfileModel.avatar_url,
        ProfileModel.created_at,
    )
    query = apply_filters(query, ProfileModel, filters)
    return _records(query.order_by(ProfileModel.created_at.desc()).limit(limit))


def fetch_bookings(session: Session, limit: int, filters: Filters) -> list[dict[str, Any]]:
    seeker = aliased(ProfileModel)
    listing = aliased(ListingModel)
    query = (
        session.query(
            BookingModel.id,
            BookingModel.status,
            BookingModel.payment_status,
            BookingModel.total_paid,
            BookingModel.created_at,
            BookingModel.updated_at,
            *_listing_columns(listing),
            *_person_columns(seeker, "seeker"),
        )
        .outerjoin(listing, BookingModel.listing_id == listing.id)
        .outerjoin(seeker, BookingModel.seeker_id == seeker.id)
    )
    query = apply_filters(query, BookingModel, filters)
    return _records(query.order_by(BookingModel.updated_at.desc()).limit(limit))


def fetch_listings(session: Session, limit: int, filters: Filters) -> list[dict[str, Any]]:
    partner = aliased(ProfileModel)
    query = session.query(
        ListingModel.id,
        ListingModel.name,
        ListingModel.status,
        ListingModel.rejected_at,
        ListingModel.created_at,
        ListingModel.updated_at,
        *_person_columns(partner, "partner"),
    ).outerjoin(partner, ListingModel.partner_id == partner.id)
    query = apply_filters(query, ListingModel, filters)
    return _records(query.order_by(ListingModel.updated_at.desc()).limit(limit))


def fetch_reviews(session: Session, limit: int, filters: Filters) -> list[dict[str, Any]]:
    seeker = aliased(ProfileModel)
    listing = aliased(ListingModel)
    query = (
        session.query(
            ReviewModel.id,
            ReviewModel.rating,
            ReviewModel.comment,
            ReviewModel.created_at,
            *_listing_columns(listing),
            *_person_columns(seeker, "seeker"),
        )
        .outerjoin(listing, ReviewModel.listing_id == listing.id)
        .outerjoin(seeker, ReviewModel.seeker_id == seeker.id)
    )
    query = apply_filters(query, ReviewModel, filters)
    return _records(query.order_by(ReviewModel.created_at.desc()).limit(limit))


def fetch_payments(session: Session, limit: int, filters: Filters) -> list[dict[str, Any]]:
    booking = aliased(BookingModel)
    listing = aliased(ListingModel)
    query = (
        session.query(
            PaymentLogModel.id,
            PaymentLogModel.amount,
            PaymentLogModel.status,
            PaymentLogModel.transaction_id,
            PaymentLogModel.booking_id,
            PaymentLogModel.created_at,
            *_listing_columns(listing),
        )
        .outerjoin(booking, PaymentLogModel.booking_id == booking.id)
        .outerjoin(listing, booking.listing_id == listing.id)
        .filter(PaymentLogModel.status.in_(PAYMENT_STATUSES_SHOWN))
    )
    query = apply_filters(query, PaymentLogModel, filters)
    return _records(query.order_by(PaymentLogModel.created_at.desc()).limit(limit))


def fetch_support_tickets(session: Session, limit: int, filters: Filters) -> list[dict[str, Any]]:
    requester = aliased(ProfileModel)
    query = session.query(
        SupportTicketModel.id,
        SupportTicketModel.ticket_number,
        SupportTicketModel.subject,
        SupportTicketModel.status,
        SupportTicketModel.priority,
        SupportTicketModel.created_at,
        SupportTicketModel.updated_at,
        *_person_columns(requester, "requester"),
    ).outerjoin(requester, SupportTicketModel.user_id == requester.id)
    query = apply_filters(query, SupportTicketModel, filters)
    return _records(query.order_by(SupportTicketModel.created_at.desc()).limit(limit))


def fetch_booking_modifications(
    session: Session, limit: int, filters: Filters
) -> list[dict[str, Any]]:
    booking = aliased(BookingModel)
    listing = aliased(ListingModel)
    query = (
        session.query(
            BookingModificationModel.id,
            BookingModificationModel.booking_id,
            BookingModificationModel.modification_type,
            BookingModificationModel.created_at,
            *_listing_columns(listing),
        )
        .outerjoin(booking, BookingModificationModel.booking_id == booking.id)
        .outerjoin(listing, booking.listing_id == listing.id)
    )
    query = apply_filters(query, BookingModificationModel, filters)
    return _records(query.order_by(BookingModificationModel.created_at.desc()).limit(limit))


def fetch_conversations(session: Session, limit: int, filters: Filters) -> list[dict[str, Any]]:
    query = session.query(
        ConversationModel.id,
        ConversationModel.participant1_id,
        ConversationModel.participant2_id,
        ConversationModel.created_at,
    )
    query = apply_filters(query, ConversationModel, filters)
    return _records(query.order_by(ConversationModel.created_at.desc()).limit(limit))


def fetch_favorites(session: Session, limit: int, filters: Filters) -> list[dict[str, Any]]:
    owner = aliased(ProfileModel)
    listing = aliased(ListingModel)
    query = (
        session.query(
            FavoriteModel.id,
            FavoriteModel.created_at,
            *_listing_columns(listing),
            *_person_columns(owner, "owner"),
        )
        .outerjoin(listing, FavoriteModel.listing_id == listing.id)
        .outerjoin(owner, FavoriteModel.user_id == owner.id)
    )
    query = apply_filters(query, FavoriteModel, filters)
    return _records(query.order_by(FavoriteModel.created_at.desc()).limit(limit))


def fetch_announcements(session: Session, limit: int, filters: Filters) -> list[dict[str, Any]]:
    query = session.query(
        AnnouncementModel.id,
        AnnouncementModel.title,
        AnnouncementModel.status,
        AnnouncementModel.publish_date,
        AnnouncementModel.created_by,
        AnnouncementModel.created_at,
    ).filter(AnnouncementModel.status == "published")
    query = apply_filters(query, AnnouncementModel, filters)
    published = func.coalesce(AnnouncementModel.publish_date, AnnouncementModel.created_at)
    return _records(query.order_by(published.desc()).limit(limit))


def fetch_moderation_actions(
    session: Session, limit: int, filters: Filters
) -> list[dict[str, Any]]:
    moderator = aliased(ProfileModel)
    query = session.query(
        ModerationActionModel.id,
        ModerationActionModel.action,
        ModerationActionModel.target_type,
        ModerationActionModel.target_id,
        ModerationActionModel.reason,
        ModerationActionModel.created_at,
        *_person_columns(moderator, "moderator"),
    ).outerjoin(moderator, ModerationActionModel.moderator_id == moderator.id)
    query = apply_filters(query, ModerationActionModel, filters)
    return _records(query.order_by(ModerationActionModel.created_at.desc()).limit(limit))


def fetch_user_status_changes(
    session: Session, limit: int, filters: Filters
) -> list[dict[str, Any]]:
    subject = aliased(ProfileModel)
    changed_by = aliased(ProfileModel)
    query = (
        session.query(
            UserStatusHistoryModel.id,
            UserStatusHistoryModel.old_status,
            UserStatusHistoryModel.new_status,
            UserStatusHistoryModel.reason,
            UserStatusHistoryModel.created_at,
            *_person_columns(subject, "subject"),
            *_person_columns(changed_by, "changed_by"),
        )
        .outerjoin(subject, UserStatusHistoryModel.user_id == subject.id)
        .outerjoin(changed_by, UserStatusHistoryModel.changed_by == changed_by.id)
    )
    query = apply_filters(query, UserStatusHistoryModel, filters)
    return _records(query.order_by(UserStatusHistoryModel.created_at.desc()).limit(limit))


def fetch_payout_requests(session: Session, limit: int, filters: Filters) -> list[dict[str, Any]]:
    partner = aliased(ProfileModel)
    query = session.query(
        PayoutRequestModel.id,
        PayoutRequestModel.partner_name,
        PayoutRequestModel.amount,
        PayoutRequestModel.status,
        PayoutRequestModel.requested_at,
        PayoutRequestModel.processed_at,
        PayoutRequestModel.updated_at,
        *_person_columns(partner, "partner"),
    ).outerjoin(partner, PayoutRequestModel.partner_id == partner.id)
    query = apply_filters(query, PayoutRequestModel, filters)
    return _records(query.order_by(PayoutRequestModel.updated_at.desc()).limit(limit))


def fetch_refunds(session: Session, limit: int, filters: Filters) -> list[dict[str, Any]]:
    booking = aliased(BookingModel)
    listing = aliased(ListingModel)
    seeker = aliased(ProfileModel)
    query = (
        session.query(
            RefundModel.id,
            RefundModel.booking_id,
            RefundModel.amount,
            RefundModel.refund_type,
            RefundModel.status,
            RefundModel.reason,
            RefundModel.created_at,
            RefundModel.processed_at,
            RefundModel.updated_at,
            *_listing_columns(listing),
            *_person_columns(seeker, "seeker"),
        )
        .outerjoin(booking, RefundModel.booking_id == booking.id)
        .outerjoin(listing, booking.listing_id == listing.id)
        .outerjoin(seeker, booking.seeker_id == seeker.id)
    )
    query = apply_filters(query, RefundModel, filters)
    return _records(query.order_by(RefundModel.updated_at.desc()).limit(limit))


def fetch_notifications(session: Session, limit: int, filters: Filters) -> list[dict[str, Any]]:
    if not filters.get("user_id"):
        return []
    query = session.query(
        NotificationModel.id,
        NotificationModel.user_id,
        NotificationModel.category,
        NotificationModel.title,
        NotificationModel.message,
        NotificationModel.priority,
        NotificationModel.payload,
        NotificationModel.read,
        NotificationModel.created_at,
        NotificationModel.read_at,
    )
    query = apply_filters(query, NotificationModel, filters)
    return _records(
        query.order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc()).limit(
            limit
        )
    )


def _viewer_notifications(filters: Filters) -> ChangePredicate:
    viewer_id = filters.get("user_id")

    def predicate(change: ChangeEvent) -> bool:
        return viewer_id is not None and change.record.get("user_id") == viewer_id

    return predicate


ACTIVITY_CONNECTORS: tuple[SourceConnector, ...] = (
    SourceConnector("profiles", ActivityCategory.REGISTRATION, ("profiles",), fetch_registrations),
    SourceConnector("bookings", ActivityCategory.BOOKING_STATE, ("bookings",), fetch_bookings),
    SourceConnector("listings", ActivityCategory.LISTING_STATE, ("listings",), fetch_listings),
    SourceConnector("reviews", ActivityCategory.REVIEW, ("reviews",), fetch_reviews),
    SourceConnector("payment_logs", ActivityCategory.PAYMENT, ("payment_logs",), fetch_payments),
    SourceConnector(
        "support_tickets",
        ActivityCategory.SUPPORT_TICKET,
        ("support_tickets",),
        fetch_support_tickets,
    ),
    SourceConnector(
        "booking_modifications",
        ActivityCategory.BOOKING_MODIFICATION,
        ("booking_modifications",),
        fetch_booking_modifications,
    ),
    SourceConnector(
        "conversations", ActivityCategory.CONVERSATION, ("conversations",), fetch_conversations
    ),
    SourceConnector("favorites", ActivityCategory.FAVORITE, ("favorites",), fetch_favorites),
    SourceConnector(
        "announcements", ActivityCategory.ANNOUNCEMENT, ("announcements",), fetch_announcements
    ),
    SourceConnector(
        "moderation_actions",
        ActivityCategory.MODERATION,
        ("moderation_actions",),
        fetch_moderation_actions,
    ),
    SourceConnector(
        "user_status_history",
        ActivityCategory.USER_STATUS_CHANGE,
        ("user_status_history",),
        fetch_user_status_changes,
    ),
    SourceConnector(
        "payout_requests",
        ActivityCategory.PAYOUT_REQUEST,
        ("payout_requests",),
        fetch_payout_requests,
    ),
    SourceConnector("refunds", ActivityCategory.REFUND, ("refunds",), fetch_refunds),
)

NOTIFICATION_CONNECTOR = SourceConnector(
    "notifications",
    None,
    ("notifications",),
    fetch_notifications,
    watch_predicate=_viewer_notifications,
)


def connectors_for(kind: FeedKind) -> tuple[SourceConnector, ...]:
    """Return the connectors composing the ``kind`` feed."""

    if kind is FeedKind.NOTIFICATIONS:
        return (NOTIFICATION_CONNECTOR, *ACTIVITY_CONNECTORS)
    return ACTIVITY_CONNECTORS


def connector_filters(kind: FeedKind, viewer_id: str) -> dict[str, dict[str, Any]]:
    """Return per-connector filters scoping the ``kind`` feed to ``viewer_id``."""

    if kind is FeedKind.NOTIFICATIONS:
        return {NOTIFICATION_CONNECTOR.name: {"user_id": viewer_id}}
    return {}


__all__ = [
    "ACTIVITY_CONNECTORS",
    "NOTIFICATION_CONNECTOR",
    "PAYMENT_STATUSES_SHOWN",
    "connector_filters",
    "connectors_for",
]

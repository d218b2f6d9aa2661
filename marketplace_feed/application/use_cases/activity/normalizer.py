"""Map raw source records onto canonical :class:`ActivityEvent` objects.

Every normalizer is a pure function ``record -> list[ActivityEvent]``. Most
records yield exactly one event; a listing whose status moved away from
``pending`` yields both its submission and its transition, and a record
without any usable timestamp yields nothing.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping

from marketplace_feed.domain.entities import (
    ActivityCategory,
    ActivityEvent,
    Priority,
    build_event_id,
    freeze_record,
)
from marketplace_feed.utils import coerce_datetime

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]
Normalizer = Callable[[Record], list[ActivityEvent]]

UNKNOWN_USER = "Unknown User"
UNKNOWN_PARTNER = "Unknown Partner"
UNKNOWN_SPACE = "Unknown Space"


def _full_name(person: Mapping[str, Any] | None, fallback: str) -> str:
    if not person:
        return fallback
    parts = (person.get("first_name"), person.get("last_name"))
    name = " ".join(str(part).strip() for part in parts if part and str(part).strip())
    return name or fallback


def _first_name(person: Mapping[str, Any] | None, fallback: str) -> str:
    if not person or not person.get("first_name"):
        return fallback
    return str(person["first_name"])


def _avatar(person: Mapping[str, Any] | None) -> str | None:
    return person.get("avatar_url") if person else None


def _listing_name(record: Record, fallback: str = UNKNOWN_SPACE) -> str:
    listing = record.get("listing") or {}
    return listing.get("name") or fallback


def _money(amount: Any) -> str:
    try:
        return f"${float(amount):,.2f}"
    except (TypeError, ValueError):
        return "$0.00"


def _status(record: Record, key: str = "status") -> str:
    return str(record.get(key) or "").strip().lower()


def _past_tense(verb: str) -> str:
    if not verb:
        return "updated"
    return f"{verb}d" if verb.endswith("e") else f"{verb}ed"


def _transition_time(record: Record, neutral_status: str) -> tuple[datetime | None, bool]:
    """Return ``(timestamp, is_transition)`` for state-transition records.

    The update time is used when the record left its neutral status and was
    touched after creation; otherwise the creation time is used.
    """

    created = coerce_datetime(record.get("created_at"))
    updated = coerce_datetime(record.get("updated_at"))
    changed = (
        _status(record) != neutral_status
        and updated is not None
        and created is not None
        and updated != created
    )
    if changed:
        return updated, True
    return created or updated, False


def _event(
    *,
    event_id: str,
    category: ActivityCategory,
    kind: str,
    title: str,
    description: str,
    timestamp: datetime | None,
    priority: Priority,
    record: Record,
    avatar_url: str | None = None,
) -> list[ActivityEvent]:
    if timestamp is None:
        logger.debug("Skipping %s record %s without a timestamp", category.value, record.get("id"))
        return []
    return [
        ActivityEvent(
            id=event_id,
            category=category,
            kind=kind,
            title=title,
            description=description,
            timestamp=timestamp,
            priority=priority,
            source_ref=freeze_record(record),
            avatar_url=avatar_url,
        )
    ]


def normalize_registration(record: Record) -> list[ActivityEvent]:
    name = _full_name(record, UNKNOWN_USER)
    role = record.get("role") or "user"
    return _event(
        event_id=build_event_id(ActivityCategory.REGISTRATION, record["id"]),
        category=ActivityCategory.REGISTRATION,
        kind="user_registration",
        title="New User Registration",
        description=f"{name} registered as {role}",
        timestamp=coerce_datetime(record.get("created_at")),
        priority=Priority.NORMAL,
        record=record,
        avatar_url=_avatar(record),
    )


_BOOKING_TITLES = {
    "pending": "New Booking Request",
    "confirmed": "Booking Confirmed",
    "cancelled": "Booking Cancelled",
    "completed": "Booking Completed",
    "rejected": "Booking Rejected",
}


def normalize_booking(record: Record) -> list[ActivityEvent]:
    status = _status(record) or "pending"
    seeker = record.get("seeker")
    timestamp, _ = _transition_time(record, "pending")
    verb = "requested" if status == "pending" else status
    if status == "pending":
        priority = Priority.HIGH
    elif status == "cancelled":
        priority = Priority.MEDIUM
    else:
        priority = Priority.NORMAL
    return _event(
        event_id=build_event_id(
            ActivityCategory.BOOKING_STATE, record["id"], status, record.get("updated_at")
        ),
        category=ActivityCategory.BOOKING_STATE,
        kind=f"booking_{status}",
        title=_BOOKING_TITLES.get(status, f"Booking {status}"),
        description=f"{_full_name(seeker, UNKNOWN_USER)} {verb} booking for {_listing_name(record)}",
        timestamp=timestamp,
        priority=priority,
        record=record,
        avatar_url=_avatar(seeker),
    )


_LISTING_TITLES = {
    "pending": "Space Listing Submitted",
    "active": "Space Listing Approved",
    "rejected": "Space Listing Rejected",
    "suspended": "Space Listing Suspended",
}
_LISTING_ATTENTION_STATUSES = frozenset({"pending", "rejected", "suspended"})


def _listing_priority(status: str) -> Priority:
    return Priority.HIGH if status in _LISTING_ATTENTION_STATUSES else Priority.NORMAL


def normalize_listing(record: Record) -> list[ActivityEvent]:
    status = _status(record) or "pending"
    partner = record.get("partner")
    partner_name = _full_name(partner, UNKNOWN_PARTNER)
    space = record.get("name") or UNKNOWN_SPACE
    created = coerce_datetime(record.get("created_at"))
    updated = coerce_datetime(record.get("updated_at"))
    touched = created is not None and updated is not None and updated != created

    events = _event(
        event_id=build_event_id(ActivityCategory.LISTING_STATE, record["id"], "pending", created),
        category=ActivityCategory.LISTING_STATE,
        kind="listing_pending",
        title=_LISTING_TITLES["pending"],
        description=f'{partner_name} submitted space "{space}"',
        timestamp=created or updated,
        priority=_listing_priority("pending"),
        record=record,
        avatar_url=_avatar(partner),
    )
    if not touched:
        return events

    if status == "pending":
        if not record.get("rejected_at"):
            return events
        kind = "listing_resubmitted"
        title = "Space Listing Resubmitted"
        description = f'{partner_name} resubmitted space "{space}" for review'
    else:
        kind = f"listing_{status}"
        title = _LISTING_TITLES.get(status, f"Space {status}")
        description = f'{partner_name} space "{space}" was {status}'

    events.extend(
        _event(
            event_id=build_event_id(ActivityCategory.LISTING_STATE, record["id"], status, updated),
            category=ActivityCategory.LISTING_STATE,
            kind=kind,
            title=title,
            description=description,
            timestamp=updated,
            priority=_listing_priority(status),
            record=record,
            avatar_url=_avatar(partner),
        )
    )
    return events


def normalize_review(record: Record) -> list[ActivityEvent]:
    seeker = record.get("seeker")
    rating = record.get("rating")
    try:
        low_rating = rating is not None and int(rating) <= 2
    except (TypeError, ValueError):
        low_rating = False
    return _event(
        event_id=build_event_id(ActivityCategory.REVIEW, record["id"]),
        category=ActivityCategory.REVIEW,
        kind="review_created",
        title="New Review Submitted",
        description=(
            f'{_full_name(seeker, "User")} left a {rating if rating is not None else "?"}-star '
            f'review for "{_listing_name(record)}"'
        ),
        timestamp=coerce_datetime(record.get("created_at")),
        priority=Priority.HIGH if low_rating else Priority.NORMAL,
        record=record,
        avatar_url=_avatar(seeker),
    )


def normalize_payment(record: Record) -> list[ActivityEvent]:
    status = _status(record) or "unknown"
    if status == "succeeded":
        title = "Payment Successful"
    elif status == "failed":
        title = "Payment Failed"
    else:
        title = f"Payment {status}"
    return _event(
        event_id=build_event_id(ActivityCategory.PAYMENT, record["id"], status),
        category=ActivityCategory.PAYMENT,
        kind=f"payment_{status}",
        title=title,
        description=(
            f"Payment {status} for {_listing_name(record, 'booking')} - "
            f"{_money(record.get('amount'))}"
        ),
        timestamp=coerce_datetime(record.get("created_at")),
        priority=Priority.HIGH if status == "failed" else Priority.NORMAL,
        record=record,
    )


def normalize_support_ticket(record: Record) -> list[ActivityEvent]:
    status = _status(record) or "open"
    requester = record.get("requester")
    subject = record.get("subject") or "(no subject)"
    timestamp, changed = _transition_time(record, "open")
    ticket_priority = _status(record, "priority")
    if ticket_priority == "urgent":
        priority = Priority.URGENT
    elif ticket_priority == "high":
        priority = Priority.HIGH
    else:
        priority = Priority.NORMAL
    name = _full_name(requester, "User")
    if changed:
        kind = f"ticket_{status}"
        title = f"Support Ticket {status.replace('_', ' ').title()}"
        description = f'{name} ticket "{subject}" is now {status}'
    else:
        kind = "support_ticket"
        title = "Support Ticket Created"
        description = f"{name} reported: {subject}"
    return _event(
        event_id=build_event_id(ActivityCategory.SUPPORT_TICKET, record["id"], status),
        category=ActivityCategory.SUPPORT_TICKET,
        kind=kind,
        title=title,
        description=description,
        timestamp=timestamp,
        priority=priority,
        record=record,
        avatar_url=_avatar(requester),
    )


def normalize_booking_modification(record: Record) -> list[ActivityEvent]:
    modification = str(record.get("modification_type") or "").replace("_", " ").strip()
    target = _listing_name(record, "booking")
    if modification:
        description = f"Booking modification ({modification}) requested for {target}"
    else:
        description = f"Booking modification requested for {target}"
    return _event(
        event_id=build_event_id(ActivityCategory.BOOKING_MODIFICATION, record["id"]),
        category=ActivityCategory.BOOKING_MODIFICATION,
        kind="booking_modification",
        title="Booking Modified",
        description=description,
        timestamp=coerce_datetime(record.get("created_at")),
        priority=Priority.MEDIUM,
        record=record,
    )


def normalize_conversation(record: Record) -> list[ActivityEvent]:
    return _event(
        event_id=build_event_id(ActivityCategory.CONVERSATION, record["id"]),
        category=ActivityCategory.CONVERSATION,
        kind="conversation_started",
        title="New Conversation Started",
        description="Users started a new conversation",
        timestamp=coerce_datetime(record.get("created_at")),
        priority=Priority.LOW,
        record=record,
    )


def normalize_favorite(record: Record) -> list[ActivityEvent]:
    owner = record.get("owner")
    return _event(
        event_id=build_event_id(ActivityCategory.FAVORITE, record["id"]),
        category=ActivityCategory.FAVORITE,
        kind="favorite_added",
        title="Space Added to Favorites",
        description=f'{_full_name(owner, "User")} added "{_listing_name(record, "space")}" to favorites',
        timestamp=coerce_datetime(record.get("created_at")),
        priority=Priority.LOW,
        record=record,
        avatar_url=_avatar(owner),
    )


def normalize_announcement(record: Record) -> list[ActivityEvent]:
    timestamp = coerce_datetime(record.get("publish_date")) or coerce_datetime(
        record.get("created_at")
    )
    return _event(
        event_id=build_event_id(ActivityCategory.ANNOUNCEMENT, record["id"]),
        category=ActivityCategory.ANNOUNCEMENT,
        kind="announcement_published",
        title="Announcement Published",
        description=f'New announcement: "{record.get("title") or "Untitled"}"',
        timestamp=timestamp,
        priority=Priority.NORMAL,
        record=record,
    )


def normalize_moderation_action(record: Record) -> list[ActivityEvent]:
    action = _status(record, "action")
    moderator = record.get("moderator")
    target = record.get("target_type") or "content"
    reason = record.get("reason")
    description = f"{_first_name(moderator, 'Admin')} {_past_tense(action)} {target}"
    if reason:
        description = f"{description}: {reason}"
    return _event(
        event_id=build_event_id(ActivityCategory.MODERATION, record["id"]),
        category=ActivityCategory.MODERATION,
        kind=f"moderation_{action or 'action'}",
        title=f"Moderation: {action or 'action'}",
        description=description,
        timestamp=coerce_datetime(record.get("created_at")),
        priority=Priority.HIGH if action in {"reject", "suspend"} else Priority.NORMAL,
        record=record,
        avatar_url=_avatar(moderator),
    )


_USER_STATUS_TITLES = {
    "active": "User Reinstated",
    "suspended": "User Suspended",
    "inactive": "User Deactivated",
    "pending": "User Status Changed",
}


def normalize_user_status_change(record: Record) -> list[ActivityEvent]:
    new_status = _status(record, "new_status") or "unknown"
    old_status = _status(record, "old_status")
    subject = record.get("subject")
    changed_by = record.get("changed_by")
    suspension = new_status == "suspended"
    reinstatement = new_status == "active" and old_status == "suspended"

    if reinstatement:
        change = "reinstated"
    elif suspension:
        change = "suspended"
    else:
        change = f"changed to {new_status}"
    description = f"{_full_name(subject, 'User')} was {change}"
    if changed_by:
        description = f"{description} by {_first_name(changed_by, 'Admin')}"
    if record.get("reason"):
        description = f"{description}: {record['reason']}"

    if suspension:
        priority = Priority.HIGH
    elif reinstatement:
        priority = Priority.MEDIUM
    else:
        priority = Priority.NORMAL
    return _event(
        event_id=build_event_id(ActivityCategory.USER_STATUS_CHANGE, record["id"]),
        category=ActivityCategory.USER_STATUS_CHANGE,
        kind=f"user_status_{new_status}",
        title=_USER_STATUS_TITLES.get(new_status, f"User Status: {new_status}"),
        description=description,
        timestamp=coerce_datetime(record.get("created_at")),
        priority=priority,
        record=record,
        avatar_url=_avatar(subject),
    )


_PAYOUT_TITLES = {
    "pending": "Payout Request Submitted",
    "processing": "Payout Processing",
    "successful": "Payout Completed",
    "failed": "Payout Failed",
}


def normalize_payout_request(record: Record) -> list[ActivityEvent]:
    status = _status(record) or "pending"
    partner = record.get("partner")
    name = _full_name(partner, record.get("partner_name") or UNKNOWN_PARTNER)
    if status == "pending":
        timestamp = coerce_datetime(record.get("requested_at")) or coerce_datetime(
            record.get("updated_at")
        )
        priority = Priority.MEDIUM
    else:
        timestamp = coerce_datetime(record.get("processed_at")) or coerce_datetime(
            record.get("updated_at")
        )
        priority = Priority.HIGH if status == "failed" else Priority.NORMAL
    verb = "requested" if status == "pending" else status
    return _event(
        event_id=build_event_id(
            ActivityCategory.PAYOUT_REQUEST, record["id"], status, record.get("updated_at")
        ),
        category=ActivityCategory.PAYOUT_REQUEST,
        kind=f"payout_{status}",
        title=_PAYOUT_TITLES.get(status, f"Payout {status}"),
        description=f"{name} {verb} payout of {_money(record.get('amount'))}",
        timestamp=timestamp,
        priority=priority,
        record=record,
        avatar_url=_avatar(partner),
    )


_REFUND_TITLES = {
    "pending": "Refund Requested",
    "succeeded": "Refund Processed",
    "failed": "Refund Failed",
}


def normalize_refund(record: Record) -> list[ActivityEvent]:
    status = _status(record) or "pending"
    seeker = record.get("seeker")
    if status == "pending":
        timestamp = coerce_datetime(record.get("created_at"))
        priority = Priority.MEDIUM
    else:
        timestamp = coerce_datetime(record.get("processed_at")) or coerce_datetime(
            record.get("updated_at")
        )
        priority = Priority.HIGH if status == "failed" else Priority.NORMAL
    description = (
        f"{_money(record.get('amount'))} refund {status} for "
        f"{_full_name(seeker, UNKNOWN_USER)} at {_listing_name(record)}"
    )
    if record.get("reason"):
        description = f"{description}: {record['reason']}"
    return _event(
        event_id=build_event_id(ActivityCategory.REFUND, record["id"], status),
        category=ActivityCategory.REFUND,
        kind=f"refund_{status}",
        title=_REFUND_TITLES.get(status, f"Refund {status}"),
        description=description,
        timestamp=timestamp,
        priority=priority,
        record=record,
        avatar_url=_avatar(seeker),
    )


def normalize_notification(record: Record) -> list[ActivityEvent]:
    """Stored notification rows keep their own UUID as event id."""

    try:
        category = ActivityCategory(record.get("category"))
    except ValueError:
        logger.debug(
            "Notification %s has unknown category %r, shown as announcement",
            record.get("id"),
            record.get("category"),
        )
        category = ActivityCategory.ANNOUNCEMENT
    try:
        priority = Priority(_status(record, "priority"))
    except ValueError:
        priority = Priority.NORMAL
    return _event(
        event_id=str(record["id"]),
        category=category,
        kind=f"notification_{category.value}",
        title=record.get("title") or "Notification",
        description=record.get("message") or "",
        timestamp=coerce_datetime(record.get("created_at")),
        priority=priority,
        record=record,
    )


NORMALIZERS: dict[str, Normalizer] = {
    "profiles": normalize_registration,
    "bookings": normalize_booking,
    "listings": normalize_listing,
    "reviews": normalize_review,
    "payment_logs": normalize_payment,
    "support_tickets": normalize_support_ticket,
    "booking_modifications": normalize_booking_modification,
    "conversations": normalize_conversation,
    "favorites": normalize_favorite,
    "announcements": normalize_announcement,
    "moderation_actions": normalize_moderation_action,
    "user_status_history": normalize_user_status_change,
    "payout_requests": normalize_payout_request,
    "refunds": normalize_refund,
    "notifications": normalize_notification,
}


def normalize_records(source: str, records: Iterable[Record]) -> list[ActivityEvent]:
    """Normalize every record of ``source``; a broken record is logged and skipped."""

    normalizer = NORMALIZERS.get(source)
    if normalizer is None:
        logger.warning("No normalizer registered for source '%s'", source)
        return []

    events: list[ActivityEvent] = []
    for record in records:
        try:
            events.extend(normalizer(record))
        except Exception:
            logger.exception("Failed to normalize %s record %s", source, record.get("id"))
    return events


__all__ = [
    "NORMALIZERS",
    "UNKNOWN_PARTNER",
    "UNKNOWN_SPACE",
    "UNKNOWN_USER",
    "normalize_records",
]

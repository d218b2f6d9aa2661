"""Persistence helpers for notification entities."""

from __future__ import annotations

from typing import Iterable

from sqlalchemy.orm import Session

from marketplace_feed.infrastructure.models import NotificationModel
from marketplace_feed.utils import is_uuid, now_in_app_timezone


class NotificationRepository:
    """Acknowledge stored notification rows on behalf of a viewer."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def mark_as_read(self, notification_ids: Iterable[str], *, user_id: str) -> int:
        """Flag the given rows of ``user_id`` as read and return how many changed.

        Only canonical UUIDs are considered; anything else cannot be a stored
        notification key.
        """

        ids = [notification_id for notification_id in notification_ids if is_uuid(notification_id)]
        if not ids:
            return 0
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id.in_(ids),
                NotificationModel.user_id == user_id,
                NotificationModel.read.is_(False),
            )
            .update(
                {
                    NotificationModel.read: True,
                    NotificationModel.read_at: now_in_app_timezone(),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    def mark_all_as_read(self, *, user_id: str) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.user_id == user_id,
                NotificationModel.read.is_(False),
            )
            .update(
                {
                    NotificationModel.read: True,
                    NotificationModel.read_at: now_in_app_timezone(),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated


__all__ = ["NotificationRepository"]

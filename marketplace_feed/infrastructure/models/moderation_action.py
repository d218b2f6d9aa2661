"""SQLAlchemy model for moderation actions taken by admins."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from marketplace_feed.infrastructure.database import Base
from marketplace_feed.utils import new_uuid, now_in_app_timezone


class ModerationActionModel(Base):
    """Database representation of an approve/reject/suspend decision."""

    __tablename__ = "moderation_actions"

    id = Column(String(36), primary_key=True, default=new_uuid)
    moderator_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    action = Column(String(30), nullable=False)
    target_type = Column(String(30), nullable=False)
    target_id = Column(String(36), nullable=True)
    reason = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )


__all__ = ["ModerationActionModel"]

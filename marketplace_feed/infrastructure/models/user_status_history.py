"""SQLAlchemy model for account status transitions."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from marketplace_feed.infrastructure.database import Base
from marketplace_feed.utils import new_uuid, now_in_app_timezone


class UserStatusHistoryModel(Base):
    """Database representation of a suspension, reinstatement or deactivation."""

    __tablename__ = "user_status_history"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=True, index=True
    )
    changed_by = Column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    old_status = Column(String(30), nullable=True)
    new_status = Column(String(30), nullable=False)
    reason = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )


__all__ = ["UserStatusHistoryModel"]

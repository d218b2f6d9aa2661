"""SQLAlchemy model for platform announcements."""

from sqlalchemy import Column, DateTime, ForeignKey, String

from marketplace_feed.infrastructure.database import Base
from marketplace_feed.utils import new_uuid, now_in_app_timezone


class AnnouncementModel(Base):
    """Database representation of an announcement broadcast to users."""

    __tablename__ = "announcements"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(200), nullable=False)
    status = Column(String(30), nullable=False, default="draft")
    publish_date = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )


__all__ = ["AnnouncementModel"]

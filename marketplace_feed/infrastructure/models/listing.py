"""SQLAlchemy model for space listings."""

from sqlalchemy import Column, DateTime, ForeignKey, String

from marketplace_feed.infrastructure.database import Base, created_at_default
from marketplace_feed.utils import new_uuid, now_in_app_timezone


class ListingModel(Base):
    """Database representation of a space offered by a partner."""

    __tablename__ = "listings"

    id = Column(String(36), primary_key=True, default=new_uuid)
    partner_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name = Column(String(150), nullable=False)
    status = Column(String(30), nullable=False, default="pending")
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=created_at_default,
        onupdate=now_in_app_timezone,
    )


__all__ = ["ListingModel"]

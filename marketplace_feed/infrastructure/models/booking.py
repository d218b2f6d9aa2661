"""SQLAlchemy model for space bookings."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, String

from marketplace_feed.infrastructure.database import Base, created_at_default
from marketplace_feed.utils import new_uuid, now_in_app_timezone


class BookingModel(Base):
    """Database representation of a seeker's reservation of a listing."""

    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=new_uuid)
    listing_id = Column(
        String(36), ForeignKey("listings.id", ondelete="SET NULL"), nullable=True, index=True
    )
    seeker_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    status = Column(String(30), nullable=False, default="pending")
    payment_status = Column(String(30), nullable=True)
    total_paid = Column(Float, nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=created_at_default,
        onupdate=now_in_app_timezone,
    )


__all__ = ["BookingModel"]

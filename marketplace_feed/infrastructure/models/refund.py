"""SQLAlchemy model for booking refunds."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, String, Text

from marketplace_feed.infrastructure.database import Base
from marketplace_feed.utils import new_uuid, now_in_app_timezone


class RefundModel(Base):
    """Database representation of money returned to a seeker."""

    __tablename__ = "refunds"

    id = Column(String(36), primary_key=True, default=new_uuid)
    booking_id = Column(
        String(36), ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True, index=True
    )
    amount = Column(Float, nullable=True)
    refund_type = Column(String(30), nullable=True)
    status = Column(String(30), nullable=False, default="pending")
    reason = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )
    processed_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=now_in_app_timezone,
        onupdate=now_in_app_timezone,
    )


__all__ = ["RefundModel"]

"""SQLAlchemy model for booking modification requests."""

from sqlalchemy import Column, DateTime, ForeignKey, String

from marketplace_feed.infrastructure.database import Base
from marketplace_feed.utils import new_uuid, now_in_app_timezone


class BookingModificationModel(Base):
    """Database representation of a change requested on an existing booking."""

    __tablename__ = "booking_modifications"

    id = Column(String(36), primary_key=True, default=new_uuid)
    booking_id = Column(
        String(36), ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True, index=True
    )
    modification_type = Column(String(50), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )


__all__ = ["BookingModificationModel"]

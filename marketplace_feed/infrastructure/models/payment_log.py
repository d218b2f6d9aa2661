"""SQLAlchemy model for payment processor logs."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, String

from marketplace_feed.infrastructure.database import Base
from marketplace_feed.utils import new_uuid, now_in_app_timezone


class PaymentLogModel(Base):
    """Database representation of a payment attempt for a booking."""

    __tablename__ = "payment_logs"

    id = Column(String(36), primary_key=True, default=new_uuid)
    booking_id = Column(
        String(36), ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True, index=True
    )
    amount = Column(Float, nullable=True)
    status = Column(String(30), nullable=False)
    transaction_id = Column(String(100), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )


__all__ = ["PaymentLogModel"]

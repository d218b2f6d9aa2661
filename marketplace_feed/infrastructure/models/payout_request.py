"""SQLAlchemy model for partner payout requests."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, String

from marketplace_feed.infrastructure.database import Base
from marketplace_feed.utils import new_uuid, now_in_app_timezone


class PayoutRequestModel(Base):
    """Database representation of a partner asking to withdraw earnings."""

    __tablename__ = "payout_requests"

    id = Column(String(36), primary_key=True, default=new_uuid)
    partner_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    partner_name = Column(String(160), nullable=True)
    amount = Column(Float, nullable=True)
    status = Column(String(30), nullable=False, default="pending")
    requested_at = Column(DateTime(timezone=True), nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=now_in_app_timezone,
        onupdate=now_in_app_timezone,
    )


__all__ = ["PayoutRequestModel"]

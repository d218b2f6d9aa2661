"""SQLAlchemy model for support tickets."""

from sqlalchemy import Column, DateTime, ForeignKey, String

from marketplace_feed.infrastructure.database import Base, created_at_default
from marketplace_feed.utils import new_uuid, now_in_app_timezone


class SupportTicketModel(Base):
    """Database representation of a support request opened by a user."""

    __tablename__ = "support_tickets"

    id = Column(String(36), primary_key=True, default=new_uuid)
    ticket_number = Column(String(30), nullable=True)
    user_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    subject = Column(String(200), nullable=False)
    status = Column(String(30), nullable=False, default="open")
    priority = Column(String(20), nullable=False, default="normal")
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=created_at_default,
        onupdate=now_in_app_timezone,
    )


__all__ = ["SupportTicketModel"]

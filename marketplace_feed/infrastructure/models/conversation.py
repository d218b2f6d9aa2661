"""SQLAlchemy model for messaging conversations."""

from sqlalchemy import Column, DateTime, ForeignKey, String

from marketplace_feed.infrastructure.database import Base
from marketplace_feed.utils import new_uuid, now_in_app_timezone


class ConversationModel(Base):
    """Database representation of a conversation between two users."""

    __tablename__ = "conversations"

    id = Column(String(36), primary_key=True, default=new_uuid)
    participant1_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    participant2_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )


__all__ = ["ConversationModel"]

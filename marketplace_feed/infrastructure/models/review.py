"""SQLAlchemy model for listing reviews."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from marketplace_feed.infrastructure.database import Base
from marketplace_feed.utils import new_uuid, now_in_app_timezone


class ReviewModel(Base):
    """Database representation of a rating left by a seeker."""

    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=new_uuid)
    listing_id = Column(
        String(36), ForeignKey("listings.id", ondelete="SET NULL"), nullable=True, index=True
    )
    seeker_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )


__all__ = ["ReviewModel"]

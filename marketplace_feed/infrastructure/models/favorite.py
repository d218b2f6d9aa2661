"""SQLAlchemy model for favorited listings."""

from sqlalchemy import Column, DateTime, ForeignKey, String

from marketplace_feed.infrastructure.database import Base
from marketplace_feed.utils import new_uuid, now_in_app_timezone


class FavoriteModel(Base):
    """Database representation of a listing saved by a user."""

    __tablename__ = "favorites"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=True, index=True
    )
    listing_id = Column(
        String(36), ForeignKey("listings.id", ondelete="CASCADE"), nullable=True, index=True
    )
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )


__all__ = ["FavoriteModel"]

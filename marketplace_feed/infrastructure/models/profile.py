"""SQLAlchemy model for marketplace user profiles."""

from sqlalchemy import Column, DateTime, String

from marketplace_feed.infrastructure.database import Base, created_at_default
from marketplace_feed.utils import new_uuid, now_in_app_timezone


class ProfileModel(Base):
    """Database representation of a registered seeker, partner or admin."""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=new_uuid)
    first_name = Column(String(80), nullable=True)
    last_name = Column(String(80), nullable=True)
    role = Column(String(30), nullable=False, default="seeker")
    status = Column(String(30), nullable=False, default="active")
    avatar_url = Column(String(255), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=created_at_default,
        onupdate=now_in_app_timezone,
    )


__all__ = ["ProfileModel"]

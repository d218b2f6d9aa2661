"""Read helpers for marketplace profiles."""

from __future__ import annotations

from sqlalchemy.orm import Session

from marketplace_feed.infrastructure.models import ProfileModel
from marketplace_feed.utils import now_in_app_timezone

ADMIN_ROLES = frozenset({"admin", "super_admin"})


class ProfileRepository:
    """Answer questions about profiles needed to authorize feed viewers."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_role(self, profile_id: str) -> str | None:
        row = (
            self.session.query(ProfileModel.role, ProfileModel.status)
            .filter(ProfileModel.id == profile_id)
            .one_or_none()
        )
        if row is None or row.status != "active":
            return None
        return row.role

    def is_admin(self, profile_id: str) -> bool:
        """Return ``True`` when ``profile_id`` is an active administrator."""

        role = self.get_role(profile_id)
        return role is not None and role.lower() in ADMIN_ROLES

    def create(
        self,
        *,
        first_name: str,
        last_name: str | None = None,
        role: str = "seeker",
        avatar_url: str | None = None,
    ) -> str:
        """Persist a new active profile and return its id."""

        first_name = (first_name or "").strip()
        if not first_name:
            raise ValueError("first_name is required")
        role = (role or "").strip().lower()
        if not role:
            raise ValueError("role is required")

        model = ProfileModel()
        model.first_name = first_name
        model.last_name = (last_name or "").strip() or None
        model.role = role
        model.status = "active"
        model.avatar_url = avatar_url
        model.created_at = now_in_app_timezone()
        model.updated_at = model.created_at
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return model.id


__all__ = ["ADMIN_ROLES", "ProfileRepository"]

"""Repository implementations for infrastructure layer."""

from .notification_repository import NotificationRepository
from .profile_repository import ADMIN_ROLES, ProfileRepository

__all__ = [
    "ADMIN_ROLES",
    "NotificationRepository",
    "ProfileRepository",
]

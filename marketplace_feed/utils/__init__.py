"""Utility helpers for reusable functionality."""

from .identifiers import is_uuid, new_uuid
from .datetime import (
    coerce_datetime,
    ensure_app_timezone,
    get_app_timezone,
    now_in_app_timezone,
)

__all__ = [
    "coerce_datetime",
    "ensure_app_timezone",
    "get_app_timezone",
    "now_in_app_timezone",
    "is_uuid",
    "new_uuid",
]

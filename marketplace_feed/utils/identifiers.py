"""Helpers for the UUID identifiers used by stored records."""

from __future__ import annotations

import uuid


def new_uuid() -> str:
    """Return a new random UUID in its canonical string form."""

    return str(uuid.uuid4())


def is_uuid(value: object) -> bool:
    """Return ``True`` when ``value`` is a canonical UUID string."""

    if not isinstance(value, str) or len(value) != 36:
        return False
    try:
        return str(uuid.UUID(value)) == value.lower()
    except ValueError:
        return False

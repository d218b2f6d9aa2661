"""Domain entity describing a change observed on a source table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

CHANGE_INSERT = "INSERT"
CHANGE_UPDATE = "UPDATE"


@dataclass(frozen=True)
class ChangeEvent:
    """A row of ``source`` was inserted or updated."""

    source: str
    operation: str
    record: dict[str, Any] = field(default_factory=dict)


__all__ = ["CHANGE_INSERT", "CHANGE_UPDATE", "ChangeEvent"]

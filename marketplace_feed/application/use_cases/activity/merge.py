"""Combine normalized event batches into one ordered, duplicate-free list."""

from __future__ import annotations

from typing import Iterable

from marketplace_feed.domain.entities import ActivityEvent


def merge_events(*batches: Iterable[ActivityEvent]) -> list[ActivityEvent]:
    """Return every event of ``batches`` newest first, each id kept once.

    Sorting happens before deduplication so that, when two sources report the
    same id, the occurrence with the most recent timestamp wins. The sort is
    stable, so equal timestamps keep their batch order.
    """

    combined = [event for batch in batches for event in batch]
    combined.sort(key=lambda event: event.timestamp, reverse=True)

    seen: set[str] = set()
    merged: list[ActivityEvent] = []
    for event in combined:
        if event.id in seen:
            continue
        seen.add(event.id)
        merged.append(event)
    return merged


__all__ = ["merge_events"]

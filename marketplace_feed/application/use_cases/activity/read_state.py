"""Per-viewer read/unread overlay for feed events.

Two storage tiers are reconciled here:

* the **server tier** covers stored notification rows; their ``read`` column
  is the source of truth and acknowledgements are written back to the row;
* the **local tier** covers synthesized activity events, which have no row of
  their own, so their read ids live in a per-viewer durable store.

An event id is routed to exactly one tier by its shape: only a canonical UUID
can be a stored notification key.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable

from sqlalchemy.orm import Session

from marketplace_feed.domain.entities import ActivityEvent, FeedItem
from marketplace_feed.infrastructure.read_state_store import ReadStateStore
from marketplace_feed.infrastructure.repositories import NotificationRepository
from marketplace_feed.utils import is_uuid

logger = logging.getLogger(__name__)


class ServerReadTier:
    """Acknowledge stored notification rows through :class:`NotificationRepository`."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def mark_read(self, viewer_id: str, event_ids: Iterable[str]) -> int:
        with self._session_factory() as session:
            return NotificationRepository(session).mark_as_read(event_ids, user_id=viewer_id)

    def mark_all_read(self, viewer_id: str) -> int:
        with self._session_factory() as session:
            return NotificationRepository(session).mark_all_as_read(user_id=viewer_id)


class LocalReadTier:
    """Thin adapter naming the durable store operations used by the tracker."""

    def __init__(self, store: ReadStateStore) -> None:
        self._store = store

    def load(self, viewer_id: str) -> set[str]:
        return self._store.get(viewer_id)

    def save(self, viewer_id: str, event_ids: set[str]) -> None:
        self._store.put(viewer_id, event_ids)


class ReadStateTracker:
    """Answer and record whether ``viewer_id`` has read a given event."""

    def __init__(
        self,
        viewer_id: str,
        server_tier: ServerReadTier,
        local_tier: LocalReadTier,
    ) -> None:
        if not viewer_id:
            raise ValueError("viewer_id is required")
        self.viewer_id = viewer_id
        self._server = server_tier
        self._local = local_tier
        self._local_ids: set[str] | None = None
        # Acknowledged rows stay stale in the current list until the next pass.
        self._server_marked: set[str] = set()
        self._lock = threading.Lock()

    @staticmethod
    def is_server_id(event_id: str) -> bool:
        return is_uuid(event_id)

    def is_read(self, event: ActivityEvent) -> bool:
        if self.is_server_id(event.id):
            with self._lock:
                if event.id in self._server_marked:
                    return True
            return bool(event.source_ref.get("read"))
        with self._lock:
            return event.id in self._local_set()

    def annotate(self, events: Iterable[ActivityEvent]) -> list[FeedItem]:
        """Pair every event with its current read flag."""

        return [FeedItem(event=event, read=self.is_read(event)) for event in events]

    def mark_read(self, event_id: str) -> None:
        if self.is_server_id(event_id):
            changed = self._server.mark_read(self.viewer_id, [event_id])
            with self._lock:
                self._server_marked.add(event_id)
            logger.debug(
                "Viewer %s acknowledged notification %s (%d rows updated)",
                self.viewer_id,
                event_id,
                changed,
            )
            return

        with self._lock:
            current = self._local_set()
            if event_id in current:
                return
            updated = current | {event_id}
            self._local.save(self.viewer_id, updated)
            self._local_ids = updated

    def mark_all_read(self, event_ids: Iterable[str]) -> None:
        """Acknowledge every id in ``event_ids`` in one write per tier."""

        server_ids: set[str] = set()
        local_ids: set[str] = set()
        for event_id in event_ids:
            (server_ids if self.is_server_id(event_id) else local_ids).add(event_id)

        if server_ids:
            changed = self._server.mark_all_read(self.viewer_id)
            with self._lock:
                self._server_marked.update(server_ids)
            logger.info("Marked %d notifications read for viewer %s", changed, self.viewer_id)

        if local_ids:
            with self._lock:
                current = self._local_set()
                if local_ids <= current:
                    return
                updated = current | local_ids
                self._local.save(self.viewer_id, updated)
                self._local_ids = updated

    def preload(self) -> None:
        """Load the local tier so later overlays never touch the store."""

        with self._lock:
            self._local_set()

    def _local_set(self) -> set[str]:
        if self._local_ids is None:
            self._local_ids = self._local.load(self.viewer_id)
        return self._local_ids


__all__ = ["LocalReadTier", "ReadStateTracker", "ServerReadTier"]

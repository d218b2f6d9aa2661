"""One viewer's aggregated feed: fan-out, merge, read overlay, window and live updates."""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Mapping, Sequence

import anyio
from anyio import to_thread
from sqlalchemy.orm import Session

from marketplace_feed.domain.entities import (
    ActivityEvent,
    ChangeEvent,
    FeedKind,
    FeedUpdate,
    FeedWindow,
)
from marketplace_feed.infrastructure.notifications import ChangeFeedBroker, FeedEventBus
from marketplace_feed.infrastructure.sources import (
    DEFAULT_SOURCE_LIMIT,
    ConnectorResult,
    Filters,
    SourceConnector,
    run_connector,
)
from marketplace_feed.utils import now_in_app_timezone

from .live_updates import LiveUpdateListener, RefreshCoalescer, Watch
from .merge import merge_events
from .normalizer import normalize_records
from .read_state import ReadStateTracker
from .windowing import FeedWindowController

logger = logging.getLogger(__name__)

AGGREGATION_ERROR = "Failed to load activity feed"
DEFAULT_REFRESH_DEBOUNCE = 1.0


class ActivityFeedService:
    """Assemble and keep current the feed shown to ``viewer_id``.

    Every aggregation pass runs all connectors concurrently, each in a worker
    thread, and waits for all of them before merging. A failing connector only
    removes its own events (it is listed in ``degraded_sources``); any other
    failure keeps the previous list and reports ``error`` instead.
    """

    def __init__(
        self,
        viewer_id: str,
        connectors: Sequence[SourceConnector],
        *,
        session_factory: Callable[[], Session],
        read_state: ReadStateTracker,
        kind: FeedKind = FeedKind.ACTIVITIES,
        window: FeedWindowController | None = None,
        broker: ChangeFeedBroker | None = None,
        bus: FeedEventBus | None = None,
        is_authorized: Callable[[str], bool] | None = None,
        filters: Mapping[str, Filters] | None = None,
        source_limit: int = DEFAULT_SOURCE_LIMIT,
        refresh_debounce: float = DEFAULT_REFRESH_DEBOUNCE,
    ) -> None:
        if not viewer_id:
            raise ValueError("viewer_id is required")
        self.viewer_id = viewer_id
        self.kind = kind
        self._connectors = tuple(connectors)
        self._session_factory = session_factory
        self._read_state = read_state
        self._window = window or FeedWindowController()
        self._bus = bus
        self._is_authorized = is_authorized
        self._filters = dict(filters or {})
        self._source_limit = source_limit

        self._listener = (
            LiveUpdateListener(broker, self._watches(), self._on_change) if broker else None
        )
        self._coalescer = RefreshCoalescer(partial(self.refresh, reason="change"), refresh_debounce)
        self._refresh_lock = anyio.Lock()

        self._opened = False
        self._authorized = True
        self._loading = False
        self._error: str | None = None
        self._degraded: list[str] = []
        self._refreshed_at = None

    @property
    def opened(self) -> bool:
        return self._opened

    @property
    def live(self) -> bool:
        return self._listener is not None and self._listener.live

    @property
    def authorized(self) -> bool:
        return self._authorized

    async def open(self) -> FeedWindow:
        """Reset the window to its initial size, load the feed and go live."""

        self._opened = True
        self._window.reset()
        self._coalescer.reopen()
        try:
            await to_thread.run_sync(self._read_state.preload)
            if (
                self._listener is not None
                and not self._listener.live
                and await self._check_authorized()
            ):
                self._listener.start()
        except Exception:
            logger.exception(
                "Opening the %s feed for viewer %s failed", self.kind.value, self.viewer_id
            )
            self._error = AGGREGATION_ERROR
            self._publish("open")
            return self.get_window()
        return await self.refresh(reason="open")

    async def close(self) -> None:
        """Release change subscriptions and cancel any pending background refresh."""

        self._coalescer.close()
        if self._listener is not None:
            self._listener.close()
        self._opened = False
        logger.debug("Closed %s feed of viewer %s", self.kind.value, self.viewer_id)

    def get_window(self) -> FeedWindow:
        window = self._window
        return FeedWindow(
            events=self._read_state.annotate(window.visible()),
            total_count=window.total_count,
            display_count=window.display_count,
            has_more=window.has_more,
            unread_count=self.unread_count(),
            loading=self._loading,
            loading_more=window.loading_more,
            error=self._error,
            degraded_sources=list(self._degraded),
            live=self.live,
            refreshed_at=self._refreshed_at,
        )

    def unread_count(self) -> int:
        """Unread events in the whole feed, not only the visible window."""

        return sum(1 for event in self._window.events if not self._read_state.is_read(event))

    async def load_more(self) -> FeedWindow:
        if await self._window.load_more():
            self._publish("load_more")
        return self.get_window()

    async def mark_read(self, event_id: str) -> FeedWindow:
        if not event_id:
            raise ValueError("event_id is required")
        await to_thread.run_sync(self._read_state.mark_read, event_id)
        self._publish("read")
        return self.get_window()

    async def mark_all_read(self) -> FeedWindow:
        event_ids = [event.id for event in self._window.events]
        if event_ids:
            await to_thread.run_sync(self._read_state.mark_all_read, event_ids)
        self._publish("read_all")
        return self.get_window()

    async def refresh(self, reason: str = "refresh") -> FeedWindow:
        """Run one aggregation pass and swap in the result.

        Concurrent calls are serialized; the requested display count is kept.
        """

        async with self._refresh_lock:
            self._loading = True
            try:
                if not await self._check_authorized():
                    logger.info(
                        "Viewer %s may not see the %s feed", self.viewer_id, self.kind.value
                    )
                    self._window.replace([])
                    self._degraded = []
                    self._error = None
                else:
                    results = await self._gather()
                    events, degraded = self._collect(results)
                    self._window.replace(merge_events(events))
                    self._degraded = degraded
                    self._error = None
                self._refreshed_at = now_in_app_timezone()
            except Exception:
                logger.exception(
                    "Aggregating the %s feed for viewer %s failed", self.kind.value, self.viewer_id
                )
                self._error = AGGREGATION_ERROR
            finally:
                self._loading = False

        self._publish(reason)
        return self.get_window()

    async def _check_authorized(self) -> bool:
        if self._is_authorized is None:
            self._authorized = True
        else:
            self._authorized = bool(
                await to_thread.run_sync(self._is_authorized, self.viewer_id)
            )
        return self._authorized

    async def _gather(self) -> list[ConnectorResult]:
        results: list[ConnectorResult | None] = [None] * len(self._connectors)

        async def _run(index: int, connector: SourceConnector) -> None:
            results[index] = await to_thread.run_sync(
                partial(
                    run_connector,
                    connector,
                    self._session_factory,
                    limit=self._source_limit,
                    filters=self._filters.get(connector.name),
                )
            )

        async with anyio.create_task_group() as group:
            for index, connector in enumerate(self._connectors):
                group.start_soon(_run, index, connector)
        return [result for result in results if result is not None]

    @staticmethod
    def _collect(results: Sequence[ConnectorResult]) -> tuple[list[ActivityEvent], list[str]]:
        events: list[ActivityEvent] = []
        degraded: list[str] = []
        for result in results:
            if result.failed:
                degraded.append(result.name)
                continue
            events.extend(normalize_records(result.name, result.rows))
        if degraded:
            logger.warning("Feed built without sources: %s", ", ".join(degraded))
        return events, degraded

    def _watches(self) -> list[Watch]:
        watches: list[Watch] = []
        for connector in self._connectors:
            predicate = connector.change_predicate(self._filters.get(connector.name))
            for table in connector.tables:
                watches.append((table, predicate))
        return watches

    def _on_change(self, change: ChangeEvent) -> None:
        logger.debug(
            "%s on '%s' schedules a refresh of viewer %s's %s feed",
            change.operation,
            change.source,
            self.viewer_id,
            self.kind.value,
        )
        self._coalescer.request()

    def _publish(self, reason: str) -> None:
        if self._bus is None:
            return
        self._bus.publish(
            FeedUpdate(
                viewer_id=self.viewer_id,
                kind=self.kind,
                window=self.get_window(),
                reason=reason,
            )
        )


__all__ = ["AGGREGATION_ERROR", "ActivityFeedService", "DEFAULT_REFRESH_DEBOUNCE"]

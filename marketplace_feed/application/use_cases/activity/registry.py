"""Keep one open feed service per viewer and feed kind."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import anyio
from sqlalchemy.orm import Session

from marketplace_feed.config import Settings
from marketplace_feed.domain.entities import FeedKind, FeedWindow
from marketplace_feed.infrastructure.notifications import ChangeFeedBroker, FeedEventBus
from marketplace_feed.infrastructure.read_state_store import (
    InMemoryReadStateStore,
    JsonFileReadStateStore,
    ReadStateStore,
)
from marketplace_feed.infrastructure.repositories import ProfileRepository
from marketplace_feed.infrastructure.sources import connector_filters, connectors_for

from .read_state import LocalReadTier, ReadStateTracker, ServerReadTier
from .service import ActivityFeedService
from .windowing import FeedWindowController

logger = logging.getLogger(__name__)

ServiceFactory = Callable[[str, FeedKind], ActivityFeedService]


def admin_authorizer(session_factory: Callable[[], Session]) -> Callable[[str], bool]:
    """Return a predicate granting the feed to active admin profiles only."""

    def is_authorized(viewer_id: str) -> bool:
        with session_factory() as session:
            return ProfileRepository(session).is_admin(viewer_id)

    return is_authorized


def build_read_state_store(settings: Settings) -> ReadStateStore:
    if settings.read_state_dir == ":memory:":
        return InMemoryReadStateStore()
    return JsonFileReadStateStore(Path(settings.read_state_dir))


class FeedServiceFactory:
    """Wire an :class:`ActivityFeedService` from the shared application collaborators."""

    def __init__(
        self,
        settings: Settings,
        session_factory: Callable[[], Session],
        *,
        store: ReadStateStore,
        broker: ChangeFeedBroker | None = None,
        bus: FeedEventBus | None = None,
        is_authorized: Callable[[str], bool] | None = None,
    ) -> None:
        self.settings = settings
        self.session_factory = session_factory
        self.store = store
        self.broker = broker
        self.bus = bus
        self.is_authorized = is_authorized

    def __call__(self, viewer_id: str, kind: FeedKind) -> ActivityFeedService:
        settings = self.settings
        tracker = ReadStateTracker(
            viewer_id,
            ServerReadTier(self.session_factory),
            LocalReadTier(self.store),
        )
        window = FeedWindowController(
            initial=settings.feed_initial_display_count,
            increment=settings.feed_display_increment,
            delay=settings.feed_load_more_delay,
        )
        return ActivityFeedService(
            viewer_id,
            connectors_for(kind),
            kind=kind,
            session_factory=self.session_factory,
            read_state=tracker,
            window=window,
            broker=self.broker,
            bus=self.bus,
            is_authorized=self.is_authorized,
            filters=connector_filters(kind, viewer_id),
            source_limit=settings.feed_source_limit,
            refresh_debounce=settings.feed_refresh_debounce,
        )


class FeedSessionRegistry:
    """Open feed services on first use and close them on demand or shutdown."""

    def __init__(self, factory: ServiceFactory) -> None:
        self._factory = factory
        self._sessions: dict[tuple[str, FeedKind], ActivityFeedService] = {}
        self._lock = anyio.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, key: object) -> bool:
        return key in self._sessions

    async def get(self, viewer_id: str, kind: FeedKind) -> ActivityFeedService:
        """Return the open service for ``(viewer_id, kind)``, opening it if needed.

        A service whose first open fails is not kept, so the next call opens
        a fresh one.
        """

        key = (viewer_id, kind)
        async with self._lock:
            service = self._sessions.get(key)
            if service is None:
                service = self._factory(viewer_id, kind)
                self._sessions[key] = service
                logger.info("Opening %s feed for viewer %s", kind.value, viewer_id)
                await self._open_new(key, service)
        return service

    async def open(self, viewer_id: str, kind: FeedKind) -> FeedWindow:
        """Open the feed afresh: a known session is reset to its initial window."""

        key = (viewer_id, kind)
        async with self._lock:
            service = self._sessions.get(key)
            if service is None:
                service = self._factory(viewer_id, kind)
                self._sessions[key] = service
                logger.info("Opening %s feed for viewer %s", kind.value, viewer_id)
                return await self._open_new(key, service)
        return await service.open()

    async def _open_new(
        self, key: tuple[str, FeedKind], service: ActivityFeedService
    ) -> FeedWindow:
        try:
            window = await service.open()
        except Exception:
            self._sessions.pop(key, None)
            await service.close()
            raise
        if window.error is not None:
            logger.warning(
                "Discarding %s feed of viewer %s after a failed open", key[1].value, key[0]
            )
            self._sessions.pop(key, None)
            await service.close()
        return window

    async def close(self, viewer_id: str, kind: FeedKind) -> bool:
        async with self._lock:
            service = self._sessions.pop((viewer_id, kind), None)
        if service is None:
            return False
        await service.close()
        return True

    async def close_all(self) -> None:
        async with self._lock:
            services = list(self._sessions.values())
            self._sessions.clear()
        for service in services:
            await service.close()
        if services:
            logger.info("Closed %d feed sessions", len(services))


__all__ = [
    "FeedServiceFactory",
    "FeedSessionRegistry",
    "ServiceFactory",
    "admin_authorizer",
    "build_read_state_store",
]

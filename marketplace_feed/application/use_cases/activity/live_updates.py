"""Turn change-feed notifications into debounced feed refreshes."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable

from marketplace_feed.domain.entities import ChangeEvent
from marketplace_feed.infrastructure.notifications import ChangeFeedBroker, ChangeSubscription
from marketplace_feed.infrastructure.sources import ChangePredicate

logger = logging.getLogger(__name__)

Watch = tuple[str, ChangePredicate | None]


class LiveUpdateListener:
    """Subscribe to every watched table and forward changes onto the event loop.

    Change callbacks run on whichever thread committed the write, so they are
    handed to the loop captured in :meth:`start` with ``call_soon_threadsafe``.
    """

    def __init__(
        self,
        broker: ChangeFeedBroker,
        watches: Iterable[Watch],
        on_change: Callable[[ChangeEvent], None],
    ) -> None:
        unique: list[Watch] = []
        for watch in watches:
            if watch not in unique:
                unique.append(watch)
        self._broker = broker
        self._watches = unique
        self._on_change = on_change
        self._handles: list[ChangeSubscription] = []
        self._loop: asyncio.AbstractEventLoop | None = None
        self._closed = False

    @property
    def live(self) -> bool:
        return bool(self._handles) and not self._closed

    @property
    def handles(self) -> list[ChangeSubscription]:
        return list(self._handles)

    def start(self) -> bool:
        """Subscribe to all watches; return ``False`` in pull-only mode."""

        self._loop = asyncio.get_running_loop()
        self._closed = False
        try:
            for table, predicate in self._watches:
                self._handles.append(self._broker.subscribe(table, predicate, self._forward))
        except Exception as exc:
            logger.warning("Live updates unavailable, feed stays pull-only: %s", exc)
            self.close()
            return False
        logger.debug("Listening for changes on %d tables", len(self._handles))
        return True

    def close(self) -> None:
        self._closed = True
        handles, self._handles = self._handles, []
        for handle in handles:
            handle.release()

    def _forward(self, change: ChangeEvent) -> None:
        loop = self._loop
        if self._closed or loop is None or loop.is_closed():
            return
        try:
            loop.call_soon_threadsafe(self._deliver, change)
        except RuntimeError:
            logger.debug("Event loop gone, dropping change on '%s'", change.source)

    def _deliver(self, change: ChangeEvent) -> None:
        if not self._closed:
            self._on_change(change)


class RefreshCoalescer:
    """Debounce refresh requests into at most one running pass.

    Every :meth:`request` pushes the deadline ``delay`` seconds forward. Once
    it expires the refresh runs; requests made while it runs schedule exactly
    one trailing pass.
    """

    def __init__(self, refresh: Callable[[], Awaitable[object]], delay: float) -> None:
        if delay < 0:
            raise ValueError("delay cannot be negative")
        self._refresh = refresh
        self.delay = delay
        self._deadline: float | None = None
        self._worker: asyncio.Task | None = None
        self._closed = False
        self.passes = 0

    @property
    def pending(self) -> bool:
        return self._worker is not None

    def request(self) -> None:
        if self._closed:
            return
        loop = asyncio.get_running_loop()
        self._deadline = loop.time() + self.delay
        if self._worker is None:
            self._worker = loop.create_task(self._run())

    def close(self) -> None:
        self._closed = True
        self._deadline = None
        worker, self._worker = self._worker, None
        if worker is not None and not worker.done():
            worker.cancel()

    def reopen(self) -> None:
        """Accept requests again after :meth:`close`."""

        self._closed = False

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        try:
            while self._deadline is not None:
                remaining = self._deadline - loop.time()
                if remaining > 0:
                    await asyncio.sleep(remaining)
                    continue
                self._deadline = None
                self.passes += 1
                try:
                    await self._refresh()
                except Exception:
                    logger.exception("Background feed refresh failed")
        finally:
            if self._worker is asyncio.current_task():
                self._worker = None


__all__ = ["LiveUpdateListener", "RefreshCoalescer", "Watch"]

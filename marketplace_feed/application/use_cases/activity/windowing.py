"""Growable display window over a fully merged feed."""

from __future__ import annotations

import logging
from typing import Iterable

import anyio

from marketplace_feed.domain.entities import ActivityEvent

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_COUNT = 20
DEFAULT_INCREMENT = 20
DEFAULT_LOAD_MORE_DELAY = 0.3


class FeedWindowController:
    """Expose the first ``display_count`` events of the current full list.

    The full list is only ever swapped as a whole, so a reader always sees
    either the previous or the next aggregation pass. The requested display
    count survives swaps; only :meth:`reset` brings it back to the initial
    size.
    """

    def __init__(
        self,
        initial: int = DEFAULT_INITIAL_COUNT,
        increment: int = DEFAULT_INCREMENT,
        delay: float = DEFAULT_LOAD_MORE_DELAY,
    ) -> None:
        if initial <= 0 or increment <= 0:
            raise ValueError("initial and increment must be positive")
        if delay < 0:
            raise ValueError("delay cannot be negative")
        self.initial = initial
        self.increment = increment
        self.delay = delay
        self._events: list[ActivityEvent] = []
        self._requested = initial
        self._loading_more = False
        self._generation = 0

    @property
    def total_count(self) -> int:
        return len(self._events)

    @property
    def display_count(self) -> int:
        return min(self._requested, len(self._events))

    @property
    def has_more(self) -> bool:
        return self.display_count < self.total_count

    @property
    def loading_more(self) -> bool:
        return self._loading_more

    @property
    def events(self) -> list[ActivityEvent]:
        return self._events

    def visible(self) -> list[ActivityEvent]:
        events = self._events
        return events[: min(self._requested, len(events))]

    def replace(self, events: Iterable[ActivityEvent]) -> None:
        self._events = list(events)

    def reset(self) -> None:
        """Back to the initial window with nothing visible until the next swap."""

        self._requested = self.initial
        self._events = []
        self._generation += 1

    async def load_more(self) -> bool:
        """Reveal up to ``increment`` more events after a short delay.

        Returns ``False`` without waiting when a request is already in flight
        or everything is visible. A :meth:`reset` during the delay discards
        the request.
        """

        if self._loading_more or self.display_count >= self.total_count:
            return False

        self._loading_more = True
        generation = self._generation
        try:
            await anyio.sleep(self.delay)
            if generation != self._generation:
                logger.debug("Discarding load-more superseded by a window reset")
                return False
            target = min(self.display_count + self.increment, self.total_count)
            self._requested = max(self._requested, target)
        finally:
            self._loading_more = False
        return True


__all__ = [
    "DEFAULT_INCREMENT",
    "DEFAULT_INITIAL_COUNT",
    "DEFAULT_LOAD_MORE_DELAY",
    "FeedWindowController",
]

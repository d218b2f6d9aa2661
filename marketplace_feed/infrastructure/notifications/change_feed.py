"""In-process change feed fed by SQLAlchemy ORM events."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Any, Callable, DefaultDict, Iterable

from sqlalchemy import event, inspect
from sqlalchemy.orm import Mapper, Session, object_session

from marketplace_feed.domain.entities import CHANGE_INSERT, CHANGE_UPDATE, ChangeEvent
from marketplace_feed.infrastructure.database import Base

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[ChangeEvent], None]
ChangeFilter = Callable[[ChangeEvent], bool]


class ChangeSubscription:
    """Handle returned by :meth:`ChangeFeedBroker.subscribe`."""

    def __init__(self, broker: "ChangeFeedBroker", source: str) -> None:
        self._broker = broker
        self.source = source
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Stop delivering changes to this subscriber. Safe to call twice."""

        if self._released:
            return
        self._released = True
        self._broker._discard(self)


class ChangeFeedBroker:
    """Route :class:`ChangeEvent` objects to subscribers grouped by table.

    ``publish`` may run on any thread (typically the one that committed the
    write); callbacks run synchronously on that thread.
    """

    def __init__(self) -> None:
        self._subscribers: DefaultDict[
            str, dict[ChangeSubscription, tuple[ChangeFilter | None, ChangeCallback]]
        ] = defaultdict(dict)
        self._lock = threading.Lock()

    def subscribe(
        self,
        source: str,
        predicate: ChangeFilter | None,
        on_change: ChangeCallback,
    ) -> ChangeSubscription:
        """Register ``on_change`` for changes of ``source`` matching ``predicate``."""

        if not source:
            raise ValueError("A source table is required to subscribe")
        subscription = ChangeSubscription(self, source)
        with self._lock:
            self._subscribers[source][subscription] = (predicate, on_change)
        return subscription

    def publish(self, change: ChangeEvent) -> None:
        with self._lock:
            targets = list(self._subscribers.get(change.source, {}).values())
        for predicate, callback in targets:
            try:
                if predicate is not None and not predicate(change):
                    continue
                callback(change)
            except Exception:
                logger.exception("Change subscriber for '%s' failed", change.source)

    def subscriber_count(self, source: str | None = None) -> int:
        with self._lock:
            if source is not None:
                return len(self._subscribers.get(source, {}))
            return sum(len(subscribers) for subscribers in self._subscribers.values())

    def _discard(self, subscription: ChangeSubscription) -> None:
        with self._lock:
            subscribers = self._subscribers.get(subscription.source)
            if subscribers is None:
                return
            subscribers.pop(subscription, None)
            if not subscribers:
                self._subscribers.pop(subscription.source, None)


def _snapshot(target: Any) -> dict[str, Any]:
    state = inspect(target)
    loaded = state.dict
    return {
        column.key: loaded[column.key]
        for column in state.mapper.column_attrs
        if column.key in loaded
    }


def install_change_hooks(
    broker: ChangeFeedBroker, models: Iterable[type] | None = None
) -> Callable[[], None]:
    """Publish committed inserts and updates of ``models`` (default: every mapped model).

    Flushed rows are queued on their session and only published once that
    session commits; a rollback discards them. Returns a callable that removes
    the hooks again.
    """

    mapped = list(models) if models is not None else [
        mapper.class_ for mapper in Base.registry.mappers
    ]
    installed: list[tuple[Any, str, Callable[..., None]]] = []
    queue_key = ("pending_changes", id(broker))

    def _make_listener(operation: str) -> Callable[[Mapper, Any, Any], None]:
        def listener(mapper: Mapper, connection: Any, target: Any) -> None:
            change = ChangeEvent(
                source=mapper.local_table.name,
                operation=operation,
                record=_snapshot(target),
            )
            session = object_session(target)
            if session is None:
                broker.publish(change)
                return
            session.info.setdefault(queue_key, []).append(change)

        return listener

    def _after_commit(session: Session) -> None:
        for change in session.info.pop(queue_key, []):
            broker.publish(change)

    def _after_rollback(session: Session) -> None:
        dropped = session.info.pop(queue_key, [])
        if dropped:
            logger.debug("Discarding %d uncommitted changes", len(dropped))

    for model in mapped:
        for identifier, operation in (
            ("after_insert", CHANGE_INSERT),
            ("after_update", CHANGE_UPDATE),
        ):
            listener = _make_listener(operation)
            event.listen(model, identifier, listener)
            installed.append((model, identifier, listener))
    for identifier, listener in (
        ("after_commit", _after_commit),
        ("after_rollback", _after_rollback),
    ):
        event.listen(Session, identifier, listener)
        installed.append((Session, identifier, listener))

    def uninstall() -> None:
        for target, identifier, listener in installed:
            if event.contains(target, identifier, listener):
                event.remove(target, identifier, listener)
        installed.clear()

    return uninstall


change_feed_broker = ChangeFeedBroker()


__all__ = [
    "ChangeCallback",
    "ChangeFeedBroker",
    "ChangeFilter",
    "ChangeSubscription",
    "change_feed_broker",
    "install_change_hooks",
]

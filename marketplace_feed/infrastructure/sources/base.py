"""Contract shared by every read-only source connector."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from sqlalchemy.orm import Query, Session

from marketplace_feed.domain.entities import ActivityCategory, ChangeEvent

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_LIMIT = 100

Filters = Mapping[str, Any]
FetchFunction = Callable[[Session, int, Filters], list[dict[str, Any]]]
ChangePredicate = Callable[[ChangeEvent], bool]


@dataclass(frozen=True)
class SourceConnector:
    """A fetcher for one category of domain events.

    ``tables`` lists the tables whose changes should trigger a refresh of the
    feed. ``watch_predicate`` narrows those changes for a given filter set.
    """

    name: str
    category: ActivityCategory | None
    tables: tuple[str, ...]
    fetch: FetchFunction
    watch_predicate: Callable[[Filters], ChangePredicate] | None = None

    def change_predicate(self, filters: Filters | None = None) -> ChangePredicate | None:
        if self.watch_predicate is None:
            return None
        return self.watch_predicate(filters or {})


@dataclass(frozen=True)
class ConnectorResult:
    """Outcome of one connector run: rows on success, an error otherwise."""

    name: str
    rows: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def run_connector(
    connector: SourceConnector,
    session_factory: Callable[[], Session],
    *,
    limit: int = DEFAULT_SOURCE_LIMIT,
    filters: Filters | None = None,
) -> ConnectorResult:
    """Run ``connector`` in its own session. Never raises.

    A failing source (unreachable backend, missing table, bad column) is
    logged and reported as an empty result carrying the error message.
    """

    try:
        with session_factory() as session:
            rows = connector.fetch(session, limit, filters or {})
    except Exception as exc:
        logger.warning("Source '%s' unavailable, skipping: %s", connector.name, exc)
        return ConnectorResult(name=connector.name, error=str(exc) or type(exc).__name__)

    logger.debug("Source '%s' returned %d rows", connector.name, len(rows))
    return ConnectorResult(name=connector.name, rows=rows)


def apply_filters(query: Query, model: type, filters: Filters) -> Query:
    """Apply equality ``filters`` whose keys are columns of ``model``."""

    columns = model.__table__.columns
    for key, value in filters.items():
        column = columns.get(key)
        if column is None:
            logger.debug("Ignoring filter '%s' unknown to table '%s'", key, model.__tablename__)
            continue
        query = query.filter(column == value)
    return query


def row_to_record(row: Any) -> dict[str, Any]:
    """Convert a labelled result row into a nested record.

    Columns labelled ``<relation>__<field>`` are grouped under ``relation``.
    A relation whose ``id`` is ``None`` (missing outer-join target) becomes
    ``None`` itself.
    """

    record: dict[str, Any] = {}
    nested: dict[str, dict[str, Any]] = {}
    for key, value in row._mapping.items():
        if "__" in key:
            relation, column = key.split("__", 1)
            nested.setdefault(relation, {})[column] = value
        else:
            record[key] = value
    for relation, values in nested.items():
        record[relation] = values if values.get("id") is not None else None
    return record


__all__ = [
    "ChangePredicate",
    "ConnectorResult",
    "DEFAULT_SOURCE_LIMIT",
    "FetchFunction",
    "Filters",
    "SourceConnector",
    "apply_filters",
    "row_to_record",
    "run_connector",
]

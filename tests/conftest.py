"""Shared fixtures for the feed engine tests."""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_TIMEZONE", "UTC")
os.environ.setdefault("READ_STATE_DIR", ":memory:")

from sqlalchemy.orm import sessionmaker

from marketplace_feed.application.use_cases.activity import (
    ActivityFeedService,
    FeedWindowController,
    LocalReadTier,
    ReadStateTracker,
    ServerReadTier,
)
from marketplace_feed.domain.entities import ActivityCategory, ActivityEvent, FeedKind, Priority
from marketplace_feed.infrastructure.database import build_engine, initialize_database
from marketplace_feed.infrastructure.models import ProfileModel
from marketplace_feed.infrastructure.read_state_store import InMemoryReadStateStore
from marketplace_feed.infrastructure.sources import connector_filters, connectors_for
from marketplace_feed.utils import new_uuid

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """Return ``BASE_TIME`` shifted by ``minutes``."""

    return BASE_TIME + timedelta(minutes=minutes)


def make_event(
    index: int, *, event_id: str | None = None, minutes: int | None = None
) -> ActivityEvent:
    return ActivityEvent(
        id=event_id or f"conversation_c{index}",
        category=ActivityCategory.CONVERSATION,
        kind="conversation_started",
        title="New Conversation Started",
        description="Users started a new conversation",
        timestamp=at(index if minutes is None else minutes),
        priority=Priority.LOW,
    )


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so every connector thread gets its own connection."""

    engine = build_engine(f"sqlite:///{tmp_path / 'feed.db'}")
    initialize_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Seeder:
    """Insert rows with explicit ids so callers never touch expired instances."""

    def __init__(self, session_factory: Callable[[], Any]) -> None:
        self._session_factory = session_factory

    def add(self, model: type, **fields: Any) -> str:
        fields.setdefault("id", new_uuid())
        with self._session_factory() as session:
            session.add(model(**fields))
            session.commit()
        return fields["id"]

    def update(self, model: type, row_id: str, **fields: Any) -> None:
        with self._session_factory() as session:
            instance = session.get(model, row_id)
            for key, value in fields.items():
                setattr(instance, key, value)
            session.commit()


@pytest.fixture
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)


@pytest.fixture
def admin_id(seed) -> str:
    return seed.add(
        ProfileModel,
        first_name="Ada",
        last_name="Admin",
        role="admin",
        created_at=BASE_TIME,
        updated_at=BASE_TIME,
    )


@pytest.fixture
def read_store() -> InMemoryReadStateStore:
    return InMemoryReadStateStore()


@pytest.fixture
def build_service(session_factory, read_store):
    """Return a builder wiring an :class:`ActivityFeedService` for tests."""

    def _build(
        viewer_id: str,
        kind: FeedKind = FeedKind.ACTIVITIES,
        *,
        connectors=None,
        store=None,
        **options: Any,
    ) -> ActivityFeedService:
        tracker = ReadStateTracker(
            viewer_id,
            ServerReadTier(session_factory),
            LocalReadTier(store or read_store),
        )
        options.setdefault("window", FeedWindowController(initial=20, increment=20, delay=0.01))
        options.setdefault("refresh_debounce", 0.05)
        service = ActivityFeedService(
            viewer_id,
            connectors if connectors is not None else connectors_for(kind),
            kind=kind,
            session_factory=session_factory,
            read_state=tracker,
            filters=connector_filters(kind, viewer_id),
            **options,
        )
        return service

    return _build

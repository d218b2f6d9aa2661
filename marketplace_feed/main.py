"""Application factory for the marketplace feed API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from marketplace_feed.application.use_cases.activity import (
    FeedServiceFactory,
    FeedSessionRegistry,
    admin_authorizer,
    build_read_state_store,
)
from marketplace_feed.config import Settings, get_settings
from marketplace_feed.infrastructure.database import SessionLocal, engine, initialize_database
from marketplace_feed.infrastructure.notifications import (
    change_feed_broker,
    feed_event_bus,
    feed_update_publisher,
    install_change_hooks,
)
from marketplace_feed.infrastructure.read_state_store import ReadStateStore
from marketplace_feed.interfaces.api.routes import register_routes

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once; later calls only adjust the level."""

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the schema and change hooks on startup, release everything on shutdown."""

    initialize_database()
    uninstall_hooks = install_change_hooks(change_feed_broker)
    feed_update_publisher.start()
    logger.info("Feed engine started")
    try:
        yield
    finally:
        await app.state.feed_registry.close_all()
        feed_update_publisher.stop()
        uninstall_hooks()
        engine.dispose()
        logger.info("Feed engine stopped")


def create_app(
    settings: Settings | None = None,
    *,
    session_factory: Callable[[], Session] | None = None,
    store: ReadStateStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or get_settings()
    configure_logging(settings.log_level)
    session_factory = session_factory or SessionLocal

    factory = FeedServiceFactory(
        settings,
        session_factory,
        store=store or build_read_state_store(settings),
        broker=change_feed_broker,
        bus=feed_event_bus,
        is_authorized=admin_authorizer(session_factory),
    )

    app = FastAPI(title="Marketplace activity feed", lifespan=lifespan)
    app.state.settings = settings
    app.state.feed_registry = FeedSessionRegistry(factory)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app

"""Endpoints serving the admin notifications feed."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, WebSocket, status

from marketplace_feed.application.use_cases.activity import FeedSessionRegistry
from marketplace_feed.domain.entities import FeedKind
from marketplace_feed.interfaces.api.dependencies import get_feed_registry, require_admin_viewer
from marketplace_feed.interfaces.api.routes_helpers import (
    acknowledge,
    serve_feed_websocket,
    window_to_schema,
)
from marketplace_feed.interfaces.api.schemas import (
    FeedWindowRead,
    MarkReadRequest,
    UnreadCountRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])

FEED = FeedKind.NOTIFICATIONS


@router.get("/feed", response_model=FeedWindowRead)
async def read_notifications_feed(
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> FeedWindowRead:
    """Return the visible window of the notifications feed, opening it on first use."""

    service = await registry.get(viewer_id, FEED)
    return window_to_schema(service.get_window())


@router.post("/open", response_model=FeedWindowRead)
async def open_notifications_feed(
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> FeedWindowRead:
    """Reload the feed and reset the window to its initial size."""

    return window_to_schema(await registry.open(viewer_id, FEED))


@router.post("/load-more", response_model=FeedWindowRead)
async def load_more_notifications(
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> FeedWindowRead:
    service = await registry.get(viewer_id, FEED)
    return window_to_schema(await service.load_more())


@router.post("/refresh", response_model=FeedWindowRead)
async def refresh_notifications_feed(
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> FeedWindowRead:
    service = await registry.get(viewer_id, FEED)
    return window_to_schema(await service.refresh())


@router.post("/read", response_model=FeedWindowRead)
async def mark_notifications_read(
    payload: MarkReadRequest,
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> FeedWindowRead:
    service = await registry.get(viewer_id, FEED)
    return window_to_schema(await acknowledge(service, payload))


@router.post("/read-all", response_model=FeedWindowRead)
async def mark_all_notifications_read(
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> FeedWindowRead:
    service = await registry.get(viewer_id, FEED)
    return window_to_schema(await service.mark_all_read())


@router.get("/unread-count", response_model=UnreadCountRead)
async def read_unread_count(
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> UnreadCountRead:
    """Return how many events of the whole notifications feed are still unread."""

    service = await registry.get(viewer_id, FEED)
    return UnreadCountRead(unread_count=service.unread_count())


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def close_notifications_feed(
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> Response:
    """Close the viewer's feed session and release its change subscriptions."""

    await registry.close(viewer_id, FEED)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    await serve_feed_websocket(websocket, FEED)


__all__ = ["router"]

"""Endpoints serving the aggregated all-activities feed."""

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
from marketplace_feed.interfaces.api.schemas import FeedWindowRead, MarkReadRequest

router = APIRouter(prefix="/activity", tags=["activity"])

FEED = FeedKind.ACTIVITIES


@router.get("/feed", response_model=FeedWindowRead)
async def read_activity_feed(
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> FeedWindowRead:
    """Return the visible window of the activity feed, opening it on first use."""

    service = await registry.get(viewer_id, FEED)
    return window_to_schema(service.get_window())


@router.post("/open", response_model=FeedWindowRead)
async def open_activity_feed(
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> FeedWindowRead:
    """Reload the feed and reset the window to its initial size."""

    return window_to_schema(await registry.open(viewer_id, FEED))


@router.post("/load-more", response_model=FeedWindowRead)
async def load_more_activity(
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> FeedWindowRead:
    service = await registry.get(viewer_id, FEED)
    return window_to_schema(await service.load_more())


@router.post("/refresh", response_model=FeedWindowRead)
async def refresh_activity_feed(
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> FeedWindowRead:
    service = await registry.get(viewer_id, FEED)
    return window_to_schema(await service.refresh())


@router.post("/read", response_model=FeedWindowRead)
async def mark_activity_read(
    payload: MarkReadRequest,
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> FeedWindowRead:
    service = await registry.get(viewer_id, FEED)
    return window_to_schema(await acknowledge(service, payload))


@router.post("/read-all", response_model=FeedWindowRead)
async def mark_all_activity_read(
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> FeedWindowRead:
    service = await registry.get(viewer_id, FEED)
    return window_to_schema(await service.mark_all_read())


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def close_activity_feed(
    viewer_id: str = Depends(require_admin_viewer),
    registry: FeedSessionRegistry = Depends(get_feed_registry),
) -> Response:
    """Close the viewer's feed session and release its change subscriptions."""

    await registry.close(viewer_id, FEED)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.websocket("/ws")
async def activity_websocket(websocket: WebSocket) -> None:
    await serve_feed_websocket(websocket, FEED)


__all__ = ["router"]

"""Helper utilities shared by the feed route handlers."""

from __future__ import annotations

import logging

from fastapi import HTTPException, WebSocket, WebSocketDisconnect, status

from marketplace_feed.application.use_cases.activity import ActivityFeedService
from marketplace_feed.domain.entities import FeedKind, FeedWindow
from marketplace_feed.infrastructure.notifications import (
    channel_for,
    feed_connection_manager,
    serialize_feed_window,
)
from marketplace_feed.interfaces.api.schemas import FeedWindowRead, MarkReadRequest

logger = logging.getLogger(__name__)


def window_to_schema(window: FeedWindow) -> FeedWindowRead:
    return FeedWindowRead.model_validate(serialize_feed_window(window))


async def acknowledge(service: ActivityFeedService, payload: MarkReadRequest) -> FeedWindow:
    """Mark every id of ``payload`` read and return the resulting window."""

    event_ids = payload.unique_ids()
    if not event_ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one non-empty event id is required",
        )
    window = service.get_window()
    for event_id in event_ids:
        window = await service.mark_read(event_id)
    return window


async def serve_feed_websocket(websocket: WebSocket, kind: FeedKind) -> None:
    """Stream ``kind`` feed windows to the viewer named in the query string.

    Clients may send ``{"type": "ping"}``, ``{"type": "ack", "ids": [...]}``
    and ``{"type": "load-more"}``; every resulting window is pushed back as a
    ``{"type": "feed"}`` message by the feed update publisher.
    """

    viewer_id = (websocket.query_params.get("viewer_id") or "").strip()
    if not viewer_id:
        await websocket.close(code=1008)
        return

    registry = websocket.app.state.feed_registry
    try:
        service = await registry.get(viewer_id, kind)
    except Exception:
        logger.exception("Could not open %s feed for viewer %s", kind.value, viewer_id)
        await websocket.close(code=1011)
        return

    if not service.authorized:
        await registry.close(viewer_id, kind)
        await websocket.close(code=1008)
        return

    channel = channel_for(kind.value, viewer_id)
    await feed_connection_manager.connect(channel, websocket)
    try:
        await websocket.send_json(
            {
                "type": "feed",
                "reason": "init",
                "data": serialize_feed_window(service.get_window()),
            }
        )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list):
                    for event_id in ids:
                        if isinstance(event_id, str) and event_id.strip():
                            await service.mark_read(event_id.strip())
                continue

            if message_type == "load-more":
                await service.load_more()
                continue
    except WebSocketDisconnect:
        pass
    finally:
        feed_connection_manager.disconnect(channel, websocket)


__all__ = ["acknowledge", "serve_feed_websocket", "window_to_schema"]

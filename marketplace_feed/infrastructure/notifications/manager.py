"""Connection management helpers for feed websockets."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, DefaultDict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class FeedConnectionManager:
    """Manage active websocket connections grouped by feed channel.

    A channel is the ``"<feed kind>:<viewer id>"`` string built by
    :func:`channel_for`.
    """

    def __init__(self) -> None:
        self._connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)

    async def connect(self, channel: str, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it for ``channel``."""

        await websocket.accept()
        self._connections[channel].add(websocket)

    def disconnect(self, channel: str, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the pool for ``channel``."""

        connections = self._connections.get(channel)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(channel, None)

    def connection_count(self, channel: str) -> int:
        return len(self._connections.get(channel, ()))

    async def send_to_channel(self, channel: str, message: dict[str, Any]) -> None:
        """Send ``message`` to every active connection on ``channel``."""

        connections = list(self._connections.get(channel, set()))
        for connection in connections:
            try:
                await connection.send_json(message)
            except Exception as exc:
                logger.info("Dropping feed websocket on %s: %s", channel, exc)
                self.disconnect(channel, connection)


def channel_for(kind: str, viewer_id: str) -> str:
    return f"{kind}:{viewer_id}"


feed_connection_manager = FeedConnectionManager()


__all__ = ["FeedConnectionManager", "channel_for", "feed_connection_manager"]

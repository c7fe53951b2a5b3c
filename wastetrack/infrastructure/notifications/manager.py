"""Connection management helpers for client websockets."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Set

from anyio import from_thread
from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ClientConnectionManager:
    """Track the websockets of the application clients currently open."""

    def __init__(self) -> None:
        self._connections: Set[WebSocket] = set()

    async def connect(self, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it."""

        await websocket.accept()
        self._connections.add(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the pool."""

        self._connections.discard(websocket)

    def has_connections(self) -> bool:
        return bool(self._connections)

    async def broadcast(self, message: dict[str, Any]) -> int:
        """Send ``message`` to every active connection and return how many got it."""

        delivered = 0
        for connection in list(self._connections):
            try:
                await connection.send_json(message)
            except Exception as exc:
                logger.info("Dropping client connection after send failure: %s", exc)
                self.disconnect(connection)
                continue
            delivered += 1
        return delivered

    def publish(self, message: dict[str, Any]) -> None:
        """Schedule a broadcast of ``message`` from sync or async code.

        Request handlers running in the worker thread pool hand the send back
        to the event loop through ``anyio``.
        """

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            from_thread.run(self.broadcast, message)
        else:
            loop.create_task(self.broadcast(message))


__all__ = ["ClientConnectionManager"]

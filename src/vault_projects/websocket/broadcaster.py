"""Push index changes to WebSocket clients."""

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any

from fastapi import WebSocket

from vault_projects.project_index import ProjectIndex

logger = logging.getLogger(__name__)


class IndexBroadcaster:
    """Tracks WebSocket clients and tells them when the index was rebuilt."""

    def __init__(self) -> None:
        """Initialize with no clients."""
        self.active_connections: list[WebSocket] = []
        self._background_tasks: set[asyncio.Task[None]] = set()

    async def connect(self, websocket: WebSocket) -> None:
        """Accept and register a client."""
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"[IndexBroadcaster] Client connected (total: {len(self.active_connections)})")

    def disconnect(self, websocket: WebSocket) -> None:
        """Forget a client."""
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info(
                f"[IndexBroadcaster] Client disconnected (total: {len(self.active_connections)})"
            )

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Send a JSON message to every client, dropping dead ones."""
        if not self.active_connections:
            return

        message_json = json.dumps(message)
        dead_connections = []
        for connection in list(self.active_connections):
            try:
                await connection.send_text(message_json)
            except Exception as e:
                logger.warning(f"[IndexBroadcaster] Failed to send to client: {e}")
                dead_connections.append(connection)

        for connection in dead_connections:
            self.disconnect(connection)

    def attach(self, index: ProjectIndex) -> Callable[[], None]:
        """Subscribe to index rebuilds; must be called from the event loop.

        Returns:
            Unsubscribe function
        """
        loop = asyncio.get_running_loop()

        def on_change() -> None:
            snapshot = index.snapshot
            message = {
                "type": "reindexed",
                "projects": len(snapshot.projects),
                "tasks": len(snapshot.tasks),
                "milestones": len(snapshot.milestones),
            }
            task = loop.create_task(self.broadcast(message))
            self._background_tasks.add(task)
            task.add_done_callback(self._background_tasks.discard)

        return index.on_change(on_change)

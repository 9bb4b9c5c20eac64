from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Set

from starlette.websockets import WebSocket, WebSocketState

from carwash_api.schemas.realtime import DashboardMetrics, WsEnvelope

logger = logging.getLogger(__name__)

DASHBOARD_TOPIC = "dashboard"


class BroadcastManager:
    """
    Simple in-process pub-sub manager for WebSocket topics.

    The dashboard topic receives a metrics snapshot after every sale,
    work-order or stock change.
    """

    def __init__(self) -> None:
        self._topics: Dict[str, Set[WebSocket]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _topic_lock(self, topic: str) -> asyncio.Lock:
        if topic not in self._locks:
            self._locks[topic] = asyncio.Lock()
        return self._locks[topic]

    # PUBLIC_INTERFACE
    def subscriber_count(self, topic: str = DASHBOARD_TOPIC) -> int:
        """Number of sockets currently subscribed to a topic."""
        return len(self._topics.get(topic, ()))

    # PUBLIC_INTERFACE
    async def connect(self, topic: str, websocket: WebSocket) -> None:
        """Add an accepted websocket to the topic subscribers."""
        async with self._topic_lock(topic):
            self._topics.setdefault(topic, set()).add(websocket)
            logger.info("WebSocket connected to topic=%s; subscribers=%d", topic, len(self._topics[topic]))

    # PUBLIC_INTERFACE
    async def disconnect(self, topic: str, websocket: WebSocket) -> None:
        """Remove websocket from topic subscribers."""
        if topic not in self._topics:
            return
        async with self._topic_lock(topic):
            self._topics[topic].discard(websocket)
            logger.info("WebSocket disconnected from topic=%s; subscribers=%d", topic, len(self._topics[topic]))

    # PUBLIC_INTERFACE
    async def broadcast(self, topic: str, message: dict, exclude: Optional[WebSocket] = None) -> None:
        """Broadcast a JSON-ready dict to all subscribers in the topic; dead sockets are dropped."""
        if not self._topics.get(topic):
            return
        async with self._topic_lock(topic):
            to_drop: list[WebSocket] = []
            for ws in list(self._topics[topic]):
                if exclude is not None and ws is exclude:
                    continue
                try:
                    if ws.application_state == WebSocketState.DISCONNECTED or ws.client_state == WebSocketState.DISCONNECTED:
                        to_drop.append(ws)
                        continue
                    await ws.send_json(message)
                except Exception:
                    logger.exception("Failed to send message to websocket; scheduling drop")
                    to_drop.append(ws)
            for ws in to_drop:
                self._topics[topic].discard(ws)

    # PUBLIC_INTERFACE
    async def publish_metrics_snapshot(self, snapshot: DashboardMetrics) -> None:
        """Publish a metrics snapshot to the dashboard topic."""
        env = WsEnvelope(type="metrics.snapshot", payload=snapshot.model_dump(mode="json"))
        await self.broadcast(DASHBOARD_TOPIC, env.model_dump(mode="json"))


# Singleton instance
broadcast_manager = BroadcastManager()

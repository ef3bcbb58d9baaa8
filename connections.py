import asyncio
import json
from typing import Dict, Iterable

from fastapi import WebSocket

from logging_config import get_logger
from registry import Delivery
from schemas.events import OutboundEvent

logger = get_logger(__name__)


class ConnectionManager:
    """Tracks live WebSocket connections on this instance and pushes events to them.

    Each connection gets its own outbound queue drained by a single sender
    task, so events for one recipient go out in the order they were queued.
    """

    def __init__(self):
        self.websockets: Dict[str, WebSocket] = {}
        self.queues: Dict[str, asyncio.Queue] = {}
        self.sender_tasks: Dict[str, asyncio.Task] = {}

    def register(self, connection_id: str, websocket: WebSocket):
        self.websockets[connection_id] = websocket
        self.queues[connection_id] = asyncio.Queue()
        self.sender_tasks[connection_id] = asyncio.create_task(self._sender(connection_id))
        logger.debug(f"Registered connection {connection_id} (live connections: {len(self.websockets)})")

    async def unregister(self, connection_id: str):
        self.websockets.pop(connection_id, None)
        self.queues.pop(connection_id, None)
        task = self.sender_tasks.pop(connection_id, None)
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.debug(f"Unregistered connection {connection_id} (live connections: {len(self.websockets)})")

    def send(self, connection_id: str, message: OutboundEvent):
        queue = self.queues.get(connection_id)
        if queue is None:
            # Recipient is gone; delivery is best effort
            logger.debug(f"Dropping {message.event} for unknown connection {connection_id}")
            return
        queue.put_nowait(message)

    def deliver(self, deliveries: Iterable[Delivery]):
        for delivery in deliveries:
            self.send(delivery.connection_id, delivery.message)

    def __len__(self):
        return len(self.websockets)

    async def _sender(self, connection_id: str):
        """Background task draining one connection's queue onto its socket."""
        queue = self.queues[connection_id]
        websocket = self.websockets[connection_id]
        try:
            while True:
                message = await queue.get()
                await websocket.send_text(json.dumps(message.envelope()))
        except Exception as e:
            logger.warning(f"Error sending to connection {connection_id}, stopping sender: {e}")
            self.queues.pop(connection_id, None)
            self.websockets.pop(connection_id, None)
            self.sender_tasks.pop(connection_id, None)


connection_manager = ConnectionManager()

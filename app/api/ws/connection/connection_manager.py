import logging
from typing import Dict, List, Optional

from fastapi import WebSocket

from app.core.settings import Settings
from .connection_handler import ConnectionHandler
from .model.connection import Connection
from .relay_dispatcher import RelayDispatcher
from .room_registry import RoomRegistry
from .sweeper import RoomSweeper

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Manages signaling connections and the rooms they meet in.
    Owns the room registry, the relay dispatcher and the room sweeper;
    one instance is created per application and kept on ``app.state``.
    """

    def __init__(self, settings: Settings, registry: Optional[RoomRegistry] = None):
        self.settings = settings
        self.registry = registry or RoomRegistry(room_id_bytes=settings.room_id_bytes)
        self.dispatcher = RelayDispatcher(self.registry)
        self.sweeper = RoomSweeper(
            self.registry,
            ttl=settings.room_ttl_seconds,
            interval=settings.sweep_interval_seconds,
            clock=self.registry.clock,
        )
        self.active_connections: Dict[str, Connection] = {}

    def create_handler(self, websocket: WebSocket) -> ConnectionHandler:
        handler = ConnectionHandler(
            websocket,
            self.registry,
            self.dispatcher,
            require_existing_room=self.settings.require_existing_room,
            relay_binary=self.settings.relay_binary,
            queue_size=self.settings.outbound_queue_size,
            on_closed=self._forget,
        )
        self.active_connections[handler.connection.connection_id] = handler.connection
        return handler

    async def serve(self, websocket: WebSocket, room_id: Optional[str] = None):
        """
        Run the signaling lifecycle for one WebSocket until it closes.

        Args:
            websocket: The WebSocket connection to serve
            room_id: Optional room to join as soon as the socket is accepted
        """
        handler = self.create_handler(websocket)
        await handler.run(initial_room=room_id)

    def _forget(self, connection: Connection):
        self.active_connections.pop(connection.connection_id, None)

    async def create_room(self) -> str:
        return await self.registry.create_room()

    def get_all_rooms_info(self) -> List[Dict]:
        return self.registry.rooms_info()

    def get_total_connections(self) -> int:
        """
        Get the total number of active connections.

        Returns:
            Total number of active connections
        """
        return len(self.active_connections)

    def start(self):
        self.sweeper.start()

    async def shutdown(self):
        await self.sweeper.stop()
        for connection in list(self.active_connections.values()):
            await connection.close(code=1001, reason="Server shutting down")
        self.active_connections.clear()

import logging
from typing import Any, Callable, Optional

from fastapi import WebSocketDisconnect

from app.core.exceptions import MalformedMessage, RoomFull, RoomIdExhausted, RoomNotFound, TransportError
from .model import message as msg
from .model.connection import Connection, ConnectionState
from .model.room import Role
from .relay_dispatcher import RelayDispatcher
from .room_registry import JoinResult, RoomRegistry

logger = logging.getLogger(__name__)


class ConnectionHandler:
    """
    Drives one client's signaling lifecycle:
    Connected -> Joining -> InRoom -> Closed.

    Leave, transport close and write failures all end in ``close()``,
    which runs its cleanup at most once.
    """

    def __init__(
        self,
        websocket: Any,
        registry: RoomRegistry,
        dispatcher: RelayDispatcher,
        require_existing_room: bool = False,
        relay_binary: bool = True,
        queue_size: int = 256,
        on_closed: Optional[Callable[[Connection], None]] = None,
    ):
        self.registry = registry
        self.dispatcher = dispatcher
        self.require_existing_room = require_existing_room
        self.relay_binary = relay_binary
        self.on_closed = on_closed
        self.connection = Connection(websocket, queue_size=queue_size)
        self.connection.on_transport_error = self._on_transport_error
        self._closed = False

    @property
    def state(self) -> ConnectionState:
        return self.connection.state

    async def run(self, initial_room: Optional[str] = None):
        """Accept the transport and process frames until it closes."""
        connection = self.connection
        websocket = connection.websocket
        try:
            await websocket.accept()
            connection.start()
            logger.info(f"Connection {connection.connection_id} opened")

            if initial_room:
                await self.join(initial_room)
            while connection.state is not ConnectionState.CLOSED:
                event = await websocket.receive()
                if event.get("type") == "websocket.disconnect":
                    break
                data_bytes = event.get("bytes")
                data_text = event.get("text")
                if data_bytes is not None:
                    await self.handle_bytes(data_bytes)
                elif data_text is not None:
                    await self.handle_text(data_text)
                else:
                    logger.debug(f"Received event: {event}")
        except WebSocketDisconnect:
            logger.info(f"Connection {connection.connection_id} disconnected by client.")
        except Exception as e:
            logger.error(f"Unexpected error on connection {connection.connection_id}: {e}", exc_info=True)
        finally:
            await self.close()

    async def handle_text(self, raw: str):
        try:
            message = msg.parse_client_message(raw)
        except MalformedMessage as e:
            logger.warning(f"Malformed message from {self.connection.connection_id}: {e.message}")
            self.dispatcher.notify(self.connection, msg.error("Invalid message format"))
            return

        if isinstance(message, msg.JoinMessage):
            await self.join(message.room_id)
        elif isinstance(message, msg.CreateMessage):
            await self.create()
        elif isinstance(message, msg.LeaveMessage):
            await self.close(explicit=True)
        elif isinstance(message, msg.LogMessage):
            logger.info(f"[client {self.connection.connection_id}] {message.message}")
        else:
            await self.dispatcher.relay(self.connection, raw)

    async def handle_bytes(self, data: bytes):
        if not self.relay_binary:
            logger.warning(f"Binary frame from {self.connection.connection_id} dropped: binary relay disabled")
            return
        await self.dispatcher.relay(self.connection, data)

    def _can_join(self) -> bool:
        connection = self.connection
        if connection.state is ConnectionState.CLOSED:
            return False
        if connection.state is ConnectionState.IN_ROOM and not self._still_seated():
            logger.info(f"Room {connection.room_id} of {connection.connection_id} no longer exists")
            connection.room_id = None
            connection.state = ConnectionState.CONNECTED
        if connection.state is not ConnectionState.CONNECTED:
            self.dispatcher.notify(connection, msg.error(f"Already in room {connection.room_id}"))
            return False
        return True

    def _still_seated(self) -> bool:
        room = self.registry.get_room(self.connection.room_id)
        return room is not None and room.has_connection(self.connection)

    def _back_to_connected(self):
        if not self._closed:
            self.connection.state = ConnectionState.CONNECTED

    async def create(self):
        """Allocate a fresh room and enter it as its first member."""
        if not self._can_join():
            return
        self.connection.state = ConnectionState.JOINING
        try:
            room_id = await self.registry.create_room()
        except RoomIdExhausted as e:
            logger.error(e.message)
            self._back_to_connected()
            self.dispatcher.notify(self.connection, msg.error("Could not allocate a room"))
            return
        await self._join(room_id, create_missing=True)

    async def join(self, room_id: str):
        if not self._can_join():
            return
        self.connection.state = ConnectionState.JOINING
        await self._join(room_id, create_missing=not self.require_existing_room)

    async def _join(self, room_id: str, create_missing: bool):
        connection = self.connection
        try:
            result = await self.registry.join(room_id, connection, create_missing=create_missing)
        except RoomFull:
            logger.info(f"Connection {connection.connection_id} rejected: room {room_id} is full")
            self._back_to_connected()
            self.dispatcher.notify(connection, msg.room_full(room_id))
            return
        except RoomNotFound as e:
            logger.info(f"Connection {connection.connection_id} rejected: {e.message}")
            self._back_to_connected()
            self.dispatcher.notify(connection, msg.error(e.message))
            return

        if self._closed:
            # closed while waiting on the registry
            await self.registry.leave(room_id, connection)
            return
        await self._enter_room(room_id, result)

    async def _enter_room(self, room_id: str, result: JoinResult):
        connection = self.connection
        connection.room_id = room_id
        connection.state = ConnectionState.IN_ROOM

        if result.role is Role.FIRST:
            self.dispatcher.notify(connection, msg.created(room_id, result.peer_count))
            return

        self.dispatcher.notify(connection, msg.joined(room_id, result.peer_count))
        if result.peer is not None:
            self.dispatcher.notify(result.peer, msg.peer_joined(room_id, result.peer_count))

    async def _on_transport_error(self, error: TransportError):
        logger.info(f"Transport error on {self.connection.connection_id}: {error.message}")
        await self.close(code=1011)

    async def close(self, explicit: bool = False, code: int = 1000):
        """
        Terminal transition. Removes the connection from its room and tells
        the remaining peer, then closes the transport.
        """
        if self._closed:
            return
        self._closed = True

        connection = self.connection
        room_id = connection.room_id
        connection.state = ConnectionState.CLOSED
        connection.alive = False

        if room_id is not None:
            remaining = await self.registry.leave(room_id, connection)
            if remaining is not None:
                notice = msg.peer_left(room_id) if explicit else msg.peer_disconnected(room_id)
                self.dispatcher.notify(remaining, notice)
            connection.room_id = None

        await connection.flush()
        await connection.close(code=code)
        if self.on_closed is not None:
            self.on_closed(connection)
        logger.info(f"Connection {connection.connection_id} closed")

import asyncio
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from app.core.exceptions import RoomFull, RoomIdExhausted, RoomNotFound
from .model.connection import Connection
from .model.room import Role, Room

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JoinResult:
    role: Role
    peer_count: int
    peer: Optional[Connection] = None


class RoomRegistry:
    """
    In-memory table of two-party rooms.

    Every mutation and every membership read runs under one lock, so
    concurrent joins on the same room cannot both pass the capacity check
    and forwarding never sees a half-removed member.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        room_id_bytes: int = 9,
        max_id_attempts: int = 16,
    ):
        self.rooms: Dict[str, Room] = {}
        self.clock = clock
        self.room_id_bytes = room_id_bytes
        self.max_id_attempts = max_id_attempts
        self._lock = asyncio.Lock()

    def _new_room(self, room_id: str) -> Room:
        room = Room(room_id=room_id, created_at=self.clock())
        self.rooms[room_id] = room
        logger.info(f"Room {room_id} created")
        return room

    async def create_room(self) -> str:
        """
        Allocate an empty room under a fresh unpredictable identifier.

        Returns:
            str: The generated room ID
        """
        async with self._lock:
            for _ in range(self.max_id_attempts):
                room_id = secrets.token_urlsafe(self.room_id_bytes)
                if room_id not in self.rooms:
                    self._new_room(room_id)
                    return room_id
        raise RoomIdExhausted(f"No free room id after {self.max_id_attempts} attempts")

    async def get_or_create_room(self, room_id: str) -> Room:
        async with self._lock:
            room = self.rooms.get(room_id)
            if room is None:
                room = self._new_room(room_id)
            return room

    async def join(self, room_id: str, connection: Connection, create_missing: bool = True) -> JoinResult:
        """
        Add a connection to a room if a slot is free.

        Args:
            room_id: The ID of the room to join
            connection: The joining connection
            create_missing: Create the room when it does not exist yet

        Raises:
            RoomFull: Both slots are already occupied
            RoomNotFound: The room does not exist and create_missing is False
        """
        async with self._lock:
            room = self.rooms.get(room_id)
            if room is None:
                if not create_missing:
                    raise RoomNotFound(room_id)
                room = self._new_room(room_id)

            if room.has_connection(connection):
                count = room.get_connection_count()
                role = Role.FIRST if count == 1 else Role.SECOND
            else:
                role = room.add_connection(connection)
                if role is None:
                    raise RoomFull(room_id)
                count = room.get_connection_count()
            peer = room.peer_of(connection)

        logger.info(f"Connection {connection.connection_id} joined room {room_id} ({count}/2)")
        return JoinResult(role=role, peer_count=count, peer=peer)

    async def leave(self, room_id: str, connection: Connection) -> Optional[Connection]:
        """
        Remove a connection from a room, deleting the room once it is empty.

        Returns:
            The member still in the room, if any
        """
        async with self._lock:
            room = self.rooms.get(room_id)
            if room is None or not room.remove_connection(connection):
                return None
            remaining = next(iter(room.members), None)
            if room.is_empty():
                del self.rooms[room_id]
                logger.info(f"Room {room_id} deleted")

        logger.info(f"Connection {connection.connection_id} left room {room_id}")
        return remaining

    async def peer_of(self, room_id: str, connection: Connection) -> Optional[Connection]:
        async with self._lock:
            room = self.rooms.get(room_id)
            if room is None:
                return None
            return room.peer_of(connection)

    async def sweep_expired(self, now: float, ttl: float) -> List[str]:
        """
        Delete every room older than ``ttl`` seconds. Members still present
        are dropped without notification.
        """
        async with self._lock:
            expired = [room_id for room_id, room in self.rooms.items() if room.age(now) > ttl]
            for room_id in expired:
                del self.rooms[room_id]

        for room_id in expired:
            logger.info(f"Room {room_id} expired and was removed")
        return expired

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    @property
    def room_count(self) -> int:
        return len(self.rooms)

    def rooms_info(self) -> List[Dict]:
        """
        Get information about all rooms.

        Returns:
            List of dictionaries with room information
        """
        now = self.clock()
        return [
            {
                "roomId": room_id,
                "count": room.get_connection_count(),
                "ageSeconds": round(room.age(now), 3),
            }
            for room_id, room in self.rooms.items()
        ]

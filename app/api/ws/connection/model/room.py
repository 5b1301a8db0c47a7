# room.py

import time
from enum import Enum
from typing import Optional, List, TYPE_CHECKING

if TYPE_CHECKING:
    from .connection import Connection


class Role(str, Enum):
    FIRST = "first"
    SECOND = "second"


class Room:
    """
    A rendezvous point for two peers.

    Membership is held in two slots so a room can never have more than
    two members. ``slot_a`` is taken by the first arrival.
    """

    def __init__(self, room_id: str, created_at: Optional[float] = None):
        self.room_id = room_id
        self.slot_a: Optional["Connection"] = None
        self.slot_b: Optional["Connection"] = None
        self.created_at = created_at if created_at is not None else time.monotonic()

    @property
    def members(self) -> List["Connection"]:
        return [c for c in (self.slot_a, self.slot_b) if c is not None]

    def is_full(self) -> bool:
        return self.slot_a is not None and self.slot_b is not None

    def is_empty(self) -> bool:
        return self.slot_a is None and self.slot_b is None

    def has_connection(self, connection: "Connection") -> bool:
        """Check if a connection occupies one of this room's slots."""
        return self.slot_a is connection or self.slot_b is connection

    def add_connection(self, connection: "Connection") -> Optional[Role]:
        """
        Place a connection in the first free slot.

        Returns the arrival role, or None when both slots are occupied.
        """
        if self.is_full():
            return None
        role = Role.FIRST if self.is_empty() else Role.SECOND
        if self.slot_a is None:
            self.slot_a = connection
        else:
            self.slot_b = connection
        return role

    def remove_connection(self, connection: "Connection") -> bool:
        """Free the slot held by a connection. Returns False if it held none."""
        if self.slot_a is connection:
            self.slot_a = None
        elif self.slot_b is connection:
            self.slot_b = None
        else:
            return False
        return True

    def peer_of(self, connection: "Connection") -> Optional["Connection"]:
        if self.slot_a is connection:
            return self.slot_b
        if self.slot_b is connection:
            return self.slot_a
        return None

    def get_connection_count(self) -> int:
        """Get the number of connections in this room."""
        return len(self.members)

    def age(self, now: float) -> float:
        return now - self.created_at

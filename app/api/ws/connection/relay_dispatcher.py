import logging

from app.core.exceptions import PeerUnavailable
from .model.connection import Connection, Frame
from .room_registry import RoomRegistry

logger = logging.getLogger(__name__)


class RelayDispatcher:
    """
    Forwards frames from one room member to the other.

    Frames are passed through untouched: text stays text, bytes stay bytes.
    """

    def __init__(self, registry: RoomRegistry):
        self.registry = registry

    async def resolve_peer(self, sender: Connection) -> Connection:
        """
        Find the writable peer of the sender's room.

        Raises:
            PeerUnavailable: No room, no peer, or the peer cannot take frames
        """
        if sender.room_id is None:
            raise PeerUnavailable(f"{sender.connection_id} is not in a room")
        peer = await self.registry.peer_of(sender.room_id, sender)
        if peer is None:
            raise PeerUnavailable(f"no peer in room {sender.room_id}")
        if not peer.is_writable:
            raise PeerUnavailable(f"peer {peer.connection_id} not writable")
        return peer

    async def relay(self, sender: Connection, frame: Frame) -> bool:
        """
        Deliver a frame to the sender's peer.

        Returns:
            bool: True if the frame was queued for the peer. Frames with no
            reachable peer are dropped silently.
        """
        try:
            peer = await self.resolve_peer(sender)
        except PeerUnavailable as e:
            logger.debug(f"Dropping frame from {sender.connection_id}: {e.message}")
            return False
        return peer.enqueue(frame)

    def notify(self, connection: Connection, payload: dict) -> bool:
        """Queue a server notification for a single connection."""
        return connection.send_json(payload)

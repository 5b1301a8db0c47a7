from typing import Optional

from fastapi import APIRouter, WebSocket
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["signaling"],
)


@router.websocket("/ws")
async def signaling_endpoint(websocket: WebSocket, room: Optional[str] = None):
    """
    Signaling socket. Clients send JSON control and negotiation frames;
    binary frames are relayed to the peer as-is. ``?room=<id>`` joins a
    room as soon as the socket opens.
    """
    connection_manager = websocket.app.state.connection_manager
    logger.info("New signaling websocket connection")
    await connection_manager.serve(websocket, room_id=room or None)

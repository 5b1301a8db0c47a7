from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from typing import List
import logging

from app.core.exceptions import RoomIdExhausted
from app.core.security import require_api_key

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["rooms"],
)


class CreatedRoom(BaseModel):
    """A freshly allocated room."""
    roomId: str


class RoomInfo(BaseModel):
    roomId: str
    count: int = Field(ge=0, le=2)
    ageSeconds: float


class RelayStatus(BaseModel):
    """Snapshot of the relay's rooms and connections."""
    rooms: List[RoomInfo]
    room_count: int
    connection_count: int


@router.get("/create", response_model=CreatedRoom)
async def create_room(request: Request):
    """
    Allocate an empty room and return its identifier. The first client to
    join it over the signaling socket becomes its creator.
    """
    connection_manager = request.app.state.connection_manager
    try:
        room_id = await connection_manager.create_room()
    except RoomIdExhausted as e:
        logger.error(f"Failed to create room: {e.message}")
        raise HTTPException(status_code=503, detail="Could not allocate a room")

    logger.info(f"Room {room_id} created over HTTP")
    return CreatedRoom(roomId=room_id)


@router.get("/status", response_model=RelayStatus, dependencies=[Depends(require_api_key)])
async def get_status(request: Request):
    """Debug introspection of the in-memory rooms."""
    connection_manager = request.app.state.connection_manager
    rooms = connection_manager.get_all_rooms_info()
    return RelayStatus(
        rooms=[RoomInfo(**info) for info in rooms],
        room_count=len(rooms),
        connection_count=connection_manager.get_total_connections(),
    )

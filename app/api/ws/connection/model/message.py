"""
Wire messages exchanged over the signaling WebSocket.

Inbound text frames are JSON objects tagged by ``type``. They are decoded
once, here, into one of the models below. Negotiation payloads are only
tagged, never inspected: the relay forwards the original frame text.
"""
from typing import Annotated, Literal, Optional, Union, get_args

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from app.core.exceptions import MalformedMessage

NegotiationType = Literal[
    "offer",
    "answer",
    "ice-candidate",
    "candidate",
    "ice",
    "signal",
    "meta",
    "done",
]

NEGOTIATION_TYPES = get_args(NegotiationType)


class CreateMessage(BaseModel):
    type: Literal["create", "create-session"]


class JoinMessage(BaseModel):
    type: Literal["join", "join-session"]
    room_id: str = Field(
        min_length=1,
        max_length=128,
        validation_alias=AliasChoices("roomId", "room", "sessionId", "session"),
    )


class LeaveMessage(BaseModel):
    type: Literal["leave"]


class LogMessage(BaseModel):
    type: Literal["log"]
    message: Optional[str] = Field(default=None, validation_alias=AliasChoices("message", "msg"))


class NegotiationMessage(BaseModel):
    """Opaque payload for the peer. Extra fields are kept but never read."""
    model_config = ConfigDict(extra="allow")

    type: NegotiationType


ClientMessage = Annotated[
    Union[CreateMessage, JoinMessage, LeaveMessage, LogMessage, NegotiationMessage],
    Field(discriminator="type"),
]

_client_message_adapter = TypeAdapter(ClientMessage)


def parse_client_message(raw: str) -> ClientMessage:
    """Decode an inbound text frame, raising MalformedMessage on failure."""
    try:
        return _client_message_adapter.validate_json(raw)
    except ValidationError as e:
        raise MalformedMessage(f"Invalid message format: {e.error_count()} error(s)") from e


def notification(kind: str, **fields) -> dict:
    """Build a server-to-client status notification."""
    return {"type": kind, **{k: v for k, v in fields.items() if v is not None}}


def created(room_id: str, count: int = 1) -> dict:
    return notification("created", roomId=room_id, count=count)


def joined(room_id: str, count: int) -> dict:
    return notification("joined", roomId=room_id, count=count)


def peer_joined(room_id: str, count: int) -> dict:
    return notification("peer-joined", roomId=room_id, count=count)


def room_full(room_id: str) -> dict:
    return notification("full", roomId=room_id)


def peer_left(room_id: str) -> dict:
    return notification("peer-left", roomId=room_id)


def peer_disconnected(room_id: str) -> dict:
    return notification("peer-disconnected", roomId=room_id)


def error(message: str) -> dict:
    return notification("error", message=message)

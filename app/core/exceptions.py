class ErrorCodes:
    MALFORMED_MESSAGE = 100
    ROOM_FULL = 200
    ROOM_NOT_FOUND = 201
    ROOM_ID_EXHAUSTED = 202
    PEER_UNAVAILABLE = 300
    TRANSPORT_ERROR = 301


class RelayError(Exception):
    code = 0

    def __init__(self, message: str, code: int = None):
        self.code = code if code is not None else self.code
        self.message = message
        super().__init__(f"[{self.code}] {message}")


class MalformedMessage(RelayError):
    """Inbound frame could not be decoded into a known message kind."""
    code = ErrorCodes.MALFORMED_MESSAGE


class RoomFull(RelayError):
    code = ErrorCodes.ROOM_FULL

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(f"Room {room_id} is full")


class RoomNotFound(RelayError):
    code = ErrorCodes.ROOM_NOT_FOUND

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


class RoomIdExhausted(RelayError):
    code = ErrorCodes.ROOM_ID_EXHAUSTED


class PeerUnavailable(RelayError):
    code = ErrorCodes.PEER_UNAVAILABLE


class TransportError(RelayError):
    """A write to a connection's transport failed."""
    code = ErrorCodes.TRANSPORT_ERROR

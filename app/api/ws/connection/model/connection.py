# connection.py

import asyncio
import json
import logging
import uuid
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from app.core.exceptions import TransportError

logger = logging.getLogger(__name__)

Frame = Union[str, bytes]


class ConnectionState(Enum):
    CONNECTED = "connected"
    JOINING = "joining"
    IN_ROOM = "in_room"
    CLOSED = "closed"


class Connection:
    """
    One live client transport.

    Outbound frames go through a bounded queue drained by a writer task,
    so delivering to a connection never waits on its network I/O.
    """

    def __init__(self, websocket: Any, connection_id: Optional[str] = None, queue_size: int = 256):
        self.connection_id = connection_id or f"conn_{uuid.uuid4().hex[:12]}"
        self.websocket = websocket
        self.room_id: Optional[str] = None
        self.state = ConnectionState.CONNECTED
        self.alive = True
        self.on_transport_error: Optional[Callable[[TransportError], Awaitable[None]]] = None
        self._outbound: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._writer_task: Optional[asyncio.Task] = None

    def __repr__(self) -> str:
        return f"<Connection {self.connection_id} state={self.state.value} room={self.room_id}>"

    @property
    def is_writable(self) -> bool:
        return self.alive and self.state is not ConnectionState.CLOSED and not self._outbound.full()

    def start(self):
        """Start the writer task draining the outbound queue."""
        if self._writer_task is None:
            self._writer_task = asyncio.create_task(
                self._drain(), name=f"writer-{self.connection_id}"
            )

    def enqueue(self, frame: Frame) -> bool:
        """
        Queue a frame for delivery without waiting.

        Returns False when the connection is closed or its queue is saturated;
        the frame is skipped in that case.
        """
        if not self.alive or self.state is ConnectionState.CLOSED:
            return False
        try:
            self._outbound.put_nowait(frame)
        except asyncio.QueueFull:
            logger.warning(f"Outbound queue full for {self.connection_id}, frame skipped")
            return False
        return True

    def send_json(self, payload: dict) -> bool:
        return self.enqueue(json.dumps(payload))

    async def _drain(self):
        while True:
            frame = await self._outbound.get()
            try:
                if isinstance(frame, (bytes, bytearray)):
                    await self.websocket.send_bytes(bytes(frame))
                else:
                    await self.websocket.send_text(frame)
            except Exception as e:
                self.alive = False
                logger.info(f"Write to {self.connection_id} failed: {e}")
                if self.on_transport_error is not None:
                    await self.on_transport_error(TransportError(str(e)))
                return
            finally:
                self._outbound.task_done()

    async def flush(self, timeout: float = 1.0):
        """Wait until queued frames are written, the writer stops, or the timeout elapses."""
        writer = self._writer_task
        if writer is None or writer.done() or writer is asyncio.current_task():
            return
        drained = asyncio.ensure_future(self._outbound.join())
        await asyncio.wait({drained, writer}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        if not drained.done():
            drained.cancel()
            logger.debug(f"Gave up flushing {self.connection_id}")

    async def close(self, code: int = 1000, reason: str = ""):
        """Stop the writer task and close the underlying transport."""
        self.alive = False
        self.state = ConnectionState.CLOSED
        task = self._writer_task
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        try:
            await self.websocket.close(code=code, reason=reason)
        except Exception as e:
            logger.debug(f"Transport for {self.connection_id} already closed: {e}")

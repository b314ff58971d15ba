import asyncio
import json
import uuid
from typing import Optional, Protocol

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from logging_config import get_logger

logger = get_logger(__name__)


class Connection(Protocol):
    """One bidirectional message channel to one peer."""

    connection_id: str

    @property
    def is_open(self) -> bool: ...

    def send(self, message: dict) -> None: ...

    def mark_closed(self) -> None: ...


class WebSocketConnection:
    """Connection backed by a FastAPI WebSocket.

    ``send`` never blocks: frames are queued and written in order by a single
    writer task, so messages from one sender reach the peer in the order sent.
    """

    def __init__(self, websocket: WebSocket, connection_id: Optional[str] = None):
        self.websocket = websocket
        self.connection_id = connection_id or str(uuid.uuid4())
        self._outbox: asyncio.Queue = asyncio.Queue()
        self._closed = asyncio.Event()
        self._writer: Optional[asyncio.Task] = None

    def start(self):
        if self._writer is None:
            self._writer = asyncio.create_task(self._write_loop())
            logger.debug(f"Started writer for connection {self.connection_id}")

    @property
    def is_open(self) -> bool:
        return (
            not self._closed.is_set()
            and self.websocket.client_state == WebSocketState.CONNECTED
        )

    def send(self, message: dict) -> None:
        if self._closed.is_set():
            logger.debug(f"Dropping {message.get('type')} for closed connection {self.connection_id}")
            return
        self._outbox.put_nowait(json.dumps(message))

    def mark_closed(self) -> None:
        self._closed.set()

    async def _write_loop(self):
        try:
            while True:
                data = await self._outbox.get()
                try:
                    await self.websocket.send_text(data)
                except Exception as e:
                    # Peer went away mid-send; the receive loop will run teardown
                    logger.warning(f"Error sending to connection {self.connection_id}: {e}")
                    self.mark_closed()
                    return
        except asyncio.CancelledError:
            logger.debug(f"Writer cancelled for connection {self.connection_id}")
            raise

    async def close(self):
        """Stop the writer and close the underlying socket if it is still up."""
        self.mark_closed()
        if self._writer is not None:
            self._writer.cancel()
            try:
                await self._writer
            except asyncio.CancelledError:
                pass
            self._writer = None
        if self.websocket.client_state == WebSocketState.CONNECTED:
            try:
                await self.websocket.close()
            except Exception as e:
                logger.debug(f"Error closing WebSocket {self.connection_id}: {e}")

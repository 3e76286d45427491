import asyncio
import uuid
from typing import Callable

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from errors import RelayInvariantError
from logging_config import get_logger
from schemas.messages import WireMessage

logger = get_logger(__name__)

_CLOSE = object()


def _ignore(*args):
    return None


class Connection:
    """One peer's WebSocket, seen through replaceable message/close handlers.

    Whoever owns the connection (the Server before a join, a Room after) swaps
    ``on_message`` and ``on_close``. Handlers run synchronously on the event
    loop, so state they touch is never interleaved with another handler.

    ``send`` and ``close`` never block: outbound frames go through a queue
    drained by a writer task, so a slow peer only delays itself.
    """

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.connection_id = uuid.uuid4().hex[:8]
        self.on_message: Callable[[str], None] = _ignore
        self.on_close: Callable[[], None] = _ignore
        self._outbox: asyncio.Queue = asyncio.Queue()
        self._closing = False

    def send(self, message: WireMessage):
        if self._closing:
            logger.debug(f"Not sending {message.type} to closing connection {self.connection_id}")
            return
        self._outbox.put_nowait(message.to_json())

    def close(self):
        if self._closing:
            return
        self._closing = True
        self._outbox.put_nowait(_CLOSE)

    def detach(self):
        """Drop both handlers; later frames and the close event are ignored."""
        self.on_message = _ignore
        self.on_close = _ignore

    async def _drain_outbox(self):
        while True:
            item = await self._outbox.get()
            if item is _CLOSE:
                try:
                    if self.websocket.application_state != WebSocketState.DISCONNECTED:
                        await self.websocket.close()
                except Exception as e:
                    logger.debug(f"Error closing WebSocket {self.connection_id}: {e}")
                return
            try:
                await self.websocket.send_text(item)
            except Exception as e:
                # The receive loop notices the disconnect and fires on_close.
                logger.warning(f"Error sending to connection {self.connection_id}: {e}")
                self._closing = True
                return

    def _dispatch(self, handler: Callable, *args):
        try:
            handler(*args)
        except RelayInvariantError as e:
            logger.error(f"Invariant violation on connection {self.connection_id}: {e}", exc_info=True)

    async def serve(self):
        """Pump inbound frames into ``on_message`` until the peer goes away, then fire ``on_close`` once."""
        writer = asyncio.create_task(self._drain_outbox())
        try:
            while True:
                event = await self.websocket.receive()
                if event["type"] == "websocket.disconnect":
                    logger.debug(f"Connection {self.connection_id} disconnected (code={event.get('code')})")
                    break
                text = event.get("text")
                if text is None:
                    logger.debug(f"Dropping binary frame from connection {self.connection_id}")
                    continue
                self._dispatch(self.on_message, text)
        finally:
            self._closing = True
            on_close = self.on_close
            self.detach()
            self._dispatch(on_close)
            if not writer.done():
                writer.cancel()
                try:
                    await writer
                except asyncio.CancelledError:
                    pass

"""
Message loop shared by every debug session.

``ProtocolServer`` reads requests from a connection and hands each to
:meth:`ProtocolServer.dispatch_request` without waiting for it to be
answered. Outbound messages are stamped with a sequence number and queued;
a writer task drains the queue in order. Two one-shot signals report how the
connection ended: ``on_close`` for a clean end of stream or an explicit stop,
``on_error`` for a transport fault.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import Optional

from dapsession.errors import TransportError
from dapsession.utils.events import Signal

if TYPE_CHECKING:
    from dapsession.protocol.messages import Request
    from dapsession.transport.connection import ConnectionBase

logger = logging.getLogger(__name__)

# Seconds allowed for queued messages to reach the client once reading stops.
FLUSH_TIMEOUT = 2.0


class ProtocolServer:
    """Base class that owns the connection and the outbound message queue."""

    def __init__(self) -> None:
        self.connection: ConnectionBase | None = None
        self.running = False
        self.sequence_number = 0
        self.on_close = Signal("close", one_shot=True)
        self.on_error = Signal("error", one_shot=True)
        self._outgoing: asyncio.Queue[Optional[dict[str, Any]]] = asyncio.Queue()
        self._read_task: asyncio.Future[None] | None = None
        self._fault: BaseException | None = None
        self._closed = False

    @property
    def next_seq(self) -> int:
        """Get the next sequence number for messages"""
        self.sequence_number += 1
        return self.sequence_number

    def dispatch_request(self, request: Request) -> None:
        """Route one inbound request. Must not block."""
        raise NotImplementedError

    async def start(self, connection: ConnectionBase) -> None:
        """Serve ``connection`` until the client goes away or a fault occurs."""
        self.connection = connection
        self.running = True
        self._read_task = asyncio.ensure_future(self._message_loop())
        write_task = asyncio.ensure_future(self._write_loop())
        try:
            await asyncio.wait({self._read_task, write_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            self.running = False
            if not self._read_task.done():
                self._read_task.cancel()
            if not write_task.done():
                self._outgoing.put_nowait(None)
                try:
                    await asyncio.wait_for(write_task, timeout=FLUSH_TIMEOUT)
                except asyncio.TimeoutError:
                    logger.warning("Timed out flushing outgoing messages")
            await asyncio.gather(self._read_task, return_exceptions=True)
            await self._cleanup()

    def stop(self) -> None:
        """Stop reading; queued messages are still flushed."""
        logger.info("Stopping protocol server")
        self.running = False
        if self._read_task is not None and not self._read_task.done():
            self._read_task.cancel()

    async def _cleanup(self) -> None:
        self._closed = True
        if self.connection is not None and self.connection.is_connected:
            try:
                await self.connection.close()
            except (TransportError, ConnectionError, OSError):
                logger.debug("Error closing connection", exc_info=True)

        if self._fault is not None:
            self.on_error.emit(self._fault)
        else:
            self.on_close.emit()

    async def _message_loop(self) -> None:
        """Main message processing loop"""
        logger.info("Starting message processing loop")
        assert self.connection is not None
        while self.running:
            try:
                message = await self.connection.read_message()
            except asyncio.CancelledError:
                logger.info("Message loop cancelled")
                break
            except (TransportError, ConnectionError, OSError) as e:
                logger.exception("Error reading from connection")
                self._fault = e
                break

            if message is None:
                logger.info("Client disconnected")
                break

            self._process_message(message)

        logger.info("Message loop ended")

    def _process_message(self, message: dict[str, Any]) -> None:
        message_type = message["type"]

        if message_type == "request":
            logger.debug(
                "Handling request: %s (seq: %s)", message["command"], message["seq"]
            )
            try:
                self.dispatch_request(message)  # type: ignore[arg-type]
            except Exception:
                logger.exception("Unhandled error dispatching %s", message["command"])
        elif message_type == "response":
            logger.warning("Received unexpected response: %s", message)
        else:
            logger.warning("Received unexpected event: %s", message)

    async def _write_loop(self) -> None:
        assert self.connection is not None
        while True:
            message = await self._outgoing.get()
            if message is None:
                break
            try:
                await self.connection.write_message(message)
            except (TransportError, ConnectionError, OSError) as e:
                logger.exception("Error sending message")
                self._fault = e
                break

    def send_message(self, message: dict[str, Any]) -> None:
        """Stamp ``message`` with the next sequence number and queue it."""
        if self._closed:
            logger.warning("Cannot send message: connection closed")
            return

        if "seq" not in message:
            message["seq"] = self.next_seq
        self._outgoing.put_nowait(message)

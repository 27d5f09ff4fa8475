"""
Connections carrying Content-Length framed DAP messages over asyncio streams.

``StreamConnection`` wraps an already connected reader/writer pair: a
socket accepted by the server-mode listener, or the process's stdin/stdout.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC
from abc import abstractmethod
from typing import TYPE_CHECKING
from typing import Any

from dapsession.errors import ProtocolError
from dapsession.errors import TransportError
from dapsession.protocol.protocol import ProtocolHandler

if TYPE_CHECKING:
    from dapsession.protocol.messages import ProtocolMessage

logger = logging.getLogger(__name__)
traffic_logger = logging.getLogger("dapsession.transport.traffic")


class ConnectionBase(ABC):
    """Base class for all connection types."""

    def __init__(self) -> None:
        self._is_connected = False

    @property
    def is_connected(self) -> bool:
        return self._is_connected

    @abstractmethod
    async def close(self) -> None:
        """Close the connection."""

    @abstractmethod
    async def read_message(self) -> ProtocolMessage | None:
        """Read a DAP message from the connection. Returns None on EOF."""

    @abstractmethod
    async def write_message(self, message: dict[str, Any]) -> None:
        """Write a DAP message to the connection."""


class StreamConnection(ConnectionBase):
    """DAP connection over an asyncio StreamReader/StreamWriter pair."""

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        protocol_handler: ProtocolHandler | None = None,
    ) -> None:
        super().__init__()
        self.reader = reader
        self.writer = writer
        self.protocol_handler = protocol_handler or ProtocolHandler()
        self._is_connected = True

    async def close(self) -> None:
        if not self._is_connected:
            return
        self._is_connected = False
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except (ConnectionError, OSError):
            logger.debug("Error waiting for writer to close", exc_info=True)
        logger.info("Connection closed")

    async def read_message(self) -> ProtocolMessage | None:
        """Read one framed message.

        Raises:
            TransportError: If the framing is broken or the body is not a
                valid protocol message.
        """
        headers: dict[str, str] = {}
        while True:
            line = await self.reader.readline()
            if not line:
                return None  # Connection closed

            text = line.decode("ascii", errors="replace").strip()
            if not text:
                if headers:
                    break
                continue

            key, sep, value = text.partition(":")
            if not sep:
                msg = f"Malformed header line: {text!r}"
                raise TransportError(msg)
            headers[key.strip()] = value.strip()

        content_len_header = headers.get("Content-Length")
        if content_len_header is None:
            msg = "Content-Length header missing"
            raise TransportError(msg)

        try:
            content_length = int(content_len_header)
        except ValueError as err:
            msg = f"Malformed Content-Length header: {content_len_header!r}"
            raise TransportError(msg, cause=err) from err

        try:
            content = await self.reader.readexactly(content_length)
        except asyncio.IncompleteReadError:
            logger.info("Stream ended inside a message body")
            return None

        try:
            message = self.protocol_handler.parse_message(content.decode("utf-8"))
        except (ProtocolError, UnicodeDecodeError) as err:
            msg = f"Invalid message: {err}"
            raise TransportError(msg, cause=err) from err

        traffic_logger.debug("Received message: %s", message)
        return message

    async def write_message(self, message: dict[str, Any]) -> None:
        if not self._is_connected:
            msg = "No active connection"
            raise TransportError(msg)

        content = self.protocol_handler.encode_message(message)
        self.writer.write(f"Content-Length: {len(content)}\r\n\r\n".encode("ascii"))
        self.writer.write(content)
        await self.writer.drain()
        traffic_logger.debug("Sent message: %s", message)

"""Wire the process's standard streams into a DAP connection."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import BinaryIO

from dapsession.transport.connection import StreamConnection

logger = logging.getLogger(__name__)


async def open_stdio_connection(
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
) -> StreamConnection:
    """Return a connection reading from ``stdin`` and writing to ``stdout``.

    Uses pipe transports, so it needs a selector-based event loop on POSIX
    (or the proactor loop on Windows).
    """
    loop = asyncio.get_running_loop()
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout.buffer

    reader = asyncio.StreamReader()
    read_protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: read_protocol, stdin)

    write_transport, write_protocol = await loop.connect_write_pipe(
        asyncio.streams.FlowControlMixin, stdout
    )
    writer = asyncio.StreamWriter(write_transport, write_protocol, reader, loop)

    logger.debug("Debug protocol attached to stdin/stdout")
    return StreamConnection(reader, writer)

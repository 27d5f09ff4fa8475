"""
Start a debug session in stdio or server mode.

Usage::

    python -m dapsession                 # one session on stdin/stdout
    python -m dapsession --server=4711   # one session per TCP connection

A concrete adapter calls ``MyDebugSession.run()`` (or :func:`run` with its
session class) from its own entry point.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
import signal
import sys
from typing import TYPE_CHECKING

from dapsession.config import SessionConfig
from dapsession.transport.connection import StreamConnection
from dapsession.transport.stdio import open_stdio_connection

if TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Sequence

    from dapsession.session import DebugSession

    SessionFactory = Callable[[], DebugSession]

logger = logging.getLogger(__name__)

SERVER_ARG_RE = re.compile(r"^--server=(\d{4,5})$")
DEFAULT_HOST = "localhost"


def parse_server_port(argv: Sequence[str]) -> int | None:
    """Return the port of the last valid ``--server=<PORT>`` argument, if any.

    Other arguments belong to the adapter and are ignored.
    """
    port = None
    for arg in argv:
        match = SERVER_ARG_RE.match(arg)
        if match:
            port = int(match.group(1))
        elif arg.startswith("--server"):
            logger.warning("Ignoring malformed server argument %r", arg)
    return port


def configure_logging(level: str) -> None:
    """Log to stderr; stdout carries the protocol in stdio mode."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _create_session(session_factory: SessionFactory, config: SessionConfig) -> DebugSession:
    session = session_factory()
    session.config.shutdown_grace_seconds = config.shutdown_grace_seconds
    return session


async def run_stdio(session_factory: SessionFactory, config: SessionConfig | None = None) -> int:
    """Serve one session on stdin/stdout until it asks the process to exit."""
    config = config or SessionConfig()
    loop = asyncio.get_running_loop()
    session = _create_session(session_factory, config)
    exit_requested = asyncio.Event()

    def _on_terminate(grace_seconds: float) -> None:
        logger.debug("Exiting in %.2fs", grace_seconds)
        loop.call_later(grace_seconds, exit_requested.set)

    session.on_terminate.add_listener(_on_terminate)

    with contextlib.suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGTERM, session.shutdown)

    connection = await open_stdio_connection()
    serve_task = asyncio.ensure_future(session.start(connection))
    try:
        await exit_requested.wait()
        session.stop()
        await serve_task
    finally:
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.remove_signal_handler(signal.SIGTERM)
    return 0


async def start_server(
    session_factory: SessionFactory,
    port: int,
    host: str | None = DEFAULT_HOST,
    config: SessionConfig | None = None,
) -> asyncio.Server:
    """Listen on ``port`` and run an independent session for each connection."""
    config = config or SessionConfig()

    async def _handle_client(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        logger.info(">> accepted connection from client")
        session = _create_session(session_factory, config)
        session.set_run_as_server(True)
        try:
            await session.start(StreamConnection(reader, writer))
        except Exception:
            logger.exception("Session failed")
        finally:
            logger.info(">> client connection closed")

    server = await asyncio.start_server(_handle_client, host, port)
    logger.info("waiting for debug protocol on port %d", port)
    return server


async def serve(
    session_factory: SessionFactory,
    port: int,
    host: str | None = DEFAULT_HOST,
    config: SessionConfig | None = None,
) -> None:
    """Server mode: never returns on its own."""
    server = await start_server(session_factory, port, host, config)
    async with server:
        await server.serve_forever()


def run(session_factory: SessionFactory, argv: Sequence[str] | None = None) -> int:
    """Entry point: pick the mode from ``argv`` and run until done.

    Returns the process exit code (0 after a graceful stdio shutdown).
    """
    config = SessionConfig.from_env()
    configure_logging(config.log_level)

    args = sys.argv[1:] if argv is None else list(argv)
    port = parse_server_port(args)
    if port is not None:
        asyncio.run(serve(session_factory, port, config=config))
        return 0

    return asyncio.run(run_stdio(session_factory, config))

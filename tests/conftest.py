from __future__ import annotations

import asyncio
import logging
import sys

import pytest

from dapsession.session import DebugSession
from dapsession.telemetry import RecordingTelemetrySink

logger = logging.getLogger(__name__)

# On Windows the default event loop policy uses ProactorEventLoop, which is
# not needed for unit tests; prefer the selector policy.
if sys.platform.startswith("win"):
    try:
        from asyncio import WindowsSelectorEventLoopPolicy

        asyncio.set_event_loop_policy(WindowsSelectorEventLoopPolicy())
    except Exception:
        pass


@pytest.fixture
def telemetry():
    return RecordingTelemetrySink()


@pytest.fixture
def session(telemetry):
    """A stdio-mode session with a recording telemetry sink."""
    return DebugSession(telemetry=telemetry)

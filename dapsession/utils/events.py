"""Lifecycle signals used by the transport and the session.

A :class:`Signal` is a synchronous emitter. One-shot signals (the transport's
``close`` and ``error``) deliver only their first emission.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class Signal:
    """Synchronous signal with add_listener/remove_listener/emit.

    A listener that raises is logged and does not stop the others.
    """

    def __init__(self, name: str, *, one_shot: bool = False) -> None:
        self.name = name
        self.one_shot = one_shot
        self._listeners: list[Callable[..., Any]] = []
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def add_listener(self, fn: Callable[..., Any]) -> None:
        self._listeners.append(fn)

    def remove_listener(self, fn: Callable[..., Any]) -> None:
        try:
            self._listeners.remove(fn)
        except ValueError:
            pass

    def emit(self, *args: Any, **kwargs: Any) -> bool:
        """Call every listener; return False when a one-shot signal already fired."""
        if self.one_shot and self._fired:
            logger.debug("signal %s already fired", self.name)
            return False
        self._fired = True
        for fn in list(self._listeners):
            try:
                fn(*args, **kwargs)
            except Exception:
                logger.exception("error in %s listener", self.name)
        return True

"""Abstract base class for all script stores."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Protocol, Sequence, runtime_checkable

from scripto.exceptions import ScriptNotKnownError

__all__ = ["AbstractScriptStore", "ConnectionListener", "NOSCRIPT_PREFIX"]

logger = logging.getLogger(__name__)

# Error text the server sends when EVALSHA names an unknown digest
NOSCRIPT_PREFIX = "NOSCRIPT No matching script"


@runtime_checkable
class ConnectionListener(Protocol):
    """Receives connection lifecycle signals from a store."""

    def on_connected(self) -> None:
        ...

    def on_error(self, exc: BaseException) -> None:
        ...


class AbstractScriptStore(ABC):
    """
    The remote side of the script cache: existence check, upload and
    execution by digest, plus connect / error signals.

    Each concrete subclass wraps one kind of backend.  Subclasses call
    _emit_connected() / _emit_error() when their connection state changes;
    listeners are registered with subscribe().
    """

    def __init__(self) -> None:
        self._listeners: list[ConnectionListener] = []
        self._listeners_lock = threading.Lock()

    # ── Commands ──────────────────────────────────────────────────────────

    @abstractmethod
    def check_exists(self, digest: str) -> bool:
        """Return True if a script with *digest* is already known."""

    @abstractmethod
    def upload(self, body: str) -> str:
        """Register *body* and return the digest the store assigned."""

    @abstractmethod
    def execute_by_digest(
        self,
        digest: str,
        keys: Sequence[Any],
        args: Sequence[Any],
    ) -> Any:
        """
        Run the script stored under *digest*.

        Raises whatever the backend raises; an unknown digest must produce
        an error for which is_script_not_known() returns True.
        """

    def is_script_not_known(self, exc: BaseException) -> bool:
        """True iff *exc* means "no script under that digest"."""
        if isinstance(exc, ScriptNotKnownError):
            return True
        return str(exc).startswith(NOSCRIPT_PREFIX)

    # ── Lifecycle signals ─────────────────────────────────────────────────

    def subscribe(self, listener: ConnectionListener) -> None:
        with self._listeners_lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: ConnectionListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _emit_connected(self) -> None:
        for listener in self._snapshot_listeners():
            try:
                listener.on_connected()
            except Exception:  # noqa: BLE001
                logger.exception("%s: on_connected listener failed", type(self).__name__)

    def _emit_error(self, exc: BaseException) -> None:
        for listener in self._snapshot_listeners():
            try:
                listener.on_error(exc)
            except Exception:  # noqa: BLE001
                logger.exception("%s: on_error listener failed", type(self).__name__)

    def _snapshot_listeners(self) -> list[ConnectionListener]:
        with self._listeners_lock:
            return list(self._listeners)

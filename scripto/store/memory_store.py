"""
MemoryScriptStore — deterministic in-process stub, no network.

Used by the unit tests and by ``scripto --backend memory`` dry runs.  It
behaves like a script cache server that cannot actually run Lua: bodies are
kept by digest, every command is appended to ``calls``, and execution is
delegated to an optional ``evaluator(body, keys, args)`` callable.

Failure simulation
──────────────────
flush()              — forget every script (failover to an empty instance)
disconnect(exc)      — emit on_error; commands fail until reconnect()
reconnect(flush)     — emit on_connected, optionally after flush()
fail_next(op, exc)   — make the next *op* command raise *exc* once
"""

import logging
import threading
from typing import Any, Callable, Optional, Sequence

from scripto.exceptions import ScriptNotKnownError, StoreConnectionError
from scripto.hasher import digest as compute_digest
from scripto.store.base import NOSCRIPT_PREFIX, AbstractScriptStore

__all__ = ["MemoryScriptStore"]

logger = logging.getLogger(__name__)

Evaluator = Callable[[str, list, list], Any]

_OPERATIONS = ("check_exists", "upload", "execute_by_digest")


class MemoryScriptStore(AbstractScriptStore):
    """
    In-memory AbstractScriptStore.

    Attributes
    ──────────
    calls   — list of (operation, argument) tuples, oldest first
    scripts — digest → body of everything uploaded since the last flush
    """

    def __init__(self, evaluator: Optional[Evaluator] = None) -> None:
        super().__init__()
        self._evaluator = evaluator
        self._lock = threading.Lock()
        self._connected = True
        self._pending_failures: dict[str, BaseException] = {}
        self.scripts: dict[str, str] = {}
        self.calls: list[tuple[str, Any]] = []

    # ── Internal helpers ──────────────────────────────────────────────────

    def _begin(self, operation: str, argument: Any) -> None:
        with self._lock:
            self.calls.append((operation, argument))
            failure = self._pending_failures.pop(operation, None)
            connected = self._connected
        if failure is not None:
            raise failure
        if not connected:
            raise StoreConnectionError(f"{operation}: store is disconnected")

    # ── AbstractScriptStore ───────────────────────────────────────────────

    def check_exists(self, digest: str) -> bool:
        self._begin("check_exists", digest)
        with self._lock:
            return digest in self.scripts

    def upload(self, body: str) -> str:
        self._begin("upload", body)
        sha = compute_digest(body)
        with self._lock:
            self.scripts[sha] = body
        return sha

    def execute_by_digest(
        self,
        digest: str,
        keys: Sequence[Any],
        args: Sequence[Any],
    ) -> Any:
        self._begin("execute_by_digest", digest)
        with self._lock:
            body = self.scripts.get(digest)
        if body is None:
            raise ScriptNotKnownError(f"{NOSCRIPT_PREFIX}. Please use EVAL.")
        if self._evaluator is None:
            return None
        return self._evaluator(body, list(keys), list(args))

    # ── Failure simulation ────────────────────────────────────────────────

    def count(self, operation: str) -> int:
        """Number of recorded calls to *operation*."""
        with self._lock:
            return sum(1 for op, _ in self.calls if op == operation)

    def flush(self) -> None:
        with self._lock:
            self.scripts.clear()

    def fail_next(self, operation: str, exc: BaseException) -> None:
        if operation not in _OPERATIONS:
            raise ValueError(
                f"Unknown operation: {operation!r}. Choose from: {list(_OPERATIONS)}"
            )
        with self._lock:
            self._pending_failures[operation] = exc

    def disconnect(self, exc: Optional[BaseException] = None) -> None:
        error = exc or StoreConnectionError("connection lost")
        with self._lock:
            self._connected = False
        logger.debug("MemoryScriptStore: disconnected (%s)", error)
        self._emit_error(error)

    def reconnect(self, flush: bool = False) -> None:
        if flush:
            self.flush()
        with self._lock:
            self._connected = True
        logger.debug("MemoryScriptStore: connected (flushed=%s)", flush)
        self._emit_connected()

"""
ScriptRegistry — in-memory mapping of script name → Lua body.

Usage::

    registry = ScriptRegistry()
    registry.register({"incr_by": "return redis.call('INCRBY', KEYS[1], ARGV[1])"})
    body = registry.get("incr_by")      # None on miss

Entries are merged (last write wins) and never removed.  The registry never
talks to the store; uploading is the RemoteLoader's job.
"""

import logging
import threading
from typing import Mapping, Optional

__all__ = ["ScriptRegistry"]

logger = logging.getLogger(__name__)


class ScriptRegistry:
    """
    Thread-safe name → body map with append-only merge semantics.

    No syntax validation is performed on bodies.
    """

    def __init__(self) -> None:
        self._scripts: dict[str, str] = {}
        self._lock = threading.Lock()

    # ── Internal helpers ──────────────────────────────────────────────────

    @staticmethod
    def _check_entry(name: object, body: object) -> None:
        if not isinstance(name, str):
            raise TypeError(f"script name must be str, got {type(name).__name__}")
        if not name:
            raise ValueError("script name must not be empty")
        if not isinstance(body, str):
            raise TypeError(
                f"script body for {name!r} must be str, got {type(body).__name__}"
            )

    # ── Public API ────────────────────────────────────────────────────────

    def register(self, scripts: Mapping[str, str]) -> list[str]:
        """
        Merge *scripts* into the registry.

        The whole mapping is validated before anything is stored, so a bad
        entry leaves the registry untouched.

        Returns:
            Names that already existed with a different body.  Callers use
            this to drop digests that no longer match the registered text.

        Raises:
            TypeError:  a name or body is not a str.
            ValueError: a name is empty.
        """
        for name, body in scripts.items():
            self._check_entry(name, body)

        changed: list[str] = []
        with self._lock:
            for name, body in scripts.items():
                previous = self._scripts.get(name)
                if previous is not None and previous != body:
                    changed.append(name)
                self._scripts[name] = body
        logger.debug(
            "Registered %d script(s), %d replaced with new body",
            len(scripts), len(changed),
        )
        return changed

    def register_one(self, name: str, body: str) -> list[str]:
        """Single-entry form of register()."""
        return self.register({name: body})

    def get(self, name: str) -> Optional[str]:
        """Return the body registered under *name*, or None."""
        with self._lock:
            return self._scripts.get(name)

    def snapshot(self) -> dict[str, str]:
        """Shallow copy of the name → body map."""
        with self._lock:
            return dict(self._scripts)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._scripts

    def __len__(self) -> int:
        with self._lock:
            return len(self._scripts)

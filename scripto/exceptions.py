"""
Project-wide custom exception hierarchy.
All modules raise subclasses of ScriptoBaseError — never bare Exception.

Errors raised by the redis client itself (connection failures, script
errors, …) are NOT wrapped: they reach the caller unchanged.
"""

__all__ = [
    "ScriptoBaseError",
    "RegistryError",
    "UnknownScriptError",
    "ScriptLoadError",
    "DispatchError",
    "UnknownDigestError",
    "StoreError",
    "ScriptNotKnownError",
    "StoreConnectionError",
]


class ScriptoBaseError(Exception):
    """Root exception for all scripto errors."""


# ── Registry ──────────────────────────────────────────────────────────────────

class RegistryError(ScriptoBaseError):
    """Raised when the script registry cannot satisfy a request."""


class UnknownScriptError(RegistryError):
    """Raised when a script name was never registered."""

    code = "NO_SUCH_SCRIPT"

    def __init__(self, name: str) -> None:
        super().__init__(f"{self.code}: {name!r}")
        self.name = name


class ScriptLoadError(RegistryError):
    """Raised when script files cannot be read from disk."""


# ── Dispatcher ────────────────────────────────────────────────────────────────

class DispatchError(ScriptoBaseError):
    """Base class for dispatch errors."""


class UnknownDigestError(DispatchError):
    """Raised when execute_by_digest() finds no cached digest for a name."""

    code = "NO_SUCH_SCRIPT_SHA"

    def __init__(self, name: str) -> None:
        super().__init__(f"{self.code}: {name!r}")
        self.name = name


# ── Store ─────────────────────────────────────────────────────────────────────

class StoreError(ScriptoBaseError):
    """Raised by stub stores on command failure."""


class ScriptNotKnownError(StoreError):
    """Raised when the store has no script under the requested digest."""


class StoreConnectionError(StoreError):
    """Raised by stub stores when the simulated connection is down."""

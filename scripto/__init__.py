"""
scripto — named Lua scripts for Redis, run by digest with NOSCRIPT recovery.

Public API
──────────
Scripto              — facade: register scripts, execute them by name
ScriptoConfig        — runtime configuration (SCRIPTO_* env overrides)
RedisScriptStore     — store backed by a redis-py client
MemoryScriptStore    — in-process stub store
digest               — SHA1 digest of a script body
"""

from scripto.client import Scripto
from scripto.config import ScriptoConfig
from scripto.exceptions import (
    ScriptoBaseError,
    ScriptLoadError,
    ScriptNotKnownError,
    UnknownDigestError,
    UnknownScriptError,
)
from scripto.hasher import digest
from scripto.models import BulkLoadResult
from scripto.store import MemoryScriptStore, RedisScriptStore, get_store

__version__ = "0.1.0"

__all__ = [
    "Scripto",
    "ScriptoConfig",
    "ScriptoBaseError",
    "ScriptLoadError",
    "ScriptNotKnownError",
    "UnknownDigestError",
    "UnknownScriptError",
    "digest",
    "BulkLoadResult",
    "MemoryScriptStore",
    "RedisScriptStore",
    "get_store",
]

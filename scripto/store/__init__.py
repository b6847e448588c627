"""
Script stores — the remote side of the script cache.

Each store implements SCRIPT EXISTS / SCRIPT LOAD / EVALSHA semantics and
emits on_connected / on_error signals to subscribed listeners.
"""

from .base import NOSCRIPT_PREFIX, AbstractScriptStore, ConnectionListener
from .factory import get_store
from .memory_store import MemoryScriptStore
from .redis_store import RedisScriptStore

__all__ = [
    "AbstractScriptStore",
    "ConnectionListener",
    "NOSCRIPT_PREFIX",
    "get_store",
    "MemoryScriptStore",
    "RedisScriptStore",
]

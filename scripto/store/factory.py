"""Factory function — returns the right store for a given config."""

from __future__ import annotations

from typing import Optional

from scripto.config import ScriptoConfig

from .base import AbstractScriptStore
from .memory_store import MemoryScriptStore
from .redis_store import RedisScriptStore

__all__ = ["get_store"]


def get_store(config: Optional[ScriptoConfig] = None) -> AbstractScriptStore:
    """
    Return a store instance for ``config.backend``.

    Parameters
    ----------
    config : ScriptoConfig (or None → defaults, i.e. Redis on localhost)

    Returns
    -------
    RedisScriptStore for "redis", MemoryScriptStore for "memory".

    Raises
    ------
    ValueError — unknown backend name.
    """
    config = config or ScriptoConfig()
    if config.backend == "memory":
        return MemoryScriptStore()
    if config.backend == "redis":
        return RedisScriptStore.from_url(
            config.redis_url,
            socket_timeout=config.socket_timeout,
            decode_responses=config.decode_responses,
        )
    raise ValueError(f"Unknown backend: {config.backend!r}")

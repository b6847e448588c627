"""
Dispatcher — runs registered scripts by name through EVALSHA.

Per-name state
──────────────
Unregistered → Registered(body) → Cold (no digest) ⇄ Warm(digest)

execute()
  Cold  → ensure_loaded(body), cache the digest, EVALSHA once.
  Warm  → EVALSHA; on NOSCRIPT force_load(body), cache the new digest,
          EVALSHA exactly once more and return/raise that outcome.
          Any other error is raised unchanged.

execute_by_digest()
  Warm  → EVALSHA, no recovery.
  Cold  → UnknownDigestError.
"""

import logging
from typing import Any, Iterable

from scripto.cache import HashCache
from scripto.exceptions import UnknownDigestError, UnknownScriptError
from scripto.loader import RemoteLoader
from scripto.registry.registry import ScriptRegistry
from scripto.store.base import AbstractScriptStore

__all__ = ["Dispatcher"]

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Executes scripts from *registry* against *store*, keeping *cache* warm.

    Within one call the final EVALSHA always uses the digest that call's own
    load / recovery step confirmed, even if the cache was invalidated by
    another thread in the meantime.
    """

    def __init__(
        self,
        registry: ScriptRegistry,
        cache: HashCache,
        loader: RemoteLoader,
        store: AbstractScriptStore,
    ) -> None:
        self._registry = registry
        self._cache = cache
        self._loader = loader
        self._store = store

    def execute(self, name: str, keys: Iterable[Any] = (), args: Iterable[Any] = ()) -> Any:
        """
        Run script *name* with *keys* and *args*.

        Raises:
            UnknownScriptError: *name* was never registered (no store call made).
            Anything the store raises, except a first NOSCRIPT on a warm digest.
        """
        body = self._registry.get(name)
        if body is None:
            raise UnknownScriptError(name)
        keys, args = list(keys), list(args)

        generation = self._cache.generation
        sha = self._cache.get(name)
        if sha is None:
            sha = self._loader.ensure_loaded(body)
            self._remember(name, body, sha, generation)
            return self._store.execute_by_digest(sha, keys, args)

        try:
            return self._store.execute_by_digest(sha, keys, args)
        except Exception as exc:
            if not self._store.is_script_not_known(exc):
                raise
            # Loaded once, gone now: the store restarted or failed over.
            logger.info("Script %r (%s) unknown to store; reloading", name, sha)

        generation = self._cache.generation
        sha = self._loader.force_load(body)
        self._remember(name, body, sha, generation)
        return self._store.execute_by_digest(sha, keys, args)

    def execute_by_digest(
        self,
        name: str,
        keys: Iterable[Any] = (),
        args: Iterable[Any] = (),
    ) -> Any:
        """
        Run *name* by its cached digest only.

        Raises:
            UnknownDigestError: no digest cached for *name*.
            Anything the store raises, NOSCRIPT included.
        """
        sha = self._cache.get(name)
        if sha is None:
            raise UnknownDigestError(name)
        return self._store.execute_by_digest(sha, list(keys), list(args))

    # ── Internal helpers ──────────────────────────────────────────────────

    def _remember(self, name: str, body: str, sha: str, generation: int) -> None:
        # Put first, then re-read the registry: a concurrent register() of a
        # new body either ran before the check (we evict) or its discard()
        # runs after our put (it evicts).
        if not self._cache.put(name, sha, generation):
            return
        if self._registry.get(name) != body:
            logger.debug("Script %r re-registered during load; not caching %s", name, sha)
            self._cache.discard([name])

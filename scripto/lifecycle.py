"""
LifecycleHooks — keeps the HashCache in step with the store connection.

on_connected()  → schedule a bulk ensure-loaded pass over every registered
                  script without a cached digest (the new instance may
                  have none of them)
on_error(exc)   → clear the HashCache synchronously

Bulk failures are logged and handed to the optional ``on_load_error``
observer; they never propagate.  Scripts left cold are recovered lazily by
the next execute().
"""

import logging
from typing import Callable, Mapping, Optional

from scripto.cache import HashCache
from scripto.loader import RemoteLoader
from scripto.models import BulkLoadResult
from scripto.registry.registry import ScriptRegistry

__all__ = ["LifecycleHooks"]

logger = logging.getLogger(__name__)

LoadErrorObserver = Callable[[str, BaseException], None]
Scheduler = Callable[[Callable[[], object]], object]


def _run_now(task: Callable[[], object]) -> object:
    return task()


class LifecycleHooks:
    """
    ConnectionListener that re-warms or invalidates the cache.

    Parameters
    ----------
    schedule          : callable that runs a zero-arg task, typically
                        ThreadPoolExecutor.submit; default runs it inline
    on_load_error     : observer called as on_load_error(name, exc)
    reload_on_connect : False disables the re-warm on on_connected()
    """

    def __init__(
        self,
        registry: ScriptRegistry,
        cache: HashCache,
        loader: RemoteLoader,
        schedule: Optional[Scheduler] = None,
        on_load_error: Optional[LoadErrorObserver] = None,
        reload_on_connect: bool = True,
    ) -> None:
        self._registry = registry
        self._cache = cache
        self._loader = loader
        self._schedule = schedule or _run_now
        self._on_load_error = on_load_error
        self._reload_on_connect = reload_on_connect

    # ── ConnectionListener ────────────────────────────────────────────────

    def on_connected(self) -> None:
        if not self._reload_on_connect:
            return
        logger.debug("Loading scripts into store again, after (re)connect")
        self._schedule(self.rewarm)

    def on_error(self, exc: BaseException) -> None:
        logger.debug("Resetting script digests due to store connection error: %s", exc)
        self._cache.clear()

    # ── Bulk warm-up ──────────────────────────────────────────────────────

    def warm(self, scripts: Optional[Mapping[str, str]] = None) -> BulkLoadResult:
        """
        ensure_loaded() *scripts* (default: the whole registry) and cache
        the digests.

        A digest is cached only if the name still maps to the body that was
        uploaded, and only if the cache was not invalidated during the pass.
        """
        if scripts is None:
            scripts = self._registry.snapshot()
        generation = self._cache.generation
        result = self._loader.ensure_all_loaded(scripts)

        current = {
            name: sha
            for name, sha in result.digests.items()
            if self._registry.get(name) == scripts[name]
        }
        if self._cache.update(current, generation):
            stale = [n for n in current if self._registry.get(n) != scripts[n]]
            if stale:
                self._cache.discard(stale)
            logger.debug("Cached %d script digest(s)", len(current) - len(stale))

        if not result.ok:
            logger.warning(
                "Script loading failed at %r due to store error: %s",
                result.failed_name, result.error,
            )
            self._report(result.failed_name, result.error)
        return result

    def rewarm(self) -> BulkLoadResult:
        """
        warm() every registered name that has no cached digest.

        Entries still cached were confirmed after the last clear(), i.e.
        against the current connection, so they are skipped.  A preload
        queued ahead of the first on_connected() thus costs no second
        round of SCRIPT EXISTS.
        """
        cached = self._cache.snapshot()
        cold = {
            name: body
            for name, body in self._registry.snapshot().items()
            if name not in cached
        }
        if not cold:
            logger.debug("Every registered script already loaded")
            return BulkLoadResult()
        return self.warm(cold)

    def _report(self, name: Optional[str], exc: Optional[BaseException]) -> None:
        if self._on_load_error is None or name is None or exc is None:
            return
        try:
            self._on_load_error(name, exc)
        except Exception:  # noqa: BLE001
            logger.exception("on_load_error observer failed")

"""
Scripto — registers named Lua scripts and runs them through EVALSHA.

Usage::

    store = RedisScriptStore.from_url("redis://localhost:6379/0")
    with Scripto(store) as scripto:
        scripto.register_from_dir("./lua")
        scripto.register({"sum": "return ARGV[1] + ARGV[2]"})

        total = scripto.execute("sum", keys=[], args=[2, 3])      # → 5

        # background queue, result via Future / callback
        scripto.submit("sum", [], [2, 3], callback=lambda fut: print(fut.result()))

One Scripto per store connection: the instance owns its registry, digest
cache and background task queue, and subscribes to the store's connection
signals at construction.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from scripto.cache import HashCache
from scripto.config import ScriptoConfig
from scripto.dispatcher import Dispatcher
from scripto.lifecycle import LifecycleHooks, LoadErrorObserver
from scripto.loader import RemoteLoader
from scripto.models import BulkLoadResult
from scripto.registry.loader import load_script_from_file, load_scripts_from_dir
from scripto.registry.registry import ScriptRegistry
from scripto.store.base import AbstractScriptStore

__all__ = ["Scripto"]

logger = logging.getLogger(__name__)

FutureCallback = Callable[[Future], Any]


class Scripto:
    """
    Facade over ScriptRegistry, HashCache, RemoteLoader, Dispatcher and
    LifecycleHooks.

    Parameters
    ----------
    store         : AbstractScriptStore to upload to and execute against
    config        : ScriptoConfig (or None → defaults)
    on_load_error : observer called as on_load_error(name, exc) when a
                    background load fails
    """

    def __init__(
        self,
        store: AbstractScriptStore,
        config: Optional[ScriptoConfig] = None,
        on_load_error: Optional[LoadErrorObserver] = None,
    ) -> None:
        self._config = config or ScriptoConfig()
        self._store = store
        self._registry = ScriptRegistry()
        self._cache = HashCache()
        self._loader = RemoteLoader(store)
        self._dispatcher = Dispatcher(self._registry, self._cache, self._loader, store)
        # Single worker: background loads and submit() run strictly in order.
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="scripto")
        self._hooks = LifecycleHooks(
            self._registry,
            self._cache,
            self._loader,
            schedule=self._executor.submit,
            on_load_error=on_load_error,
            reload_on_connect=self._config.reload_on_connect,
        )
        store.subscribe(self._hooks)

    # ── Properties ────────────────────────────────────────────────────────

    @property
    def store(self) -> AbstractScriptStore:
        return self._store

    @property
    def config(self) -> ScriptoConfig:
        return self._config

    @property
    def scripts(self) -> dict[str, str]:
        """Snapshot of registered name → body."""
        return self._registry.snapshot()

    @property
    def digests(self) -> dict[str, str]:
        """Snapshot of cached name → digest."""
        return self._cache.snapshot()

    def digest_for(self, name: str) -> Optional[str]:
        """Cached digest of *name*, or None while cold."""
        return self._cache.get(name)

    # ── Registration ──────────────────────────────────────────────────────

    def register(self, scripts: Mapping[str, str]) -> None:
        """
        Merge *scripts* into the registry.

        Names whose body changed lose their cached digest.  With
        ``config.preload`` the new scripts are uploaded on the background
        queue; otherwise they load on first execute().
        """
        changed = self._registry.register(scripts)
        if changed:
            logger.debug("Dropping digests of re-registered scripts: %s", changed)
            self._cache.discard(changed)
        if self._config.preload and scripts:
            batch = dict(scripts)
            self._executor.submit(self._hooks.warm, batch)

    load = register

    def register_one(self, name: str, body: str) -> None:
        self.register({name: body})

    def load_from_file(self, name: str, filepath: Union[str, Path]) -> None:
        """Register the contents of *filepath* as *name*."""
        self.register({name: load_script_from_file(filepath)})

    def register_from_dir(self, scripts_dir: Union[str, Path]) -> dict[str, str]:
        """
        Register every script file in *scripts_dir*.

        Returns:
            The name → body map that was registered.
        """
        scripts = load_scripts_from_dir(scripts_dir, ext=self._config.script_ext)
        self.register(scripts)
        return scripts

    load_from_dir = register_from_dir

    def warm(self) -> BulkLoadResult:
        """Upload every registered script now, on the calling thread."""
        return self._hooks.warm()

    # ── Execution ─────────────────────────────────────────────────────────

    def execute(self, name: str, keys: Iterable[Any] = (), args: Iterable[Any] = ()) -> Any:
        """Run *name*; see Dispatcher.execute()."""
        return self._dispatcher.execute(name, keys, args)

    run = execute
    eval = execute

    def execute_by_digest(
        self,
        name: str,
        keys: Iterable[Any] = (),
        args: Iterable[Any] = (),
    ) -> Any:
        """Run *name* by cached digest only; see Dispatcher.execute_by_digest()."""
        return self._dispatcher.execute_by_digest(name, keys, args)

    eval_sha = execute_by_digest

    def submit(
        self,
        name: str,
        keys: Iterable[Any] = (),
        args: Iterable[Any] = (),
        callback: Optional[FutureCallback] = None,
    ) -> Future:
        """
        Queue execute() on the background queue.

        *callback*, if given, is called with the finished Future whether the
        call succeeded or raised.
        """
        future = self._executor.submit(self._dispatcher.execute, name, list(keys), list(args))
        if callback is not None:
            future.add_done_callback(callback)
        return future

    def submit_by_digest(
        self,
        name: str,
        keys: Iterable[Any] = (),
        args: Iterable[Any] = (),
        callback: Optional[FutureCallback] = None,
    ) -> Future:
        """Queue execute_by_digest(); callback semantics as submit()."""
        future = self._executor.submit(
            self._dispatcher.execute_by_digest, name, list(keys), list(args)
        )
        if callback is not None:
            future.add_done_callback(callback)
        return future

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def drain(self, timeout: Optional[float] = None) -> None:
        """Block until every task queued before this call has run."""
        self._executor.submit(lambda: None).result(timeout=timeout)

    def close(self) -> None:
        """Stop listening to the store and shut the background queue down."""
        self._store.unsubscribe(self._hooks)
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "Scripto":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"Scripto(scripts={len(self._registry)}, "
            f"warm={len(self._cache)}, store={type(self._store).__name__})"
        )

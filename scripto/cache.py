"""
HashCache — name → digest of scripts confirmed uploaded to the current store.

Invalidation is wholesale: a new connection may point at an instance that
has never seen our scripts, so a cold cache is preferred over a stale one.

Every wholesale clear() bumps ``generation``.  Writers capture the generation
*before* talking to the store and pass it to put(); a write whose
generation is out of date is dropped, so an upload confirmed against the
old connection cannot repopulate a freshly cleared cache.
"""

import logging
import threading
from typing import Iterable, Mapping, Optional

__all__ = ["HashCache"]

logger = logging.getLogger(__name__)


class HashCache:
    """Thread-safe name → digest map with generation-guarded writes."""

    def __init__(self) -> None:
        self._digests: dict[str, str] = {}
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        """Incremented by every clear()."""
        with self._lock:
            return self._generation

    def get(self, name: str) -> Optional[str]:
        with self._lock:
            return self._digests.get(name)

    def put(self, name: str, digest: str, generation: Optional[int] = None) -> bool:
        """
        Store *digest* for *name*.

        Args:
            generation: value of ``generation`` read before the store call
                        that produced *digest*; None skips the check.

        Returns:
            True if stored, False if dropped because of an invalidation.
        """
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Dropping digest for %r: cache invalidated meanwhile", name)
                return False
            self._digests[name] = digest
            return True

    def update(self, digests: Mapping[str, str], generation: Optional[int] = None) -> bool:
        """Bulk form of put(); all-or-nothing with respect to *generation*."""
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug(
                    "Dropping %d digest(s): cache invalidated meanwhile", len(digests)
                )
                return False
            self._digests.update(digests)
            return True

    def discard(self, names: Iterable[str]) -> None:
        """
        Forget the digests of *names* (e.g. after their bodies changed).

        Per-name eviction leaves ``generation`` alone; writes for other
        names that are still in flight stay valid.
        """
        with self._lock:
            for name in names:
                self._digests.pop(name, None)

    def clear(self) -> None:
        """Forget every digest."""
        with self._lock:
            self._digests.clear()
            self._generation += 1

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._digests)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._digests

    def __len__(self) -> int:
        with self._lock:
            return len(self._digests)

"""
RemoteLoader — makes sure a script body is known to the store.

ensure_loaded()      — SCRIPT EXISTS first, SCRIPT LOAD only on a miss
force_load()         — SCRIPT LOAD unconditionally (recovery path)
ensure_all_loaded()  — sequential ensure_loaded() over a name → body map,
                       stopping at the first failure
"""

import logging
from typing import Mapping

from scripto.exceptions import StoreError
from scripto.hasher import digest as compute_digest
from scripto.hasher import is_digest
from scripto.models import BulkLoadResult
from scripto.store.base import AbstractScriptStore

__all__ = ["RemoteLoader"]

logger = logging.getLogger(__name__)


class RemoteLoader:
    """
    Uploads script bodies to *store* on demand.

    Store failures from upload() propagate unchanged; nothing is retried.
    A reply that is not a 40-char hex digest raises StoreError.
    """

    def __init__(self, store: AbstractScriptStore) -> None:
        self._store = store

    def ensure_loaded(self, body: str) -> str:
        """
        Return the digest of *body*, uploading it only if the store lacks it.

        A failed existence check is treated as a miss.
        """
        sha = compute_digest(body)
        try:
            exists = self._store.check_exists(sha)
        except Exception as exc:  # noqa: BLE001
            logger.debug("SCRIPT EXISTS %s failed (%s); uploading", sha, exc)
            exists = False
        if exists:
            logger.debug("Script %s already loaded", sha)
            return sha
        return self._upload(body, sha)

    def force_load(self, body: str) -> str:
        """Upload *body* without checking for it first; return the store's digest."""
        return self._upload(body, compute_digest(body))

    def ensure_all_loaded(self, scripts: Mapping[str, str]) -> BulkLoadResult:
        """
        ensure_loaded() every body in *scripts*, in mapping order.

        Stops at the first failure; digests confirmed before it are kept in
        the result.  Never raises for store errors.
        """
        result = BulkLoadResult()
        for name, body in scripts.items():
            try:
                result.digests[name] = self.ensure_loaded(body)
            except Exception as exc:  # noqa: BLE001
                result.failed_name = name
                result.error = exc
                break
        logger.debug("%s", result)
        return result

    # ── Internal helpers ──────────────────────────────────────────────────

    def _upload(self, body: str, expected: str) -> str:
        sha = self._store.upload(body)
        if not is_digest(sha):
            raise StoreError(f"SCRIPT LOAD returned a malformed digest: {sha!r}")
        if sha != expected:
            logger.warning(
                "Store digest %s differs from local digest %s; using the store's",
                sha, expected,
            )
        logger.debug("Uploaded script %s", sha)
        return sha

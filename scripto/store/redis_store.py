"""
RedisScriptStore — AbstractScriptStore on top of a redis-py client.

Commands used
─────────────
SCRIPT EXISTS <sha>           → check_exists()
SCRIPT LOAD <body>            → upload()
EVALSHA <sha> <n> keys… args… → execute_by_digest()
PING                          → connect()

Connection signals
──────────────────
redis-py reconnects transparently and has no event hooks, so the signals
are derived from command outcomes: a ConnectionError / TimeoutError marks
the store disconnected and emits on_error; the next command that succeeds
emits on_connected.  The first successful command after construction also
emits on_connected.
"""

import logging
from typing import Any, Callable, Sequence

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import NoScriptError
from redis.exceptions import TimeoutError as RedisTimeoutError

from scripto.store.base import AbstractScriptStore

__all__ = ["RedisScriptStore"]

logger = logging.getLogger(__name__)

_CONNECTION_ERRORS = (RedisConnectionError, RedisTimeoutError)


class RedisScriptStore(AbstractScriptStore):
    """
    Wraps a ``redis.Redis`` client.

    Usage (production)::

        store = RedisScriptStore.from_url("redis://localhost:6379/0")
        store.connect()

    Usage (tests)::

        client = MagicMock()
        store = RedisScriptStore(client)
    """

    def __init__(self, client: "redis.Redis") -> None:
        super().__init__()
        self._client = client
        self._connected = False

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "RedisScriptStore":
        """Build the store from a redis:// URL; kwargs go to redis.Redis.from_url."""
        return cls(redis.Redis.from_url(url, **kwargs))

    @property
    def client(self) -> "redis.Redis":
        return self._client

    @property
    def connected(self) -> bool:
        """True after a successful command and until the next connection error."""
        return self._connected

    # ── Internal helpers ──────────────────────────────────────────────────

    def _call(self, command: Callable[..., Any], *args: Any) -> Any:
        try:
            result = command(*args)
        except _CONNECTION_ERRORS as exc:
            self._connected = False
            logger.debug("RedisScriptStore: connection error: %s", exc)
            self._emit_error(exc)
            raise
        if not self._connected:
            self._connected = True
            logger.debug("RedisScriptStore: connected")
            self._emit_connected()
        return result

    # ── AbstractScriptStore ───────────────────────────────────────────────

    def connect(self) -> bool:
        """PING the server; emits on_connected on first success."""
        return bool(self._call(self._client.ping))

    def check_exists(self, digest: str) -> bool:
        results = self._call(self._client.script_exists, digest)
        return bool(results) and bool(results[0])

    def upload(self, body: str) -> str:
        sha = self._call(self._client.script_load, body)
        if isinstance(sha, bytes):
            sha = sha.decode("ascii")
        return sha

    def execute_by_digest(
        self,
        digest: str,
        keys: Sequence[Any],
        args: Sequence[Any],
    ) -> Any:
        return self._call(self._client.evalsha, digest, len(keys), *keys, *args)

    def is_script_not_known(self, exc: BaseException) -> bool:
        # redis-py strips the "NOSCRIPT " prefix when it builds NoScriptError
        if isinstance(exc, NoScriptError):
            return True
        return super().is_script_not_known(exc)

    def close(self) -> None:
        """Release the client's connection pool."""
        self._client.close()
        self._connected = False

    def __enter__(self) -> "RedisScriptStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        pool = getattr(self._client, "connection_pool", None)
        return f"RedisScriptStore({pool!r}, connected={self._connected})"

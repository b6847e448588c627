"""Runtime configuration for Scripto and the scripto CLI."""

import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

__all__ = ["ScriptoConfig", "BACKENDS"]

BACKENDS = ("redis", "memory")

_ENV_PREFIX = "SCRIPTO_"
_TRUE  = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name}: expected a boolean, got {raw!r}")


def _parse_timeout(name: str, raw: str) -> Optional[float]:
    value = raw.strip().lower()
    if value in ("", "none"):
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name}: expected seconds, got {raw!r}") from exc


@dataclass
class ScriptoConfig:
    """Runtime configuration; every field except decode_responses has an env override."""
    backend:           str             = "redis"          # "redis" | "memory"
    redis_url:         str             = "redis://localhost:6379/0"
    socket_timeout:    Optional[float] = 5.0              # seconds, None = block
    decode_responses:  bool            = True
    script_ext:        str             = ".lua"
    preload:           bool            = True             # upload in background on register
    reload_on_connect: bool            = True             # re-upload everything on (re)connect

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(
                f"Unknown backend: {self.backend!r}. Choose from: {list(BACKENDS)}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ScriptoConfig":
        """
        Build a config from SCRIPTO_* environment variables.

        Unset variables keep the dataclass defaults.

        Raises:
            ValueError: a variable holds an unparseable value.
        """
        env = os.environ if environ is None else environ
        kwargs: dict = {}
        for f in fields(cls):
            if f.name == "decode_responses":
                continue
            var = _ENV_PREFIX + f.name.upper()
            raw = env.get(var)
            if raw is None:
                continue
            if f.name in ("preload", "reload_on_connect"):
                kwargs[f.name] = _parse_bool(var, raw)
            elif f.name == "socket_timeout":
                kwargs[f.name] = _parse_timeout(var, raw)
            else:
                kwargs[f.name] = raw.strip()
        return cls(**kwargs)

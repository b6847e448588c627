"""Data models shared by the loader, lifecycle hooks and facade."""

from dataclasses import dataclass, field
from typing import Optional

__all__ = ["BulkLoadResult"]


@dataclass
class BulkLoadResult:
    """
    Outcome of one bulk ensure-loaded pass.

    digests     — name → digest for every script loaded before the first failure
    failed_name — name of the script whose load failed, or None
    error       — the exception raised by that load, or None
    """
    digests:     dict[str, str]          = field(default_factory=dict)
    failed_name: Optional[str]           = None
    error:       Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __str__(self) -> str:
        if self.ok:
            return f"BulkLoadResult(OK, loaded={len(self.digests)})"
        return (
            f"BulkLoadResult(FAIL, loaded={len(self.digests)}, "
            f"failed={self.failed_name!r}, error={self.error!r})"
        )

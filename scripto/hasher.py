"""Content hashing — maps a script body to the digest Redis uses for it."""

import hashlib
import re
from typing import Union

__all__ = ["digest", "is_digest", "DIGEST_HEX_LEN"]

# SHA1 hex digest length, as returned by SCRIPT LOAD
DIGEST_HEX_LEN = 40

_DIGEST_RE = re.compile(r"^[0-9a-f]{%d}$" % DIGEST_HEX_LEN)


def digest(body: Union[str, bytes]) -> str:
    """
    Return the lowercase hex SHA1 of *body*.

    str bodies are UTF-8 encoded first, which is what the server hashes
    when the same text is sent with SCRIPT LOAD.
    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    return hashlib.sha1(body).hexdigest()


def is_digest(value: object) -> bool:
    """True iff *value* looks like a script digest (40 lowercase hex chars)."""
    return isinstance(value, str) and bool(_DIGEST_RE.match(value))

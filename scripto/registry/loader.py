"""
Script file loading — reads Lua scripts from disk into name → body dicts.

Directory layout::

    scripts/
        incr_by.lua        → "incr_by"
        release_lock.lua   → "release_lock"
        .swp               → ignored (dotfile)
        nested/            → ignored (not a regular file)
"""

import logging
from pathlib import Path
from typing import Union

from scripto.exceptions import ScriptLoadError

__all__ = ["load_scripts_from_dir", "load_script_from_file", "script_name_for"]

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def script_name_for(filename: str, ext: str = ".lua") -> str:
    """
    Derive the script name from a file name.

    *ext* is stripped only when the file actually ends with it; any other
    file keeps its full name.
    """
    if ext and filename.endswith(ext) and len(filename) > len(ext):
        return filename[: -len(ext)]
    return filename


def load_script_from_file(filepath: PathLike) -> str:
    """
    Read one script body (UTF-8).

    Raises:
        ScriptLoadError: the file cannot be read.
    """
    path = Path(filepath).expanduser()
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ScriptLoadError(f"Cannot read script file {path}: {exc}") from exc


def load_scripts_from_dir(scripts_dir: PathLike, ext: str = ".lua") -> dict[str, str]:
    """
    Load every regular file in *scripts_dir* (non-recursive).

    Args:
        scripts_dir: directory to scan.
        ext:         extension stripped from file names to form script names.

    Returns:
        name → body, in sorted file-name order.  Names starting with "." are
        skipped.

    Raises:
        ScriptLoadError: the directory is missing or a file cannot be read.
    """
    root = Path(scripts_dir).expanduser()
    if not root.is_dir():
        raise ScriptLoadError(f"Script directory not found: {root}")

    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        raise ScriptLoadError(f"Cannot list script directory {root}: {exc}") from exc

    scripts: dict[str, str] = {}
    for entry in entries:
        if not entry.is_file():
            continue
        name = script_name_for(entry.name, ext)
        if name.startswith("."):
            continue
        scripts[name] = load_script_from_file(entry)

    logger.debug("Loaded %d script(s) from %s", len(scripts), root)
    return scripts

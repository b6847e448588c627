"""
registry — local name → Lua body bookkeeping.

Public API
──────────
ScriptRegistry         — thread-safe append-only name → body map
load_scripts_from_dir  — read a directory of *.lua files into a dict
load_script_from_file  — read a single script body
"""

from scripto.registry.registry import ScriptRegistry
from scripto.registry.loader import (
    load_script_from_file,
    load_scripts_from_dir,
    script_name_for,
)

__all__ = [
    "ScriptRegistry",
    "load_script_from_file",
    "load_scripts_from_dir",
    "script_name_for",
]

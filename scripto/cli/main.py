"""
CLI entry point for scripto.

Usage
─────
  # Digest of one or more script files (no server needed)
  scripto digest lua/incr_by.lua lua/release_lock.lua

  # Names and digests of every script in a directory
  scripto list --dir ./lua

  # Upload a directory of scripts
  scripto --url redis://cache:6379/0 load --dir ./lua

  # Run one script by name
  scripto run incr_by --dir ./lua --keys counter --args 5

Subcommands are implemented as standalone functions (cmd_digest, cmd_list,
cmd_load, cmd_run) so they can be unit-tested without invoking argparse.
"""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from scripto.client import Scripto
from scripto.config import BACKENDS, ScriptoConfig
from scripto.exceptions import ScriptoBaseError
from scripto.hasher import digest as compute_digest
from scripto.models import BulkLoadResult
from scripto.registry.loader import load_script_from_file, load_scripts_from_dir
from scripto.store.factory import get_store

__all__ = ["build_parser", "cmd_digest", "cmd_list", "cmd_load", "cmd_run", "main"]

logger = logging.getLogger(__name__)


# ── Argument parser ────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    """
    Build and return the top-level argument parser.

    Subcommands: digest | list | load | run
    """
    parser = argparse.ArgumentParser(
        prog="scripto",
        description="Register and run Redis Lua scripts by digest",
    )
    parser.add_argument(
        "--url",
        default=None,
        metavar="URL",
        help="Redis URL (default: $SCRIPTO_REDIS_URL or redis://localhost:6379/0)",
    )
    parser.add_argument(
        "--backend",
        choices=list(BACKENDS),
        default=None,
        help="Store backend (default: $SCRIPTO_BACKEND or redis; memory = dry run)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable verbose debug logging",
    )

    sub = parser.add_subparsers(dest="subcommand")

    # ── digest ────────────────────────────────────────────────────────────
    dig = sub.add_parser("digest", help="Print the SHA1 digest of script files")
    dig.add_argument("files", nargs="+", metavar="FILE", help="Script file(s)")

    # ── list ──────────────────────────────────────────────────────────────
    lst = sub.add_parser("list", help="List scripts found in a directory")
    lst.add_argument("--dir", required=True, dest="scripts_dir", metavar="DIR",
                     help="Script directory")

    # ── load ──────────────────────────────────────────────────────────────
    ld = sub.add_parser("load", help="Upload every script in a directory")
    ld.add_argument("--dir", required=True, dest="scripts_dir", metavar="DIR",
                    help="Script directory")

    # ── run ───────────────────────────────────────────────────────────────
    run = sub.add_parser("run", help="Run a script by name")
    run.add_argument("name", metavar="NAME", help="Script name")
    run.add_argument("--dir", required=True, dest="scripts_dir", metavar="DIR",
                     help="Script directory")
    run.add_argument("--keys", nargs="*", default=[], metavar="KEY",
                     help="KEYS passed to the script")
    run.add_argument("--args", nargs="*", default=[], dest="script_args", metavar="ARG",
                     help="ARGV passed to the script")

    return parser


# ── Helpers ───────────────────────────────────────────────────────────────────


def _resolve_config(ns: argparse.Namespace) -> ScriptoConfig:
    """Environment config with --url / --backend applied on top."""
    config = ScriptoConfig.from_env()
    overrides: dict = {"preload": False, "reload_on_connect": False}
    if ns.url:
        overrides["redis_url"] = ns.url
    if ns.backend:
        overrides["backend"] = ns.backend
    return dataclasses.replace(config, **overrides)


def _format_result(result: Any) -> str:
    if isinstance(result, bytes):
        return result.decode("utf-8", errors="replace")
    if isinstance(result, list):
        return "\n".join(_format_result(item) for item in result)
    return "(nil)" if result is None else str(result)


# ── Command implementations ───────────────────────────────────────────────────


def cmd_digest(files: list[str]) -> dict[str, str]:
    """Print ``<digest>  <file>`` for every file; return file → digest."""
    digests: dict[str, str] = {}
    for filename in files:
        sha = compute_digest(load_script_from_file(filename))
        digests[filename] = sha
        print(f"{sha}  {filename}")
    return digests


def cmd_list(scripts_dir: str, ext: str = ".lua") -> dict[str, str]:
    """Print ``<name>  <digest>`` for every script in *scripts_dir*."""
    scripts = load_scripts_from_dir(scripts_dir, ext=ext)
    if not scripts:
        print(f"0 scripts found in {Path(scripts_dir)}.")
        return {}
    digests = {name: compute_digest(body) for name, body in scripts.items()}
    for name, sha in digests.items():
        print(f"{name:<30} {sha}")
    return digests


def cmd_load(scripto: Scripto, scripts_dir: str) -> BulkLoadResult:
    """Register and upload every script in *scripts_dir*; print what loaded."""
    scripto.register_from_dir(scripts_dir)
    result = scripto.warm()
    for name, sha in result.digests.items():
        print(f"[loaded] {name:<30} {sha}")
    if not result.ok:
        print(f"[failed] {result.failed_name}: {result.error}", file=sys.stderr)
    logger.info("%s", result)
    return result


def cmd_run(
    scripto: Scripto,
    name: str,
    scripts_dir: str,
    keys: list[str],
    args: list[str],
) -> Any:
    """Register *scripts_dir*, run *name* and print the reply."""
    scripto.register_from_dir(scripts_dir)
    result = scripto.execute(name, keys, args)
    print(_format_result(result))
    return result


# ── Entry point ───────────────────────────────────────────────────────────────


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point. Returns exit code."""
    parser = build_parser()
    ns = parser.parse_args(argv)

    level = logging.DEBUG if ns.debug else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")

    if ns.subcommand is None:
        parser.print_help()
        return 0

    try:
        config = _resolve_config(ns)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if ns.subcommand == "digest":
        try:
            cmd_digest(ns.files)
        except ScriptoBaseError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        return 0

    if ns.subcommand == "list":
        try:
            cmd_list(ns.scripts_dir, ext=config.script_ext)
        except ScriptoBaseError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        return 0

    if ns.subcommand in ("load", "run"):
        try:
            with Scripto(get_store(config), config) as scripto:
                if ns.subcommand == "load":
                    result = cmd_load(scripto, ns.scripts_dir)
                    return 0 if result.ok else 1
                cmd_run(scripto, ns.name, ns.scripts_dir, ns.keys, ns.script_args)
        except Exception as exc:
            logger.debug("%s failed", ns.subcommand, exc_info=True)
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""
cli — command-line interface for scripto.

Entry points
────────────
  python -m scripto   (via scripto/__main__.py)
  scripto             (via pyproject.toml [project.scripts])

Subcommands: digest | list | load | run
"""

from scripto.cli.main import build_parser, cmd_digest, cmd_list, cmd_load, cmd_run, main

__all__ = ["build_parser", "cmd_digest", "cmd_list", "cmd_load", "cmd_run", "main"]

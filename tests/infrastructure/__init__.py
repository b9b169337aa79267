"""
Unified test infrastructure for Template Pages.

Modules:
- file_utils: Utilities for creating files and directories
- cli_utils: Running the CLI in a subprocess
- page_utils: Building template contexts over virtual files
"""

from .file_utils import write, write_pages
from .cli_utils import run_cli, jload
from .page_utils import make_context, render, sanitize, remove_whitespace

__all__ = [
    "write",
    "write_pages",
    "run_cli",
    "jload",
    "make_context",
    "render",
    "sanitize",
    "remove_whitespace",
]

"""Utility functions for gh-wt.

This package provides utility modules:
- console: the shared Rich console
- shell: running command strings through a POSIX shell
"""

from .console import console, disable_color
from .shell import run_command

__all__ = [
    "console",
    "disable_color",
    "run_command",
]

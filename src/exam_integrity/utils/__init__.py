"""
Utility module.

Common utilities for logging and file handling.
"""

from .logging import setup_logging, get_logger
from .files import ensure_dir, has_invalid_filename_chars, resolve_within

__all__ = [
    "setup_logging",
    "get_logger",
    "ensure_dir",
    "has_invalid_filename_chars",
    "resolve_within",
]

"""File handling utilities."""

import os
from pathlib import Path, PurePosixPath

# Characters the host filesystem refuses in a single file name
if os.name == "nt":
    INVALID_FILENAME_CHARS = frozenset('<>:"/\\|?*') | frozenset(chr(i) for i in range(32))
else:
    INVALID_FILENAME_CHARS = frozenset("\x00/")


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists

    Returns:
        The path (for chaining)
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def has_invalid_filename_chars(name: str) -> bool:
    """Check whether a file name contains characters illegal on this host."""
    return any(ch in INVALID_FILENAME_CHARS for ch in name)


def normalize_entry_name(name: str) -> str:
    """Normalize an archive entry name to forward slashes."""
    return name.replace("\\", "/")


def resolve_within(root: Path, entry_name: str) -> Path | None:
    """Resolve an archive entry name against a root directory.

    Entries that are absolute, carry a drive letter, or climb out of
    ``root`` through ``..`` segments are rejected.

    Args:
        root: Destination directory
        entry_name: Relative name as stored in the archive

    Returns:
        The target path inside ``root``, or None if the entry must be skipped
    """
    normalized = normalize_entry_name(entry_name)
    pure = PurePosixPath(normalized)

    if pure.is_absolute() or (len(normalized) > 1 and normalized[1] == ":"):
        return None

    parts = [p for p in pure.parts if p not in ("", ".")]
    if not parts:
        return None

    base = root.resolve()
    target = base.joinpath(*parts).resolve()

    if target == base or not target.is_relative_to(base):
        return None

    return target


def split_path_segments(path: str) -> list[str]:
    """Split a path on both separator styles, dropping empty segments."""
    return [p for p in normalize_entry_name(path).split("/") if p]

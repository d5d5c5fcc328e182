"""Ordering of test files before execution."""

from collections.abc import Iterable
from pathlib import Path

UNREADABLE_MTIME = float("-inf")


def order_by_mtime(files: Iterable[Path]) -> list[Path]:
    """Sort files by modification time, newest first.

    Ties keep their input order. Files whose mtime cannot be read sort last.
    The input is not modified.
    """
    return sorted(files, key=modification_time, reverse=True)


def modification_time(path: Path) -> float:
    """Return the mtime of ``path``, or a minimum sentinel if unavailable."""
    try:
        return path.stat().st_mtime
    except OSError:
        return UNREADABLE_MTIME

"""Discover test files in a directory tree."""

import logging
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from wcmatch import glob

logger = logging.getLogger(__name__)

GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE


@dataclass(frozen=True, kw_only=True)
class SkippedPath:
    """A path the walker could not read."""

    path: Path
    reason: str


@dataclass(frozen=True, kw_only=True)
class DiscoveryResult:
    """Files found by discovery plus the paths that had to be skipped."""

    files: Sequence[Path]
    skipped: Sequence[SkippedPath] = ()


def discover(
    root: Path,
    include: str,
    exclude: Sequence[str] = (),
) -> DiscoveryResult:
    """Recursively find files under ``root`` matching ``include``.

    Patterns are matched against paths relative to ``root`` (absolute
    patterns against absolute paths). A directory matching any exclude
    pattern is never descended into. Symlinked directories are not
    followed.

    Args:
        root: Directory to walk
        include: Glob a file path must match (supports ``**`` and ``{a,b}``)
        exclude: Globs for directories and files to skip

    Returns:
        Deduplicated files in traversal order, and the unreadable paths that
        were skipped along the way.

    """
    files: list[Path] = []
    skipped: list[SkippedPath] = []
    seen: set[Path] = set()

    def on_error(error: OSError) -> None:
        path = Path(error.filename) if error.filename else root
        skipped.append(SkippedPath(path=path, reason=error.strerror or str(error)))

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        current = Path(dirpath)
        dirnames[:] = [
            name
            for name in dirnames
            if not matches_any(current / name, root, exclude, is_dir=True)
        ]

        for name in filenames:
            path = current / name
            if not matches_any(path, root, [include]):
                continue
            if matches_any(path, root, exclude):
                continue

            try:
                key = path.resolve(strict=True)
            except OSError as e:
                skipped.append(SkippedPath(path=path, reason=str(e)))
                continue

            if key not in seen:
                seen.add(key)
                files.append(path)

    for entry in skipped:
        logger.debug("Skipped unreadable path %s: %s", entry.path, entry.reason)

    return DiscoveryResult(files=tuple(files), skipped=tuple(skipped))


def resolve_targets(
    targets: Sequence[str],
    include: str,
    exclude: Sequence[str] = (),
    cwd: Path | None = None,
) -> DiscoveryResult:
    """Turn CLI positional arguments into test files.

    With no targets the whole of ``cwd`` is searched with ``include``. An
    existing regular file is taken as-is; any other target is used as the
    include pattern for a search rooted at ``cwd``.
    """
    cwd = cwd or Path.cwd()

    if not targets:
        return discover(cwd, include, exclude)

    files: list[Path] = []
    skipped: list[SkippedPath] = []

    for target in targets:
        candidate = cwd / target
        if candidate.is_file():
            files.append(candidate)
            continue

        result = discover(cwd, _strip_dot_prefix(target), exclude)
        files.extend(result.files)
        skipped.extend(result.skipped)

    return DiscoveryResult(files=dedupe(files), skipped=tuple(skipped))


def matches_any(
    path: Path,
    root: Path,
    patterns: Iterable[str],
    *,
    is_dir: bool = False,
) -> bool:
    """Check whether ``path`` matches any of the glob ``patterns``."""
    try:
        relative = path.relative_to(root).as_posix()
    except ValueError:
        relative = path.as_posix()
    absolute = path.absolute().as_posix()

    for pattern in patterns:
        candidate = absolute if os.path.isabs(pattern) else relative
        candidates = [candidate, f"{candidate}/"] if is_dir else [candidate]
        if any(glob.globmatch(c, pattern, flags=GLOB_FLAGS) for c in candidates):
            return True
    return False


def dedupe(paths: Iterable[Path]) -> Sequence[Path]:
    """Drop paths that refer to a file already seen, keeping first occurrence."""
    seen: set[Path] = set()
    unique: list[Path] = []
    for path in paths:
        try:
            key = path.resolve()
        except OSError:
            key = path.absolute()
        if key not in seen:
            seen.add(key)
            unique.append(path)
    return tuple(unique)


def _strip_dot_prefix(pattern: str) -> str:
    while pattern.startswith("./"):
        pattern = pattern[2:]
    return pattern

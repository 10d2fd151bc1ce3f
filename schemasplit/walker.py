"""Lazy depth-first walk over a workspace tree, pruning build and VCS directories."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

DEFAULT_EXCLUDED: tuple[str, ...] = ("node_modules", "target", ".git")
"""Substrings that mark a directory name as a build or version-control artifact."""


def is_excluded(name: str, excluded: Iterable[str] = DEFAULT_EXCLUDED) -> bool:
    """True when *name* contains any of the excluded substrings."""
    return any(part in name for part in excluded)


def traverse(
    root_dir: Path,
    excluded: Iterable[str] = DEFAULT_EXCLUDED,
) -> Iterator[Path]:
    """Yield every non-directory path under *root_dir*, depth first.

    Entries come in directory-listing order.  Excluded directories are
    neither descended into nor yielded.  Symlinked directories are yielded
    as plain entries, not followed.  Each call starts a fresh walk.
    """
    excluded = tuple(excluded)
    # Snapshot each listing so files written beside a document mid-walk
    # are not picked up by the same walk.
    entries = list(Path(root_dir).iterdir())
    for entry in entries:
        if entry.is_dir() and not entry.is_symlink():
            if is_excluded(entry.name, excluded):
                continue
            yield from traverse(entry, excluded)
        else:
            yield entry


def iter_json_files(
    root_dir: Path,
    excluded: Iterable[str] = DEFAULT_EXCLUDED,
) -> Iterator[Path]:
    """Filter :func:`traverse` to paths whose name ends in ``.json``."""
    for path in traverse(root_dir, excluded):
        if path.name.endswith(".json"):
            yield path

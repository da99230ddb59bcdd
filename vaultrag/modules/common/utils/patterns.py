"""Glob-style path filtering for vault documents."""

import fnmatch
from typing import Iterable, List, Sequence


def matches_any(path: str, patterns: Sequence[str]) -> bool:
    """Return True when ``path`` matches at least one glob pattern.

    Patterns are matched against both the relative path and its root-anchored
    form, so ``**/*.md`` also matches ``note.md`` at the vault root.
    """
    anchored = f"/{path}"
    return any(fnmatch.fnmatch(path, pattern) or fnmatch.fnmatch(anchored, pattern) for pattern in patterns)


def filter_paths(paths: Iterable[str], exclude: Sequence[str], include: Sequence[str]) -> List[str]:
    """Apply exclude patterns, then include patterns, preserving input order.

    A path matching an exclude pattern is dropped even if it also matches an
    include pattern. An empty include list admits every remaining path.
    """
    filtered = []
    for path in paths:
        if exclude and matches_any(path, exclude):
            continue
        if include and not matches_any(path, include):
            continue
        filtered.append(path)
    return filtered

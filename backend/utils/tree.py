"""Recursive directory listing shared by the draft and public trees."""

from __future__ import annotations

import os
from collections.abc import Callable, Collection, Iterator
from pathlib import Path


def walk_files(
    root: Path,
    subdir: str = "",
    include: Callable[[str], bool] | None = None,
    skip_dirs: Collection[str] = (),
) -> Iterator[str]:
    """
    Yield file paths under root/subdir as POSIX paths relative to root.

    Entries are visited in name order so listings are stable. Symlinks are
    neither followed nor yielded, so nothing outside root is reached. A
    missing directory yields nothing; other OS errors propagate. Each call
    starts a fresh traversal.

    Args:
        root: Directory the yielded paths are relative to
        subdir: POSIX-style subdirectory of root to start from
        include: Predicate on the file name; files failing it are skipped
        skip_dirs: Root-relative directory paths not descended into
    """
    directory = root / subdir if subdir else root
    try:
        entries = sorted(os.scandir(directory), key=lambda e: e.name)
    except FileNotFoundError:
        return

    for entry in entries:
        rel = f"{subdir}/{entry.name}" if subdir else entry.name
        if entry.is_dir(follow_symlinks=False):
            if rel not in skip_dirs:
                yield from walk_files(root, rel, include, skip_dirs)
        elif entry.is_file(follow_symlinks=False) and (include is None or include(entry.name)):
            yield rel

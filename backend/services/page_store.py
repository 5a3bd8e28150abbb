"""Draft page storage — CRUD over HTML documents in the drafts tree."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path

from backend.utils.safe_path import safe_path
from backend.utils.tree import walk_files

logger = logging.getLogger(__name__)

PAGE_EXTENSION = ".html"


def is_page(name: str) -> bool:
    """True for file names carrying the page extension."""
    return name.endswith(PAGE_EXTENSION)


def _write_atomic(target: Path, content: str) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _read_or_none(target: Path) -> str | None:
    try:
        return target.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


class PageStore:
    """
    All draft page operations.

    Every path is validated against the drafts root before use. Nothing in
    this class touches the public tree.
    """

    def __init__(self, drafts_dir: Path) -> None:
        self.root = Path(os.path.abspath(drafts_dir))

    def resolve(self, page_path: str) -> Path:
        """Validate a page path and return its absolute location in drafts."""
        return safe_path(self.root, page_path)

    async def get(self, page_path: str) -> str | None:
        """
        Read a draft page.

        Args:
            page_path: Relative page path, e.g. "index.html" or "about/team.html"

        Returns:
            HTML content, or None if the page does not exist
        """
        target = self.resolve(page_path)
        return await asyncio.to_thread(_read_or_none, target)

    async def save(self, page_path: str, html: str) -> None:
        """
        Write a draft page, creating parent directories as needed.

        Args:
            page_path: Relative page path
            html: Full HTML document
        """
        target = self.resolve(page_path)
        await asyncio.to_thread(_write_atomic, target, html)

    async def delete(self, page_path: str) -> None:
        """Delete a draft page. Missing pages are ignored."""
        target = self.resolve(page_path)
        await asyncio.to_thread(target.unlink, missing_ok=True)

    async def list(self, subdir: str = "") -> list[str]:
        """
        List draft pages recursively.

        Args:
            subdir: Optional subdirectory of drafts to scan

        Returns:
            Sorted page paths relative to the drafts root
        """
        start = self.resolve(subdir).relative_to(self.root).as_posix() if subdir else ""
        if start == ".":
            start = ""
        await asyncio.to_thread(self.root.mkdir, parents=True, exist_ok=True)
        return await asyncio.to_thread(lambda: list(walk_files(self.root, start, is_page)))

    async def exists(self, page_path: str) -> bool:
        target = self.resolve(page_path)
        return await asyncio.to_thread(target.is_file)

    async def backup(self, page_path: str) -> str | None:
        """
        Copy a draft page to a timestamped sibling before editing.

        "about.html" -> "about.backup-2026-01-31T12-00-00-000000Z.html"

        Args:
            page_path: Relative page path

        Returns:
            Relative path of the backup, or None if the page does not exist
        """
        content = await self.get(page_path)
        if content is None:
            return None

        timestamp = datetime.now(UTC).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        stem = page_path[: -len(PAGE_EXTENSION)] if is_page(page_path) else page_path
        backup_path = f"{stem}.backup-{timestamp}{PAGE_EXTENSION}"

        await self.save(backup_path, content)
        logger.info("Backed up %s to %s", page_path, backup_path)
        return backup_path

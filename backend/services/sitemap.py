"""Sitemap generation from the published page tree."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from backend.models.publish import SitemapResult
from backend.services.page_store import PAGE_EXTENSION, is_page
from backend.utils.tree import walk_files

logger = logging.getLogger(__name__)

SITEMAP_FILENAME = "sitemap.xml"
SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
INDEX_NAME = "index"

_XML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
}


@dataclass(frozen=True)
class PublishedPage:
    path: str
    lastmod: str  # YYYY-MM-DD


def escape_xml(value: str) -> str:
    """Escape the five reserved XML characters."""
    return "".join(_XML_ESCAPES.get(ch, ch) for ch in value)


def page_path_to_url_path(page_path: str) -> str:
    """
    Map a published file path to its canonical URL path.

    index.html       -> /
    about.html       -> /about
    about/team.html  -> /about/team
    about/index.html -> /about/
    """
    url_path = page_path[: -len(PAGE_EXTENSION)] if page_path.endswith(PAGE_EXTENSION) else page_path

    if url_path == INDEX_NAME:
        return "/"
    if url_path.endswith("/" + INDEX_NAME):
        return "/" + url_path[: -len(INDEX_NAME)]
    return "/" + url_path


def render_sitemap(pages: list[PublishedPage], base_url: str) -> str:
    """Build the <urlset> document for a list of published pages."""
    clean_base = base_url.rstrip("/")
    entries = [
        f"  <url>\n"
        f"    <loc>{escape_xml(clean_base + page_path_to_url_path(page.path))}</loc>\n"
        f"    <lastmod>{escape_xml(page.lastmod)}</lastmod>\n"
        f"  </url>"
        for page in pages
    ]
    lines = ['<?xml version="1.0" encoding="UTF-8"?>', f'<urlset xmlns="{SITEMAP_NS}">', *entries, "</urlset>"]
    return "\n".join(lines) + "\n"


class SitemapGenerator:
    """Writes public/sitemap.xml from the current public tree."""

    def __init__(self, public_dir: Path, site_url: str, assets_dirname: str = "assets") -> None:
        self.root = Path(os.path.abspath(public_dir))
        self.site_url = site_url
        self.assets_dirname = assets_dirname

    @property
    def sitemap_path(self) -> Path:
        return self.root / SITEMAP_FILENAME

    def _page_paths(self):
        # Fingerprinted assets are not pages even when they end in .html
        return walk_files(self.root, include=is_page, skip_dirs=(self.assets_dirname,))

    def list_published_pages(self) -> list[PublishedPage]:
        pages = []
        for rel_path in self._page_paths():
            mtime = (self.root / rel_path).stat().st_mtime
            lastmod = datetime.fromtimestamp(mtime, UTC).strftime("%Y-%m-%d")
            pages.append(PublishedPage(path=rel_path, lastmod=lastmod))
        return pages

    async def count_pages(self) -> int:
        """Number of HTML pages currently in the public tree."""
        return await asyncio.to_thread(lambda: sum(1 for _ in self._page_paths()))

    def _generate_sync(self) -> int:
        self.root.mkdir(parents=True, exist_ok=True)
        pages = self.list_published_pages()
        self.sitemap_path.write_text(render_sitemap(pages, self.site_url), encoding="utf-8")
        return len(pages)

    async def generate(self) -> SitemapResult:
        """
        Generate and save sitemap.xml.

        Returns:
            SitemapResult with the number of pages listed

        Raises:
            OSError: If the public tree cannot be read or the file written
        """
        try:
            page_count = await asyncio.to_thread(self._generate_sync)
        except OSError as e:
            logger.error("Failed to generate sitemap: %s", e)
            raise

        logger.info("Sitemap generated with %d pages", page_count)
        return SitemapResult(page_count=page_count, path=SITEMAP_FILENAME)

    async def delete(self) -> bool:
        """
        Delete sitemap.xml, e.g. when the last page is unpublished.

        Returns:
            True if the file existed, False otherwise
        """
        try:
            await asyncio.to_thread(self.sitemap_path.unlink)
        except FileNotFoundError:
            return False
        logger.info("Sitemap deleted")
        return True

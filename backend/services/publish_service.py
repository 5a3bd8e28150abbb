"""
Publish service — promotes draft pages into the public tree.

Page copies are the committed part of every operation. Asset publishing
and sitemap regeneration run afterwards as post-publish hooks: each hook's
failure is logged and returned in the report instead of failing the page
operation, because a page can be live even if its side effects lag behind.

Publish and unpublish calls are serialized by a process-wide lock so two
overlapping publishes cannot interleave manifest writes.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import stat
from collections.abc import Awaitable, Callable
from pathlib import Path

from backend.models.publish import (
    HookFailure,
    HookReport,
    PageError,
    PublishAllReport,
    PublishOneReport,
    PublishStatus,
    UnpublishReport,
)
from backend.services.asset_publisher import AssetPublisher
from backend.services.errors import NoPagesToPublishError, PageNotFoundError
from backend.services.page_store import PageStore, is_page
from backend.services.sitemap import SitemapGenerator
from backend.utils.safe_path import safe_path

logger = logging.getLogger(__name__)

# A post-publish hook receives the report it should annotate
PostPublishHook = tuple[str, Callable[[HookReport], Awaitable[None]]]


def _copy_page(source: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    # copyfile, not copy2: the public mtime must mark the publish time
    shutil.copyfile(source, dest)


def _mtime_ns(path: Path) -> int | None:
    try:
        info = path.stat()
    except FileNotFoundError:
        return None
    return info.st_mtime_ns if stat.S_ISREG(info.st_mode) else None


class PublishService:
    """Draft -> public page synchronization and publish status."""

    def __init__(
        self,
        pages: PageStore,
        public_dir: Path,
        assets: AssetPublisher,
        sitemap: SitemapGenerator,
    ) -> None:
        self.pages = pages
        self.public_root = Path(os.path.abspath(public_dir))
        self.assets = assets
        self.sitemap = sitemap
        self._lock = asyncio.Lock()

    # ── paths ───────────────────────────────────────────────────────────────

    def draft_path(self, page_path: str) -> Path:
        return self.pages.resolve(page_path)

    def public_path(self, page_path: str) -> Path:
        return safe_path(self.public_root, page_path)

    # ── hooks ───────────────────────────────────────────────────────────────

    async def _publish_assets(self, report: HookReport) -> None:
        await self.assets.publish()

    async def _regenerate_sitemap(self, report: HookReport) -> None:
        report.sitemap = await self.sitemap.generate()

    async def _refresh_sitemap(self, report: HookReport) -> None:
        if await self.sitemap.count_pages() == 0:
            report.sitemap_deleted = await self.sitemap.delete()
        else:
            report.sitemap = await self.sitemap.generate()

    @property
    def publish_hooks(self) -> list[PostPublishHook]:
        return [("assets", self._publish_assets), ("sitemap", self._regenerate_sitemap)]

    @property
    def unpublish_hooks(self) -> list[PostPublishHook]:
        return [("assets", self._publish_assets), ("sitemap", self._refresh_sitemap)]

    async def _run_hooks(self, hooks: list[PostPublishHook], report: HookReport) -> None:
        for name, hook in hooks:
            try:
                await hook(report)
            except Exception as e:
                logger.exception("Post-publish hook %r failed", name)
                report.hook_failures.append(HookFailure(hook=name, error=str(e)))

    # ── operations ──────────────────────────────────────────────────────────

    async def publish_all(self) -> PublishAllReport:
        """
        Copy every draft page to the public tree.

        Individual copy failures are recorded and skipped so one bad page does
        not block the rest.

        Returns:
            PublishAllReport listing published pages, page errors and hook failures

        Raises:
            NoPagesToPublishError: If the draft tree has no pages
        """
        async with self._lock:
            page_paths = await self.pages.list()
            if not page_paths:
                raise NoPagesToPublishError()

            report = PublishAllReport()
            for page_path in page_paths:
                try:
                    await asyncio.to_thread(
                        _copy_page, self.draft_path(page_path), self.public_path(page_path)
                    )
                except OSError as e:
                    logger.error("Failed to publish %s: %s", page_path, e)
                    report.errors.append(PageError(path=page_path, error=str(e)))
                else:
                    report.published.append(page_path)

            await self._run_hooks(self.publish_hooks, report)

        logger.info(
            "Published %d pages (%d errors, %d hook failures)",
            len(report.published),
            len(report.errors),
            len(report.hook_failures),
        )
        return report

    async def publish_one(self, page_path: str) -> PublishOneReport:
        """
        Copy a single draft page to the public tree.

        Raises:
            PathTraversalError: If the path escapes the site directories
            PageNotFoundError: If no draft exists at that path
            OSError: If the copy itself fails
        """
        source = self.draft_path(page_path)
        dest = self.public_path(page_path)

        async with self._lock:
            if not is_page(page_path) or not await asyncio.to_thread(source.is_file):
                raise PageNotFoundError(page_path, tree="drafts")

            await asyncio.to_thread(_copy_page, source, dest)
            report = PublishOneReport(published=page_path)
            await self._run_hooks(self.publish_hooks, report)

        logger.info("Published %s", page_path)
        return report

    async def unpublish(self, page_path: str) -> UnpublishReport:
        """
        Remove a page from the public tree. The draft is left untouched.

        Raises:
            PathTraversalError: If the path escapes the public directory
            PageNotFoundError: If the page is not published
        """
        dest = self.public_path(page_path)

        async with self._lock:
            if not is_page(page_path):
                raise PageNotFoundError(page_path, tree="public")
            try:
                await asyncio.to_thread(dest.unlink)
            except FileNotFoundError:
                raise PageNotFoundError(page_path, tree="public") from None

            report = UnpublishReport(unpublished=page_path)
            await self._run_hooks(self.unpublish_hooks, report)

        logger.info("Unpublished %s", page_path)
        return report

    async def status(self, page_path: str) -> PublishStatus:
        """
        Derive the publish status of a draft page from file mtimes.

        Returns:
            PublishStatus; has_unpublished_changes is True only when the page is
            published and the draft is strictly newer than the public copy

        Raises:
            PathTraversalError: If the path escapes the site directories
            PageNotFoundError: If no draft exists at that path
        """
        source = self.draft_path(page_path)
        dest = self.public_path(page_path)

        draft_mtime, public_mtime = await asyncio.gather(
            asyncio.to_thread(_mtime_ns, source),
            asyncio.to_thread(_mtime_ns, dest),
        )
        if draft_mtime is None:
            raise PageNotFoundError(page_path, tree="drafts")

        is_published = public_mtime is not None
        return PublishStatus(
            page_path=page_path,
            is_published=is_published,
            has_unpublished_changes=is_published and draft_mtime > public_mtime,
        )

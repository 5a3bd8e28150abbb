"""Publish pipeline models: reports, status, and sitemap results."""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field


class PageError(BaseModel):
    """A single page that failed to copy during a batch publish."""

    path: str
    error: str


class HookFailure(BaseModel):
    """A post-publish side effect (assets, sitemap) that raised."""

    hook: str
    error: str


class SitemapResult(BaseModel):
    """What sitemap generation returns."""

    page_count: int
    path: str = "sitemap.xml"


class AssetPublishResult(BaseModel):
    """What an asset publish returns."""

    manifest: dict[str, str] = Field(default_factory=dict)

    @property
    def asset_count(self) -> int:
        return len(self.manifest)


class PublishStatus(BaseModel):
    """Derived publish state of one draft page."""

    page_path: str
    is_published: bool
    has_unpublished_changes: bool = False


class HookReport(BaseModel):
    """Outcome of running the post-publish hooks after a page-level change."""

    hook_failures: list[HookFailure] = Field(default_factory=list)
    sitemap: SitemapResult | None = None
    sitemap_deleted: bool = False


class PublishAllReport(HookReport):
    """What POST /publish returns. Partial success keeps success=True."""

    success: bool = True
    published: list[str] = Field(default_factory=list)
    errors: list[PageError] = Field(default_factory=list)

    @computed_field
    @property
    def is_partial(self) -> bool:
        return bool(self.errors or self.hook_failures)


class PublishOneReport(HookReport):
    """What POST /publish/{path} returns."""

    success: bool = True
    published: str


class UnpublishReport(HookReport):
    """What DELETE /publish/{path} returns."""

    success: bool = True
    unpublished: str

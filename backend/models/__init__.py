"""
Pydantic models for Capuzzella.

All data shapes defined here. No imports from services or routes.
"""

from backend.models.publish import (
    AssetPublishResult,
    HookFailure,
    HookReport,
    PageError,
    PublishAllReport,
    PublishOneReport,
    PublishStatus,
    SitemapResult,
    UnpublishReport,
)

__all__ = [
    # Reports
    "PublishAllReport",
    "PublishOneReport",
    "UnpublishReport",
    "HookReport",
    "HookFailure",
    "PageError",
    # Results
    "AssetPublishResult",
    "SitemapResult",
    "PublishStatus",
]

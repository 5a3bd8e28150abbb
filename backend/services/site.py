"""Site layout — wires the publish pipeline for one base directory."""

from __future__ import annotations

import os
from pathlib import Path

from fastapi import Request

from backend import config
from backend.services.asset_manifest import MANIFEST_FILENAME, AssetManifest
from backend.services.asset_publisher import AssetPublisher
from backend.services.page_store import PageStore
from backend.services.publish_service import PublishService
from backend.services.sitemap import SitemapGenerator

ASSETS_DIRNAME = "assets"


class Site:
    """
    Draft and public trees under one base directory.

        <base>/drafts/<page>.html
        <base>/drafts/assets/<path>
        <base>/public/<page>.html
        <base>/public/assets/<fingerprinted>[.br]
        <base>/public/assets/manifest.json
        <base>/public/sitemap.xml

    Built once per process; the manifest it owns must be loaded before
    public HTML is served.
    """

    def __init__(self, base_dir: Path, site_url: str, brotli_quality: int = 11) -> None:
        self.base_dir = Path(os.path.abspath(base_dir))
        self.drafts_dir = self.base_dir / "drafts"
        self.public_dir = self.base_dir / "public"
        self.drafts_assets_dir = self.drafts_dir / ASSETS_DIRNAME
        self.public_assets_dir = self.public_dir / ASSETS_DIRNAME

        self.manifest = AssetManifest(self.public_assets_dir / MANIFEST_FILENAME)
        self.pages = PageStore(self.drafts_dir)
        self.assets = AssetPublisher(
            self.drafts_assets_dir,
            self.public_assets_dir,
            self.manifest,
            brotli_quality=brotli_quality,
        )
        self.sitemap = SitemapGenerator(self.public_dir, site_url, assets_dirname=ASSETS_DIRNAME)
        self.publisher = PublishService(self.pages, self.public_dir, self.assets, self.sitemap)

    @classmethod
    def from_settings(cls) -> Site:
        settings = config.settings
        return cls(settings.BASE_DIR, settings.SITE_URL, brotli_quality=settings.BROTLI_QUALITY)

    def startup(self) -> None:
        """Create both trees and load the asset manifest."""
        self.drafts_dir.mkdir(parents=True, exist_ok=True)
        self.public_dir.mkdir(parents=True, exist_ok=True)
        self.manifest.load()


def get_site(request: Request) -> Site:
    """FastAPI dependency returning the Site built in the app lifespan."""
    return request.app.state.site

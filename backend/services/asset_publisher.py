"""
Asset publisher — fingerprinted, precompressed copy of drafts/assets.

For every file under drafts/assets/:
  1. hash the bytes (MD5 hex)
  2. write them to public/assets/<name>.<hash>.<ext>
  3. write a Brotli-compressed sibling <name>.<hash>.<ext>.br
Then write public/assets/manifest.json and reload the AssetManifest.

The digest is a pure function of the bytes, so publishing unchanged drafts
produces the same file names and contents every time. Previously published
fingerprints are left in place so cached HTML keeps resolving.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path

import brotli

from backend.models.publish import AssetPublishResult
from backend.services.asset_manifest import MANIFEST_FILENAME, AssetManifest
from backend.utils.content_hash import fingerprint_path, hash_bytes
from backend.utils.tree import walk_files

logger = logging.getLogger(__name__)

COMPRESSED_SUFFIX = ".br"


def _is_source_asset(name: str) -> bool:
    # .br siblings are regenerated from their source, never copied verbatim
    return not name.endswith(COMPRESSED_SUFFIX)


def _write_bytes(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)


class AssetPublisher:
    """Publishes drafts/assets into public/assets and refreshes the manifest."""

    def __init__(
        self,
        drafts_assets_dir: Path,
        public_assets_dir: Path,
        manifest: AssetManifest,
        brotli_quality: int = 11,
    ) -> None:
        self.source_root = Path(os.path.abspath(drafts_assets_dir))
        self.target_root = Path(os.path.abspath(public_assets_dir))
        self.manifest = manifest
        self.brotli_quality = brotli_quality

    @property
    def manifest_path(self) -> Path:
        return self.target_root / MANIFEST_FILENAME

    def list_sources(self) -> list[str]:
        """Relative POSIX paths of every publishable draft asset."""
        return list(walk_files(self.source_root, include=_is_source_asset))

    def publish_file(self, rel_path: str) -> str:
        """
        Fingerprint, copy and compress a single asset.

        Args:
            rel_path: Path relative to the draft asset root

        Returns:
            Fingerprinted path relative to the public asset root

        Raises:
            OSError: If the source cannot be read or the target written
        """
        data = (self.source_root / rel_path).read_bytes()
        fingerprinted = fingerprint_path(rel_path, hash_bytes(data))
        target = self.target_root / fingerprinted

        _write_bytes(target, data)
        _write_bytes(
            target.with_name(target.name + COMPRESSED_SUFFIX),
            brotli.compress(data, quality=self.brotli_quality),
        )
        return fingerprinted

    def _publish_sync(self) -> dict[str, str]:
        if not self.source_root.is_dir():
            logger.info("No draft assets at %s, nothing to publish", self.source_root)

        mapping: dict[str, str] = {}
        for rel_path in self.list_sources():
            mapping[rel_path] = self.publish_file(rel_path)

        # Manifest is only rewritten once every asset it names is on disk
        self.target_root.mkdir(parents=True, exist_ok=True)
        tmp = self.manifest_path.with_name(MANIFEST_FILENAME + ".tmp")
        tmp.write_text(json.dumps(mapping, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        os.replace(tmp, self.manifest_path)
        return mapping

    async def publish(self) -> AssetPublishResult:
        """
        Publish all draft assets and reload the in-memory manifest.

        Any I/O failure aborts the run and propagates; the previous manifest
        file is left untouched in that case.

        Returns:
            AssetPublishResult with the new original -> fingerprinted mapping
        """
        mapping = await asyncio.to_thread(self._publish_sync)
        self.manifest.reload()
        logger.info("Published %d assets", len(mapping))
        return AssetPublishResult(manifest=mapping)

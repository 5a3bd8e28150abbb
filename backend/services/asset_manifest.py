"""
Asset manifest — maps original asset paths to fingerprinted paths.

    {"css/bootstrap.min.css": "css/bootstrap.min.d41d8cd98f00b204e9800998ecf8427e.css"}

One instance is built at startup and shared with everything that serves
published HTML. It is reloaded from disk after every asset publish; the
mapping is swapped wholesale, never edited in place.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"


class AssetManifest:
    """In-memory copy of public/assets/manifest.json."""

    def __init__(self, manifest_path: Path) -> None:
        self.path = manifest_path
        self._entries: Mapping[str, str] = MappingProxyType({})

    @property
    def entries(self) -> Mapping[str, str]:
        """Read-only view of the current mapping."""
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def load(self) -> None:
        """
        Load (or reload) the manifest from disk.

        A missing file means no assets have been published yet. Unreadable or
        malformed files are logged and treated as empty, since serving
        unfingerprinted paths is always safe.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
            data = json.loads(raw)
        except FileNotFoundError:
            self._entries = MappingProxyType({})
            return
        except (OSError, ValueError) as e:
            logger.warning("Failed to load asset manifest %s: %s", self.path, e)
            self._entries = MappingProxyType({})
            return

        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        ):
            logger.warning("Ignoring asset manifest %s: expected a flat string map", self.path)
            self._entries = MappingProxyType({})
            return

        self._entries = MappingProxyType(dict(data))
        logger.debug("Loaded asset manifest with %d entries", len(data))

    reload = load

    def resolve(self, original: str) -> str | None:
        """Return the fingerprinted path for an original asset path, if known."""
        return self._entries.get(original)

    def rewrite(self, html: str) -> str:
        """
        Rewrite asset references in HTML to their fingerprinted equivalents.

        Every literal "assets/<original>" becomes "assets/<fingerprinted>",
        which covers both "/assets/..." and relative "assets/..." references.
        Matching is plain substring replacement, so an entry can also match
        inside a longer path that happens to contain it.

        Args:
            html: Published page markup

        Returns:
            Rewritten markup (unchanged when the manifest is empty)
        """
        entries = self._entries
        if not html or not entries:
            return html

        result = html
        for original, fingerprinted in entries.items():
            result = result.replace(f"assets/{original}", f"assets/{fingerprinted}")
        return result

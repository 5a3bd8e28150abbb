"""Public site serving — published pages and assets from the public tree."""

from __future__ import annotations

import asyncio
import hashlib
import mimetypes
import re
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, HTMLResponse, PlainTextResponse, Response

from backend.services.asset_publisher import COMPRESSED_SUFFIX
from backend.services.page_store import PAGE_EXTENSION
from backend.services.site import Site, get_site
from backend.utils.safe_path import PathTraversalError, safe_path

router = APIRouter(tags=["pages"])

# Cache-Control TTL: 5 minutes for stale-while-revalidate, 1 hour shared cache
_CACHE_CONTROL = "public, max-age=300, s-maxage=3600, stale-while-revalidate=86400"
# Fingerprinted assets change name whenever their content changes
_IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"
_ASSET_PATTERN = re.compile(r"(?:^|/)assets/(.+)$")
_INDEX_FILE = "index" + PAGE_EXTENSION


def _accepts_brotli(request: Request) -> bool:
    return "br" in request.headers.get("accept-encoding", "").lower()


def _is_fingerprinted(path: Path, site: Site) -> bool:
    if not path.is_relative_to(site.public_assets_dir):
        return False
    rel = path.relative_to(site.public_assets_dir).as_posix()
    return rel in site.manifest.entries.values()


def _file_response(path: Path, request: Request, cache_control: str) -> Response | None:
    """Serve a static file, preferring its .br sibling when the client accepts it."""
    if not path.is_file():
        return None

    media_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    headers = {"Cache-Control": cache_control, "X-Content-Type-Options": "nosniff"}

    compressed = path.with_name(path.name + COMPRESSED_SUFFIX)
    if _accepts_brotli(request) and compressed.is_file():
        headers["Content-Encoding"] = "br"
        headers["Vary"] = "Accept-Encoding"
        return FileResponse(str(compressed), media_type=media_type, headers=headers)

    return FileResponse(str(path), media_type=media_type, headers=headers)


async def _html_response(path: Path, site: Site) -> Response | None:
    """Serve published HTML with asset references rewritten through the manifest."""
    if not path.is_file():
        return None

    raw = await asyncio.to_thread(path.read_bytes)
    html = raw.decode("utf-8", errors="replace")
    body = site.manifest.rewrite(html).encode("utf-8")
    etag = f'"{hashlib.md5(body, usedforsecurity=False).hexdigest()}"'

    return Response(
        content=body,
        media_type="text/html; charset=utf-8",
        headers={
            "Cache-Control": _CACHE_CONTROL,
            "ETag": etag,
            "X-Content-Type-Options": "nosniff",
        },
    )


@router.get("/{request_path:path}")
async def serve_public(request_path: str, request: Request, site: Site = Depends(get_site)) -> Response:
    """
    Serve the published site.

    - /assets/<path> (at any depth) is looked up in drafts/assets first, so
      unfingerprinted names keep working, then in public/
    - / and */ map to index.html; extensionless paths try <path>.html
    - HTML is rewritten to fingerprinted asset URLs before it is sent
    """
    try:
        match = _ASSET_PATTERN.search(request_path)
        if match:
            draft_asset = safe_path(site.drafts_assets_dir, match.group(1))
            response = _file_response(draft_asset, request, "no-cache")
            if response:
                return response

        static_path = request_path
        if not static_path or static_path.endswith("/"):
            static_path += _INDEX_FILE

        public_file = safe_path(site.public_dir, static_path)
        if public_file.name.endswith(PAGE_EXTENSION):
            response = await _html_response(public_file, site)
        else:
            response = _file_response(
                public_file,
                request,
                _IMMUTABLE_CACHE_CONTROL if _is_fingerprinted(public_file, site) else _CACHE_CONTROL,
            )
            if response is None:
                response = await _html_response(
                    safe_path(site.public_dir, static_path + PAGE_EXTENSION), site
                )
    except PathTraversalError:
        return PlainTextResponse("Bad Request", status_code=400)

    if response is None:
        return HTMLResponse(
            content="<html><body><h1>404 — Page not found</h1></body></html>",
            status_code=404,
        )
    return response

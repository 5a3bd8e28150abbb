"""
Pytest configuration and fixtures for Capuzzella tests.

Every test gets its own base directory under tmp_path with empty drafts/
and public/ trees.
"""

from __future__ import annotations

import os
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from backend.main import create_app
from backend.services.site import Site

SITE_URL = "https://example.com"


def write_file(path: Path, content: str | bytes) -> Path:
    """Create a file and its parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


def set_mtime(path: Path, seconds: float) -> None:
    """Pin a file's access and modification time."""
    os.utime(path, (seconds, seconds))


@pytest.fixture
def site(tmp_path: Path) -> Site:
    """A started Site rooted at a fresh temporary directory."""
    s = Site(tmp_path, SITE_URL, brotli_quality=5)
    s.startup()
    return s


@pytest_asyncio.fixture
async def async_client(site: Site):
    """Async HTTP client against an app bound to the test site."""
    app = create_app(site)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def make_file():
    return write_file


@pytest.fixture
def touch_at():
    return set_mtime

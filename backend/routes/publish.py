"""Publish routes — publish, unpublish, and publish status of draft pages."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from backend.models.publish import PublishAllReport, PublishOneReport, PublishStatus, UnpublishReport
from backend.services.errors import NoPagesToPublishError, PageNotFoundError
from backend.services.site import Site, get_site
from backend.utils.safe_path import PathTraversalError

router = APIRouter(prefix="/publish", tags=["publish"])


@router.post("", status_code=200)
async def publish_all(site: Site = Depends(get_site)) -> PublishAllReport:
    """
    Publish every draft page, then assets and sitemap.

    Returns 200 even when some pages failed; failures are listed in `errors`
    and `hook_failures` so they can be retried individually.
    """
    try:
        return await site.publisher.publish_all()
    except NoPagesToPublishError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.get("/status/{page_path:path}")
async def publish_status(page_path: str, site: Site = Depends(get_site)) -> PublishStatus:
    """Report whether a draft page is published and has unpublished changes."""
    try:
        return await site.publisher.status(page_path)
    except PathTraversalError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except PageNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found.") from e


@router.post("/{page_path:path}", status_code=200)
async def publish_page(page_path: str, site: Site = Depends(get_site)) -> PublishOneReport:
    """Publish a single draft page."""
    try:
        return await site.publisher.publish_one(page_path)
    except PathTraversalError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except PageNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found in drafts.") from e


@router.delete("/{page_path:path}", status_code=200)
async def unpublish_page(page_path: str, site: Site = Depends(get_site)) -> UnpublishReport:
    """
    Unpublish a page — delete its public copy.

    The draft is kept. When the last published page goes, the sitemap is
    deleted rather than regenerated empty.
    """
    try:
        return await site.publisher.unpublish(page_path)
    except PathTraversalError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except PageNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page is not published.") from e

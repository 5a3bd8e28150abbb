"""Publish-domain exceptions. Routes translate these to HTTP status codes."""

from __future__ import annotations


class PublishError(Exception):
    """Base class for expected, client-facing publish failures."""

    pass


class PageNotFoundError(PublishError):
    """Draft or public copy of a page is absent where one is required."""

    def __init__(self, page_path: str, tree: str = "drafts") -> None:
        self.page_path = page_path
        self.tree = tree
        super().__init__(f'Page "{page_path}" not found in {tree}')


class NoPagesToPublishError(PublishError):
    """The draft tree holds no pages at all."""

    def __init__(self) -> None:
        super().__init__("No pages to publish")

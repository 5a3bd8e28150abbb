"""Tests for PageStore — draft page CRUD, listing and backups."""

from __future__ import annotations

import re

import pytest

from backend.services.page_store import PageStore
from backend.utils.safe_path import PathTraversalError


@pytest.fixture
def store(site) -> PageStore:
    return site.pages


class TestGetSave:
    async def test_get_missing_returns_none(self, store):
        assert await store.get("nope.html") is None

    async def test_save_then_get(self, store):
        await store.save("index.html", "<h1>Home</h1>")
        assert await store.get("index.html") == "<h1>Home</h1>"

    async def test_save_creates_parent_directories(self, store):
        await store.save("about/team/people.html", "<p>team</p>")
        assert (store.root / "about" / "team" / "people.html").read_text() == "<p>team</p>"

    async def test_save_overwrites(self, store):
        await store.save("index.html", "v1")
        await store.save("index.html", "v2")
        assert await store.get("index.html") == "v2"

    async def test_save_leaves_no_temp_files(self, store):
        await store.save("index.html", "<h1>Home</h1>")
        assert sorted(p.name for p in store.root.iterdir()) == ["index.html"]

    async def test_save_preserves_unicode(self, store):
        await store.save("caffe.html", "<p>Caffè — €3</p>")
        assert await store.get("caffe.html") == "<p>Caffè — €3</p>"

    async def test_never_touches_public_tree(self, site, store):
        await store.save("index.html", "<h1>Home</h1>")
        assert not (site.public_dir / "index.html").exists()


class TestDelete:
    async def test_delete_existing(self, store):
        await store.save("old.html", "x")
        await store.delete("old.html")
        assert await store.get("old.html") is None

    async def test_delete_missing_is_noop(self, store):
        await store.delete("never-existed.html")


class TestList:
    async def test_empty_tree(self, store):
        assert await store.list() == []

    async def test_recursive_html_only(self, store, make_file):
        await store.save("index.html", "")
        await store.save("about.html", "")
        await store.save("blog/post-1.html", "")
        make_file(store.root / "blog" / "notes.txt", "not a page")
        make_file(store.root / "assets" / "css" / "main.css", "body{}")

        assert await store.list() == ["about.html", "blog/post-1.html", "index.html"]

    async def test_subdir(self, store):
        await store.save("index.html", "")
        await store.save("blog/a.html", "")
        await store.save("blog/2024/b.html", "")

        assert await store.list("blog") == ["blog/2024/b.html", "blog/a.html"]

    async def test_subdir_is_normalized(self, store):
        await store.save("blog/a.html", "")
        assert await store.list("blog/../blog") == ["blog/a.html"]
        assert await store.list("blog/") == ["blog/a.html"]

    async def test_missing_subdir(self, store):
        assert await store.list("nowhere") == []

    async def test_listing_is_restartable(self, store):
        await store.save("a.html", "")
        first = await store.list()
        await store.save("b.html", "")
        assert await store.list() == first + ["b.html"]

    async def test_subdir_traversal_rejected(self, store):
        with pytest.raises(PathTraversalError):
            await store.list("../public")

    async def test_symlinked_directory_outside_drafts_is_skipped(self, store, make_file, tmp_path):
        make_file(tmp_path / "outside" / "secret.html", "<p>secret</p>")
        await store.save("index.html", "")
        (store.root / "leak").symlink_to(tmp_path / "outside", target_is_directory=True)

        assert await store.list() == ["index.html"]

    async def test_symlinked_page_is_skipped(self, store, make_file, tmp_path):
        make_file(tmp_path / "outside.html", "<p>secret</p>")
        await store.save("index.html", "")
        (store.root / "linked.html").symlink_to(tmp_path / "outside.html")

        assert await store.list() == ["index.html"]


class TestBackup:
    async def test_backup_missing_returns_none(self, store):
        assert await store.backup("missing.html") is None

    async def test_backup_copies_content_to_timestamped_sibling(self, store):
        await store.save("about/team.html", "<p>team</p>")

        backup_path = await store.backup("about/team.html")

        assert backup_path is not None
        assert re.fullmatch(r"about/team\.backup-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{6}Z\.html", backup_path)
        assert await store.get(backup_path) == "<p>team</p>"
        assert await store.get("about/team.html") == "<p>team</p>"

    async def test_backup_names_sort_chronologically(self, store):
        await store.save("index.html", "v1")
        first = await store.backup("index.html")
        await store.save("index.html", "v2")
        second = await store.backup("index.html")

        assert first < second
        assert await store.get(second) == "v2"


class TestPathSafety:
    @pytest.mark.parametrize("method", ["get", "delete"])
    async def test_traversal_rejected(self, store, method):
        with pytest.raises(PathTraversalError):
            await getattr(store, method)("../../etc/passwd")

    async def test_save_traversal_rejected(self, store, tmp_path):
        with pytest.raises(PathTraversalError):
            await store.save("../public/index.html", "<h1>pwned</h1>")
        assert not (tmp_path / "public" / "index.html").exists()

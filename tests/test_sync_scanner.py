"""Tests for the DirectoryScanner class."""

import hashlib
import os

import pytest

from pycosync.exceptions import ScanError
from pycosync.models import ObjectEntry
from pycosync.sync.scanner import DirectoryScanner


def md5(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


@pytest.fixture
def site(tmp_path):
    """Create a small static site tree."""
    root = tmp_path / "public"
    (root / "css").mkdir(parents=True)
    (root / "js" / "vendor").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "index.html").write_bytes(b"<html></html>")
    (root / "css" / "main.css").write_bytes(b"body {}")
    (root / "js" / "vendor" / "lib.js").write_bytes(b"")
    return root


class TestScanLocal:
    """Tests for local scanning."""

    def test_nested_tree(self, site):
        """Test that every file is found with a slash-separated relative path."""
        index = DirectoryScanner().scan_local(site)

        assert dict(index) == {
            "index.html": md5(b"<html></html>"),
            "css/main.css": md5(b"body {}"),
            "js/vendor/lib.js": md5(b""),
        }
        assert index.record("css/main.css").path == site / "css" / "main.css"
        assert index.record("css/main.css").size == 7
        assert index.total_size == 20

    def test_parallel_hashing_gives_same_index(self, site):
        sequential = DirectoryScanner().scan_local(site)
        parallel = DirectoryScanner(hash_workers=4).scan_local(site)

        assert dict(parallel) == dict(sequential)

    def test_empty_directory(self, tmp_path):
        index = DirectoryScanner().scan_local(tmp_path)
        assert len(index) == 0

    def test_root_is_a_file(self, tmp_path):
        """Test that a single-file root maps to its own name."""
        path = tmp_path / "robots.txt"
        path.write_bytes(b"User-agent: *")

        index = DirectoryScanner().scan_local(path)

        assert dict(index) == {"robots.txt": md5(b"User-agent: *")}

    def test_missing_root(self, tmp_path):
        with pytest.raises(ScanError, match="missing"):
            DirectoryScanner().scan_local(tmp_path / "missing")

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directory_is_not_traversed(self, site, tmp_path):
        """Test that a link to a directory is treated as a leaf, not descended."""
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_bytes(b"secret")
        os.symlink(outside, site / "link")

        with pytest.raises(ScanError, match="link"):
            # Reading a directory through the link as a file fails
            DirectoryScanner().scan_local(site)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_file_is_hashed_through_link(self, site):
        os.symlink(site / "index.html", site / "home.html")

        index = DirectoryScanner().scan_local(site)

        assert index["home.html"] == index["index.html"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_dangling_symlink_fails(self, site):
        os.symlink(site / "gone.txt", site / "dangling.txt")

        with pytest.raises(ScanError, match="dangling.txt"):
            DirectoryScanner().scan_local(site)


class TestWalk:
    """Tests for file enumeration."""

    def test_walk_lists_only_files(self, site):
        files = DirectoryScanner().walk(site)
        assert sorted(p.relative_to(site).as_posix() for p in files) == [
            "css/main.css",
            "index.html",
            "js/vendor/lib.js",
        ]

    def test_relative_path(self, site):
        scanner = DirectoryScanner()
        assert scanner.relative_path(site / "css" / "main.css", site) == "css/main.css"
        assert scanner.relative_path(site, site) == "public"


class TestScanRemote:
    """Tests for building the remote index."""

    def test_scan_remote(self):
        entries = [
            (ObjectEntry(key="site/a.txt", etag="aaa", size=3), "a.txt"),
            (ObjectEntry(key="site/b/c.txt", etag="ccc", size=1), "b/c.txt"),
        ]

        index = DirectoryScanner().scan_remote("site", entries)

        assert dict(index) == {"a.txt": "aaa", "b/c.txt": "ccc"}
        assert index.record("b/c.txt").key == "site/b/c.txt"
        assert index.prefix == "site"

    def test_duplicate_paths_keep_last(self, caplog):
        """Keys that strip to the same path collapse to the last one listed."""
        entries = [
            (ObjectEntry(key="site//a.txt", etag="1"), "a.txt"),
            (ObjectEntry(key="site/a.txt", etag="2"), "a.txt"),
        ]
        with caplog.at_level("WARNING", logger="pycosync.sync.index"):
            index = DirectoryScanner().scan_remote("site", entries)

        assert dict(index) == {"a.txt": "2"}
        assert index.record("a.txt").key == "site/a.txt"
        assert "Duplicate path a.txt" in caplog.text

"""Unit tests for utility functions."""

import hashlib

import pytest

from pycosync.utils import (
    calculate_md5,
    format_size,
    is_multipart_etag,
    join_key,
    md5_to_content_md5,
    normalize_etag,
    normalize_prefix,
    percent_of,
    strip_prefix,
)


class TestStripPrefix:
    """Tests for strip_prefix function."""

    def test_strips_prefix_and_separator(self):
        """Test that the prefix and the following slash are removed."""
        assert strip_prefix("site/sub/a.txt", "site") == "sub/a.txt"

    def test_strips_leading_slashes_without_prefix(self):
        """Test that leading slashes are removed even without a prefix."""
        assert strip_prefix("//a.txt", "") == "a.txt"

    def test_value_without_prefix_unchanged(self):
        """Test that a value not starting with the prefix keeps its text."""
        assert strip_prefix("other/a.txt", "site") == "other/a.txt"

    def test_prefix_with_leading_slash(self):
        """Test stripping a prefix that itself starts with a slash."""
        assert strip_prefix("/build/css/main.css", "/build") == "css/main.css"

    def test_double_slash_key(self):
        """Test that a key with repeated separators maps to the plain path."""
        assert strip_prefix("site//a.txt", "site") == "a.txt"


class TestJoinKey:
    """Tests for join_key function."""

    def test_join_with_prefix(self):
        assert join_key("site", "sub/a.txt") == "site/sub/a.txt"

    def test_join_without_prefix(self):
        assert join_key("", "a.txt") == "a.txt"

    def test_slashes_are_normalized(self):
        assert join_key("/site/", "/a.txt") == "site/a.txt"

    def test_empty_relative_path(self):
        assert join_key("site", "") == "site"


class TestNormalize:
    """Tests for prefix and ETag normalization."""

    @pytest.mark.parametrize(
        "value,expected",
        [(None, ""), ("", ""), ("/", ""), ("/site/", "site"), ("a/b", "a/b")],
    )
    def test_normalize_prefix(self, value, expected):
        assert normalize_prefix(value) == expected

    def test_normalize_etag_strips_quotes(self):
        """Test that COS quoting around ETags is removed."""
        assert (
            normalize_etag('"D41D8CD98F00B204E9800998ECF8427E"')
            == "d41d8cd98f00b204e9800998ecf8427e"
        )

    def test_normalize_etag_empty(self):
        assert normalize_etag(None) == ""
        assert normalize_etag("") == ""

    def test_multipart_etag_detection(self):
        """Test that multipart ETags are recognized."""
        assert is_multipart_etag("9b2cf535f27731c974343645a3985328-3")
        assert not is_multipart_etag("9b2cf535f27731c974343645a3985328")


class TestCalculateMd5:
    """Tests for calculate_md5 function."""

    def test_matches_hashlib(self, tmp_path):
        """Test hashing a file across several chunks."""
        data = b"0123456789" * 1000
        path = tmp_path / "data.bin"
        path.write_bytes(data)

        assert calculate_md5(path, chunk_size=64) == hashlib.md5(data).hexdigest()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty"
        path.write_bytes(b"")
        assert calculate_md5(path) == "d41d8cd98f00b204e9800998ecf8427e"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            calculate_md5(tmp_path / "missing")

    def test_content_md5_encoding(self):
        """Test hex to base64 conversion for the Content-MD5 header."""
        assert (
            md5_to_content_md5("d41d8cd98f00b204e9800998ecf8427e")
            == "1B2M2Y8AsgTpgAmY7PhCfg=="
        )


class TestFormatting:
    """Tests for size and percentage formatting."""

    def test_format_size(self):
        assert format_size(256) == "256 B"
        assert format_size(1536) == "1.5 KB"
        assert format_size(5 * 1024 * 1024) == "5.0 MB"
        assert format_size(2 * 1024**3) == "2.0 GB"

    def test_percent_rounds_down(self):
        assert percent_of(1, 3) == 33
        assert percent_of(2, 3) == 66
        assert percent_of(3, 3) == 100

    def test_percent_of_empty_total(self):
        assert percent_of(0, 0) == 100

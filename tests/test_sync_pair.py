"""Tests for SyncPair."""

from pathlib import Path

import pytest

from pycosync.config import SyncSettings
from pycosync.sync import SyncPair


class TestSyncPair:
    """Tests for SyncPair construction."""

    def test_defaults(self):
        pair = SyncPair(Path("public"))
        assert pair.remote == ""
        assert pair.clean is False

    def test_remote_is_normalized(self):
        pair = SyncPair(Path("public"), "/site/docs/")
        assert pair.remote == "site/docs"

    def test_local_string_converted_to_path(self):
        pair = SyncPair("public", "site")  # type: ignore[arg-type]
        assert pair.local == Path("public")

    def test_from_settings(self):
        settings = SyncSettings(local_path="dist", remote_path="static", clean=True)

        pair = SyncPair.from_settings(settings)

        assert pair.local == Path("dist")
        assert pair.remote == "static"
        assert pair.clean is True

    def test_from_dict(self):
        pair = SyncPair.from_dict({"local": "dist", "remote": "/static", "clean": True})
        assert pair == SyncPair(Path("dist"), "static", clean=True)

    def test_from_dict_requires_local(self):
        with pytest.raises(ValueError, match="local"):
            SyncPair.from_dict({"remote": "static"})

    def test_str(self):
        assert str(SyncPair(Path("dist"), "static", clean=True)) == (
            f"{Path('dist')} -> /static (clean)"
        )

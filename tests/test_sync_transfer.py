"""Tests for the TransferExecutor and progress tracking."""

import threading
from pathlib import Path
from unittest.mock import Mock

import pytest

from pycosync.api import CosClient
from pycosync.exceptions import CosAPIError
from pycosync.sync.index import LocalFile, LocalIndex
from pycosync.sync.operations import SyncOperations
from pycosync.sync.progress import (
    SyncProgressEvent,
    SyncProgressTracker,
    TransferPhase,
)
from pycosync.sync.transfer import TransferExecutor

PATHS = ["1.txt", "2.txt", "3.txt", "4.txt", "5.txt"]


def make_index(paths):
    root = Path("/build")
    return LocalIndex(
        root,
        [
            LocalFile(path=root / p, relative_path=p, size=1, md5=f"md5-{p}")
            for p in paths
        ],
    )


@pytest.fixture
def mock_client():
    """Create a mock COS client."""
    client = Mock(spec=CosClient)
    client.put_object.return_value = "etag"
    return client


class TestSyncOperations:
    """Tests for the upload/delete primitives."""

    def test_upload_uses_prefixed_key_and_md5(self, mock_client):
        ops = SyncOperations(mock_client, prefix="site")
        local_file = LocalFile(
            path=Path("/build/css/a.css"), relative_path="css/a.css", size=3, md5="abc"
        )

        ops.upload_file(local_file)

        mock_client.put_object.assert_called_once_with(
            key="site/css/a.css",
            file_path=Path("/build/css/a.css"),
            storage_class="STANDARD",
            content_md5="abc",
            content_type=None,
        )

    def test_delete_uses_prefixed_key(self, mock_client):
        SyncOperations(mock_client, prefix="site").delete_remote("old.txt")
        mock_client.delete_object.assert_called_once_with("site/old.txt")

    def test_no_prefix(self, mock_client):
        assert SyncOperations(mock_client).remote_key("a.txt") == "a.txt"


class TestSequentialTransfers:
    """Tests for one-at-a-time execution."""

    def test_uploads_in_order(self, mock_client):
        executor = TransferExecutor(SyncOperations(mock_client, prefix="site"))

        count = executor.upload_files(PATHS, make_index(PATHS))

        assert count == 5
        keys = [c.kwargs["key"] for c in mock_client.put_object.call_args_list]
        assert keys == [f"site/{p}" for p in PATHS]

    def test_failure_on_third_upload_stops(self, mock_client):
        """The first failure is raised and later uploads are not attempted."""
        mock_client.put_object.side_effect = [
            "etag",
            "etag",
            CosAPIError("boom", status_code=400),
            "etag",
            "etag",
        ]
        tracker = SyncProgressTracker()
        executor = TransferExecutor(SyncOperations(mock_client), tracker=tracker)

        with pytest.raises(CosAPIError, match="boom"):
            executor.upload_files(PATHS, make_index(PATHS))

        assert mock_client.put_object.call_count == 3
        assert tracker.completed == 2

    def test_delete_files(self, mock_client):
        executor = TransferExecutor(SyncOperations(mock_client, prefix="site"))

        assert executor.delete_files(["a", "b"]) == 2
        assert [c.args[0] for c in mock_client.delete_object.call_args_list] == [
            "site/a",
            "site/b",
        ]

    def test_empty_phase(self, mock_client):
        events = []
        tracker = SyncProgressTracker(callback=events.append)
        executor = TransferExecutor(SyncOperations(mock_client), tracker=tracker)

        assert executor.delete_files([]) == 0
        assert [e.event for e in events] == [
            SyncProgressEvent.PHASE_START,
            SyncProgressEvent.PHASE_COMPLETE,
        ]


class TestParallelTransfers:
    """Tests for bounded parallel execution."""

    def test_all_uploads_complete(self, mock_client):
        executor = TransferExecutor(SyncOperations(mock_client), max_workers=3)

        assert executor.upload_files(PATHS, make_index(PATHS)) == 5
        assert mock_client.put_object.call_count == 5

    def test_never_exceeds_worker_limit(self, mock_client):
        lock = threading.Lock()
        active = {"now": 0, "max": 0}

        def put_object(**kwargs):
            with lock:
                active["now"] += 1
                active["max"] = max(active["max"], active["now"])
            threading.Event().wait(0.01)
            with lock:
                active["now"] -= 1
            return "etag"

        mock_client.put_object.side_effect = put_object
        paths = [f"{i}.txt" for i in range(12)]
        executor = TransferExecutor(SyncOperations(mock_client), max_workers=3)

        executor.upload_files(paths, make_index(paths))

        assert active["max"] <= 3

    def test_failure_stops_dispatch(self, mock_client):
        """After a failure no new uploads start and the error is raised once."""
        paths = [f"{i}.txt" for i in range(20)]

        def put_object(key, **kwargs):
            if key == "0.txt":
                raise CosAPIError("first failed")
            return "etag"

        mock_client.put_object.side_effect = put_object
        executor = TransferExecutor(SyncOperations(mock_client), max_workers=2)

        with pytest.raises(CosAPIError, match="first failed"):
            executor.upload_files(paths, make_index(paths))

        # At most the initial window plus one refill can have been dispatched
        assert mock_client.put_object.call_count < len(paths)


class TestProgress:
    """Tests for progress reporting."""

    def test_upload_progress_events(self, mock_client):
        events = []
        tracker = SyncProgressTracker(callback=events.append)
        executor = TransferExecutor(SyncOperations(mock_client), tracker=tracker)

        executor.upload_files(PATHS[:3], make_index(PATHS[:3]))

        files = [e for e in events if e.event == SyncProgressEvent.FILE_COMPLETE]
        assert [(e.completed, e.total, e.percent) for e in files] == [
            (1, 3, 33),
            (2, 3, 66),
            (3, 3, 100),
        ]
        assert files[0].path == str(Path("/build/1.txt"))
        assert all(e.phase == TransferPhase.UPLOAD for e in events)

    def test_delete_progress_uses_remote_key(self, mock_client):
        events = []
        tracker = SyncProgressTracker(callback=events.append)
        executor = TransferExecutor(
            SyncOperations(mock_client, prefix="site"), tracker=tracker
        )

        executor.delete_files(["old.txt"])

        files = [e for e in events if e.event == SyncProgressEvent.FILE_COMPLETE]
        assert files[0].path == "site/old.txt"
        assert files[0].phase.verb == "cleaned"

    def test_tracker_resets_per_phase(self):
        tracker = SyncProgressTracker()
        tracker.start_phase(TransferPhase.UPLOAD, 2)
        tracker.file_complete("a")
        tracker.start_phase(TransferPhase.DELETE, 4)

        info = tracker.file_complete("b")

        assert (info.completed, info.total, info.percent) == (1, 4, 25)
        assert info.phase == TransferPhase.DELETE

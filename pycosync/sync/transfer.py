"""Apply a DiffResult against the bucket: uploads first, then deletes."""

import itertools
import logging
import time
from collections.abc import Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Optional

from .index import LocalIndex
from .operations import SyncOperations
from .progress import SyncProgressTracker, TransferPhase

logger = logging.getLogger(__name__)


class TransferExecutor:
    """Runs upload and delete phases.

    With ``max_workers == 1`` operations run one at a time in order. With
    more workers a bounded pool is used: the first failure stops new
    operations from being dispatched, operations already in flight finish,
    and that first error is re-raised once the phase drains. Completed
    operations are never rolled back.
    """

    def __init__(
        self,
        operations: SyncOperations,
        tracker: Optional[SyncProgressTracker] = None,
        max_workers: int = 1,
    ):
        """Initialize the executor.

        Args:
            operations: Bound upload/delete primitives
            tracker: Progress tracker (a silent one is created if omitted)
            max_workers: Number of parallel transfers (default: 1)
        """
        self.operations = operations
        self.tracker = tracker or SyncProgressTracker()
        self.max_workers = max(1, max_workers)

    def upload_files(self, paths: Sequence[str], local_index: LocalIndex) -> int:
        """Upload every path in ``paths``.

        Args:
            paths: Relative paths to upload
            local_index: Index holding the files' absolute paths and hashes

        Returns:
            Number of files uploaded

        Raises:
            Exception: The first upload failure
        """

        def upload(path: str) -> str:
            local_file = local_index.record(path)
            start = time.time()
            self.operations.upload_file(local_file)
            logger.debug("Upload of %s took %.2fs", path, time.time() - start)
            return str(local_file.path)

        return self._run_phase(TransferPhase.UPLOAD, paths, upload)

    def delete_files(self, paths: Sequence[str]) -> int:
        """Delete the remote object of every path in ``paths``.

        Returns:
            Number of objects deleted

        Raises:
            Exception: The first delete failure
        """

        def delete(path: str) -> str:
            self.operations.delete_remote(path)
            return self.operations.remote_key(path)

        return self._run_phase(TransferPhase.DELETE, paths, delete)

    def _run_phase(
        self,
        phase: TransferPhase,
        paths: Sequence[str],
        action: Callable[[str], str],
    ) -> int:
        self.tracker.start_phase(phase, len(paths))
        if self.max_workers > 1 and len(paths) > 1:
            completed = self._run_parallel(paths, action)
        else:
            completed = self._run_sequential(paths, action)
        self.tracker.finish_phase()
        return completed

    def _run_sequential(
        self, paths: Sequence[str], action: Callable[[str], str]
    ) -> int:
        completed = 0
        for path in paths:
            label = action(path)
            completed += 1
            self.tracker.file_complete(label)
        return completed

    def _run_parallel(self, paths: Sequence[str], action: Callable[[str], str]) -> int:
        """Run ``action`` over ``paths`` with at most ``max_workers`` in flight."""
        logger.debug(
            "Executing %d operations with %d workers", len(paths), self.max_workers
        )
        completed = 0
        first_error: Optional[BaseException] = None
        queue = iter(paths)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            in_flight: dict[Future, str] = {
                executor.submit(action, path): path
                for path in itertools.islice(queue, self.max_workers)
            }

            while in_flight:
                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    path = in_flight.pop(future)
                    try:
                        label = future.result()
                    except Exception as e:
                        logger.debug("Operation on %s failed: %s", path, e)
                        if first_error is None:
                            first_error = e
                        continue
                    completed += 1
                    self.tracker.file_complete(label)

                if first_error is None:
                    for path in itertools.islice(queue, len(done)):
                        in_flight[executor.submit(action, path)] = path

        if first_error is not None:
            raise first_error
        return completed

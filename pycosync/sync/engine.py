"""Core sync engine: scan, list, reconcile, transfer, report."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..api import CosClient
from ..object_lister import ObjectListManager
from ..output import OutputFormatter
from .comparator import DiffResult, FileComparator
from .index import LocalIndex, RemoteIndex
from .operations import SyncOperations
from .pair import SyncPair
from .progress import (
    SyncProgressEvent,
    SyncProgressInfo,
    SyncProgressTracker,
)
from .scanner import DirectoryScanner
from .transfer import TransferExecutor

logger = logging.getLogger(__name__)


class SyncStage:
    """Names of the pipeline stages, as reported in SyncReport.failed_stage."""

    SCAN = "scan"
    LIST = "list"
    RECONCILE = "reconcile"
    UPLOAD = "upload"
    DELETE = "delete"


@dataclass
class SyncReport:
    """Outcome of one sync run.

    A run either completes every planned upload and delete, or stops at the
    first failure with ``error`` set. Counts reflect what actually happened
    before the failure; completed transfers are not rolled back.
    """

    local_files: int = 0
    remote_files: int = 0
    to_upload: int = 0
    to_delete: int = 0
    uploaded: int = 0
    deleted: int = 0
    skipped: int = 0
    clean: bool = False
    dry_run: bool = False
    error: Optional[BaseException] = None
    failed_stage: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    def raise_for_error(self) -> None:
        """Re-raise the error that stopped the run, if any."""
        if self.error is not None:
            raise self.error

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "ok": self.ok,
            "dry_run": self.dry_run,
            "local_files": self.local_files,
            "remote_files": self.remote_files,
            "to_upload": self.to_upload,
            "uploaded": self.uploaded,
            "skipped": self.skipped,
        }
        if self.clean:
            data["to_delete"] = self.to_delete
            data["deleted"] = self.deleted
        if self.error is not None:
            data["error"] = self.error_message
            data["failed_stage"] = self.failed_stage
        return data


class SyncEngine:
    """Core sync engine that orchestrates one-way mirroring to COS."""

    def __init__(
        self,
        client: CosClient,
        output: Optional[OutputFormatter] = None,
        hash_workers: int = 1,
    ):
        """Initialize sync engine.

        Args:
            client: COS API client
            output: Output formatter for displaying progress/status
            hash_workers: Threads used to hash local files
        """
        self.client = client
        self.output = output or OutputFormatter()
        self.scanner = DirectoryScanner(hash_workers=hash_workers)
        self.lister = ObjectListManager(client)

    # =========================
    # Stages
    # =========================

    def scan_local(self, pair: SyncPair) -> LocalIndex:
        """Fingerprint every file under the pair's local root."""
        start = time.time()
        local_index = self.scanner.scan_local(pair.local)
        logger.debug(
            "Local scan took %.2fs for %d files", time.time() - start, len(local_index)
        )
        return local_index

    def scan_remote(self, pair: SyncPair) -> RemoteIndex:
        """List every object under the pair's remote prefix."""
        start = time.time()
        remote_index = self.scanner.scan_remote(
            pair.remote, self.lister.iter_all_with_paths(pair.remote)
        )
        logger.debug(
            "Remote listing took %.2fs for %d objects",
            time.time() - start,
            len(remote_index),
        )
        return remote_index

    def plan(self, pair: SyncPair) -> tuple[LocalIndex, RemoteIndex, DiffResult]:
        """Build both indexes and the diff without transferring anything.

        Raises:
            ScanError: If the local scan fails
            CosAPIError: If the remote listing fails
        """
        local_index = self.scan_local(pair)
        remote_index = self.scan_remote(pair)
        diff = FileComparator(clean=pair.clean).compare_files(local_index, remote_index)
        return local_index, remote_index, diff

    # =========================
    # Orchestration
    # =========================

    def sync_pair(
        self,
        pair: SyncPair,
        dry_run: bool = False,
        max_workers: int = 1,
        progress_callback: Optional[Callable[[SyncProgressInfo], None]] = None,
    ) -> SyncReport:
        """Sync a single sync pair.

        Runs scan -> list -> reconcile -> uploads -> deletes. The first
        failure stops the run; later stages do not execute.

        Args:
            pair: Sync pair to synchronize
            dry_run: If True, only show what would be done
            max_workers: Number of parallel transfers (default: 1)
            progress_callback: Receives a SyncProgressInfo per progress event;
                defaults to printing ``>> [i/n, p%] uploaded <path>`` lines

        Returns:
            SyncReport; check ``report.ok`` / ``report.error``

        Examples:
            >>> engine = SyncEngine(client)
            >>> report = engine.sync_pair(SyncPair(Path("public"), "site"))
            >>> report.uploaded
            3
        """
        report = SyncReport(clean=pair.clean, dry_run=dry_run)
        stage = SyncStage.SCAN

        if not self.output.quiet:
            self.output.info(
                f">> upload files from {pair.local} to {pair.remote or '/'}"
                + (" and clean" if pair.clean else "")
            )

        try:
            local_index = self.scan_local(pair)
            report.local_files = len(local_index)
            self.output.info(f">> {report.local_files} local files collected")

            stage = SyncStage.LIST
            remote_index = self.scan_remote(pair)
            report.remote_files = len(remote_index)
            self.output.info(f">> {report.remote_files} remote files collected")

            stage = SyncStage.RECONCILE
            diff = FileComparator(clean=pair.clean).compare_files(
                local_index, remote_index
            )
            report.to_upload = len(diff.to_upload)
            report.to_delete = len(diff.to_delete)
            report.skipped = diff.skipped
            self._display_sync_plan(diff, dry_run)

            if dry_run:
                return report

            tracker = SyncProgressTracker(
                callback=progress_callback or self._print_progress
            )
            executor = TransferExecutor(
                SyncOperations(self.client, prefix=pair.remote),
                tracker=tracker,
                max_workers=max_workers,
            )

            stage = SyncStage.UPLOAD
            try:
                report.uploaded = executor.upload_files(diff.to_upload, local_index)
            except Exception:
                report.uploaded = tracker.completed
                raise

            if pair.clean:
                stage = SyncStage.DELETE
                try:
                    report.deleted = executor.delete_files(diff.to_delete)
                except Exception:
                    report.deleted = tracker.completed
                    raise

        except Exception as e:
            logger.debug("Sync failed during %s stage", stage, exc_info=True)
            report.error = e
            report.failed_stage = stage
            return report

        self._display_summary(report)
        return report

    # =========================
    # Display
    # =========================

    def _print_progress(self, info: SyncProgressInfo) -> None:
        if info.event != SyncProgressEvent.FILE_COMPLETE:
            return
        self.output.progress_message(
            f">> [{info.completed}/{info.total}, {info.percent}%] "
            f"{info.phase.verb} {info.path}"
        )

    def _display_sync_plan(self, diff: DiffResult, dry_run: bool) -> None:
        if self.output.quiet:
            return
        self.output.info(f"{len(diff.to_upload)} files to be uploaded")
        if diff.to_delete:
            self.output.info(f"{len(diff.to_delete)} files to be cleaned")
        if dry_run:
            self.output.info("Dry run: no changes will be made")
            for path in diff.to_upload:
                self.output.info(f"  ↑ {path}")
            for path in diff.to_delete:
                self.output.info(f"  ✗ {path}")

    def _display_summary(self, report: SyncReport) -> None:
        if self.output.quiet:
            return
        message = f"uploaded {report.uploaded} files"
        if report.deleted > 0:
            message += f", cleaned {report.deleted} files"
        self.output.success(message)
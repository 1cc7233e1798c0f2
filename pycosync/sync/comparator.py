"""File comparison logic for sync operations."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """Actions that can be taken during sync."""

    UPLOAD = "upload"
    """Upload local file to remote"""

    DELETE_REMOTE = "delete_remote"
    """Delete remote object"""

    SKIP = "skip"
    """Skip file (no action needed)"""


@dataclass(frozen=True)
class SyncDecision:
    """Represents a decision about how to sync a file."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    relative_path: str
    """Relative path of the file"""


@dataclass(frozen=True)
class DiffResult:
    """Paths to upload and to delete.

    Both tuples hold unique paths and never share one.
    """

    to_upload: tuple[str, ...] = ()
    """Local paths that are new or changed, in local index order"""

    to_delete: tuple[str, ...] = ()
    """Remote-only paths, in remote index order (empty unless cleaning)"""

    decisions: tuple[SyncDecision, ...] = field(default=(), compare=False)
    """Per-path decisions, for plan display"""

    skipped: int = field(default=0, compare=False)
    """Local paths left alone because the remote copy is identical"""

    @property
    def is_empty(self) -> bool:
        return not self.to_upload and not self.to_delete


class FileComparator:
    """Compares local and remote indexes to determine sync actions.

    Performs no I/O and never mutates its inputs.
    """

    def __init__(self, clean: bool = False):
        """Initialize file comparator.

        Args:
            clean: Whether remote-only paths should be deleted
        """
        self.clean = clean

    def compare_files(
        self,
        local_files: Mapping[str, str],
        remote_files: Mapping[str, str],
    ) -> DiffResult:
        """Compare local and remote fingerprints.

        A local path is uploaded unless the remote has the same path with an
        identical fingerprint string. With ``clean``, every remote path
        missing locally is deleted, regardless of its fingerprint.

        Args:
            local_files: Mapping of relative path to local fingerprint
            remote_files: Mapping of relative path to remote fingerprint

        Returns:
            DiffResult
        """
        to_upload: list[str] = []
        to_delete: list[str] = []
        decisions: list[SyncDecision] = []
        skipped = 0

        for path, local_fingerprint in local_files.items():
            decision = self._compare_single_file(
                path, local_fingerprint, remote_files.get(path)
            )
            decisions.append(decision)
            if decision.action == SyncAction.UPLOAD:
                to_upload.append(path)
            else:
                skipped += 1

        for path in remote_files:
            if path in local_files:
                continue
            decision = self._handle_remote_only(path)
            decisions.append(decision)
            if decision.action == SyncAction.DELETE_REMOTE:
                to_delete.append(path)

        logger.debug(
            "Compared %d local and %d remote file(s): %d to upload, %d to delete",
            len(local_files),
            len(remote_files),
            len(to_upload),
            len(to_delete),
        )
        return DiffResult(
            to_upload=tuple(to_upload),
            to_delete=tuple(to_delete),
            decisions=tuple(decisions),
            skipped=skipped,
        )

    def _compare_single_file(
        self, path: str, local_fingerprint: str, remote_fingerprint: Optional[str]
    ) -> SyncDecision:
        """Decide what to do with a path that exists locally."""
        if remote_fingerprint is None:
            return SyncDecision(
                action=SyncAction.UPLOAD,
                reason="New local file",
                relative_path=path,
            )
        if local_fingerprint == remote_fingerprint:
            return SyncDecision(
                action=SyncAction.SKIP,
                reason="Files are identical (same fingerprint)",
                relative_path=path,
            )
        return SyncDecision(
            action=SyncAction.UPLOAD,
            reason="Content changed",
            relative_path=path,
        )

    def _handle_remote_only(self, path: str) -> SyncDecision:
        """Handle a path that only exists remotely."""
        if self.clean:
            return SyncDecision(
                action=SyncAction.DELETE_REMOTE,
                reason="File deleted locally",
                relative_path=path,
            )
        return SyncDecision(
            action=SyncAction.SKIP,
            reason="Remote-only file, clean disabled",
            relative_path=path,
        )


def reconcile(
    local_files: Mapping[str, str],
    remote_files: Mapping[str, str],
    clean: bool = False,
) -> DiffResult:
    """Compute the upload and delete sets for two indexes."""
    return FileComparator(clean=clean).compare_files(local_files, remote_files)

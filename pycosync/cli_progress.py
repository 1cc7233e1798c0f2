"""CLI progress display for sync operations.

This module provides a Rich-based progress bar that is driven by the
SyncProgressTracker of the sync engine.
"""

from typing import Optional

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .sync.engine import SyncEngine, SyncReport
from .sync.pair import SyncPair
from .sync.progress import SyncProgressEvent, SyncProgressInfo, TransferPhase

PHASE_DESCRIPTIONS = {
    TransferPhase.UPLOAD: "Uploading",
    TransferPhase.DELETE: "Cleaning",
}


class SyncProgressDisplay:
    """Rich-based progress display for the upload and delete phases.

    Shows one bar per phase with completed/total operations and the last
    file transferred.
    """

    def __init__(self) -> None:
        """Initialize the progress display."""
        self._progress: Optional[Progress] = None
        self._tasks: dict[TransferPhase, TaskID] = {}

    def handle_event(self, info: SyncProgressInfo) -> None:
        """Handle a progress event from the tracker.

        Args:
            info: Progress information
        """
        if self._progress is None:
            return

        if info.event == SyncProgressEvent.PHASE_START:
            if info.total == 0:
                return
            self._tasks[info.phase] = self._progress.add_task(
                PHASE_DESCRIPTIONS[info.phase],
                total=info.total,
                current="",
            )

        elif info.event == SyncProgressEvent.FILE_COMPLETE:
            task = self._tasks.get(info.phase)
            if task is not None:
                self._progress.update(
                    task, completed=info.completed, current=info.path
                )

        elif info.event == SyncProgressEvent.PHASE_COMPLETE:
            task = self._tasks.get(info.phase)
            if task is not None:
                self._progress.update(
                    task,
                    completed=info.completed,
                    description=f"{PHASE_DESCRIPTIONS[info.phase]} complete",
                    current="",
                )

    def __enter__(self) -> "SyncProgressDisplay":
        """Enter context manager - start progress display."""
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            TextColumn("[cyan]{task.fields[current]}"),
            refresh_per_second=4,
        )
        self._progress.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop progress display."""
        if self._progress is not None:
            self._progress.__exit__(exc_type, exc_val, exc_tb)
            self._progress = None
            self._tasks = {}


def run_sync_with_progress(
    engine: SyncEngine,
    pair: SyncPair,
    dry_run: bool,
    max_workers: int,
) -> SyncReport:
    """Run sync with a Rich progress display.

    Args:
        engine: SyncEngine instance
        pair: SyncPair to sync
        dry_run: If True, only show what would be done
        max_workers: Number of parallel workers

    Returns:
        SyncReport of the run
    """
    # For dry-run, don't show progress bar (just text output)
    if dry_run:
        return engine.sync_pair(pair, dry_run=True, max_workers=max_workers)

    with SyncProgressDisplay() as display:
        return engine.sync_pair(
            pair,
            dry_run=False,
            max_workers=max_workers,
            progress_callback=display.handle_event,
        )

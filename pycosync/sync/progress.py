"""Progress tracking for sync transfers.

The transfer executor reports every completed operation to a
:class:`SyncProgressTracker`, which turns it into a
:class:`SyncProgressInfo` and hands it to an optional callback. Progress
is advisory only; nothing in the sync depends on it.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..utils import percent_of


class SyncProgressEvent(str, Enum):
    """Kinds of progress events."""

    PHASE_START = "phase_start"
    FILE_COMPLETE = "file_complete"
    PHASE_COMPLETE = "phase_complete"


class TransferPhase(str, Enum):
    """The two transfer phases, in execution order."""

    UPLOAD = "upload"
    DELETE = "delete"

    @property
    def verb(self) -> str:
        return "uploaded" if self is TransferPhase.UPLOAD else "cleaned"


@dataclass(frozen=True)
class SyncProgressInfo:
    """A single progress observation."""

    event: SyncProgressEvent
    phase: TransferPhase
    completed: int
    """Operations completed so far in this phase"""

    total: int
    """Operations queued in this phase"""

    path: str = ""
    """Local path (uploads) or object key (deletes) just completed"""

    @property
    def percent(self) -> int:
        """Completion percentage, rounded down."""
        return percent_of(self.completed, self.total)


class SyncProgressTracker:
    """Counts completed operations per phase and forwards observations.

    Safe to call from worker threads.
    """

    def __init__(self, callback: Optional[Callable[[SyncProgressInfo], None]] = None):
        self.callback = callback
        self._lock = threading.Lock()
        self._phase = TransferPhase.UPLOAD
        self._completed = 0
        self._total = 0

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def total(self) -> int:
        return self._total

    def _emit(self, info: SyncProgressInfo) -> None:
        if self.callback is not None:
            self.callback(info)

    def start_phase(self, phase: TransferPhase, total: int) -> None:
        with self._lock:
            self._phase = phase
            self._completed = 0
            self._total = total
            info = SyncProgressInfo(
                event=SyncProgressEvent.PHASE_START,
                phase=phase,
                completed=0,
                total=total,
            )
        self._emit(info)

    def file_complete(self, path: str) -> SyncProgressInfo:
        with self._lock:
            self._completed += 1
            info = SyncProgressInfo(
                event=SyncProgressEvent.FILE_COMPLETE,
                phase=self._phase,
                completed=self._completed,
                total=self._total,
                path=path,
            )
        self._emit(info)
        return info

    def finish_phase(self) -> None:
        with self._lock:
            info = SyncProgressInfo(
                event=SyncProgressEvent.PHASE_COMPLETE,
                phase=self._phase,
                completed=self._completed,
                total=self._total,
            )
        self._emit(info)

"""Sync engine for pycosync - one-way mirroring of a local tree to COS."""

from .comparator import DiffResult, FileComparator, SyncAction, SyncDecision, reconcile
from .engine import SyncEngine, SyncReport, SyncStage
from .index import FileIndex, LocalFile, LocalIndex, RemoteFile, RemoteIndex
from .operations import SyncOperations
from .pair import SyncPair
from .progress import (
    SyncProgressEvent,
    SyncProgressInfo,
    SyncProgressTracker,
    TransferPhase,
)
from .scanner import DirectoryScanner
from .transfer import TransferExecutor

__all__ = [
    "SyncEngine",
    "SyncReport",
    "SyncStage",
    "SyncPair",
    "SyncOperations",
    "TransferExecutor",
    "DirectoryScanner",
    "FileComparator",
    "DiffResult",
    "SyncAction",
    "SyncDecision",
    "reconcile",
    "FileIndex",
    "LocalFile",
    "LocalIndex",
    "RemoteFile",
    "RemoteIndex",
    "SyncProgressEvent",
    "SyncProgressInfo",
    "SyncProgressTracker",
    "TransferPhase",
]

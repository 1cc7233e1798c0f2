"""Directory scanning utilities for sync operations."""

import logging
import os
import stat
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from ..exceptions import ScanError
from ..models import ObjectEntry
from ..utils import calculate_md5
from .index import LocalFile, LocalIndex, RemoteFile, RemoteIndex

logger = logging.getLogger(__name__)


class DirectoryScanner:
    """Scans a local tree and fingerprints every file.

    Anything that is not a directory according to ``lstat`` is a leaf file.
    Symbolic links are therefore never descended into; a link to a file is
    hashed through the link, and a dangling link fails the scan.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> index = scanner.scan_local(Path("/build/site"))
        >>> index["css/main.css"]
        '0cc175b9c0f1b6a831c399e269772661'
    """

    def __init__(self, hash_workers: int = 1):
        """Initialize directory scanner.

        Args:
            hash_workers: Threads used to hash files (1 hashes inline)
        """
        self.hash_workers = max(1, hash_workers)

    def walk(self, root: Path) -> list[Path]:
        """Enumerate leaf files under ``root`` depth-first.

        Order is filesystem enumeration order, not sorted.

        Raises:
            ScanError: If any entry cannot be stat-ed or listed
        """
        files: list[Path] = []
        self._walk(root, files)
        return files

    def _walk(self, path: Path, files: list[Path]) -> None:
        try:
            st = path.lstat()
            if not stat.S_ISDIR(st.st_mode):
                files.append(path)
                return
            with os.scandir(path) as entries:
                children = [Path(entry.path) for entry in entries]
        except OSError as e:
            raise ScanError(str(path), e) from e

        for child in children:
            self._walk(child, files)

    def relative_path(self, file_path: Path, root: Path) -> str:
        """Relative path of ``file_path`` under ``root`` with forward slashes.

        A root that is itself a file maps to its own name.
        """
        if file_path == root:
            return file_path.name
        # Use as_posix() to ensure forward slashes on all platforms
        return file_path.relative_to(root).as_posix()

    def _fingerprint(self, file_path: Path, root: Path) -> LocalFile:
        try:
            size = file_path.stat().st_size
            md5 = calculate_md5(file_path)
        except OSError as e:
            raise ScanError(str(file_path), e) from e
        return LocalFile(
            path=file_path,
            relative_path=self.relative_path(file_path, root),
            size=size,
            md5=md5,
        )

    def scan_local(self, root: Path) -> LocalIndex:
        """Build the local index for ``root``.

        Args:
            root: Directory (or single file) to scan

        Returns:
            Fully built LocalIndex

        Raises:
            ScanError: On the first stat/read failure; no partial index
        """
        paths = self.walk(root)
        logger.debug("Found %d local file(s) under %s", len(paths), root)

        if self.hash_workers > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=self.hash_workers) as executor:
                # map() re-raises the first failure in submission order
                local_files = list(
                    executor.map(lambda p: self._fingerprint(p, root), paths)
                )
        else:
            local_files = [self._fingerprint(p, root) for p in paths]

        return LocalIndex(root, local_files)

    def scan_remote(
        self, prefix: str, entries_with_paths: Iterable[tuple[ObjectEntry, str]]
    ) -> RemoteIndex:
        """Build the remote index from listing entries.

        Args:
            prefix: Remote prefix the entries were listed under
            entries_with_paths: (ObjectEntry, relative_path) tuples

        Returns:
            RemoteIndex
        """
        remote_files = [
            RemoteFile(entry=entry, relative_path=rel_path)
            for entry, rel_path in entries_with_paths
        ]
        return RemoteIndex(prefix, remote_files)

"""Immutable path -> fingerprint snapshots of the local and remote trees."""

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, Optional, TypeVar

from ..models import ObjectEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalFile:
    """A local file and its content fingerprint."""

    path: Path
    """Absolute path to the file"""

    relative_path: str
    """Relative path (using forward slashes for cross-platform compatibility)"""

    size: int
    """File size in bytes"""

    md5: str
    """Lowercase hex MD5 of the file content"""

    @property
    def fingerprint(self) -> str:
        return self.md5


@dataclass(frozen=True)
class RemoteFile:
    """A remote object as seen in a bucket listing."""

    entry: ObjectEntry
    """Listing entry from the API"""

    relative_path: str
    """Key with the remote prefix stripped"""

    @property
    def key(self) -> str:
        return self.entry.key

    @property
    def size(self) -> int:
        return self.entry.size

    @property
    def fingerprint(self) -> str:
        """Provider ETag (quotes removed).

        Equals the content MD5 only for single-part, non-KMS objects.
        """
        return self.entry.etag


R = TypeVar("R", LocalFile, RemoteFile)


class FileIndex(Mapping[str, str], Generic[R]):
    """Read-only mapping of relative path to fingerprint.

    The full records stay reachable through :meth:`record`. An index is
    built once and never changes; iteration follows insertion order.
    When two records share a relative path (remote keys ``site/a.txt``
    and ``site//a.txt``), the last one wins.
    """

    def __init__(self, records: Iterable[R]):
        entries: dict[str, R] = {}
        for record in records:
            if record.relative_path in entries:
                logger.warning(
                    "Duplicate path %s in index, keeping the last entry",
                    record.relative_path,
                )
            entries[record.relative_path] = record
        self._records = entries

    def __getitem__(self, relative_path: str) -> str:
        return self._records[relative_path].fingerprint

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self)} files)"

    def record(self, relative_path: str) -> R:
        """Return the full record for ``relative_path``."""
        return self._records[relative_path]

    def get_record(self, relative_path: str) -> Optional[R]:
        return self._records.get(relative_path)

    def records(self) -> list[R]:
        return list(self._records.values())


class LocalIndex(FileIndex[LocalFile]):
    """Snapshot of the local tree."""

    def __init__(self, root: Path, records: Iterable[LocalFile]):
        super().__init__(records)
        self.root = root

    @property
    def total_size(self) -> int:
        return sum(f.size for f in self._records.values())


class RemoteIndex(FileIndex[RemoteFile]):
    """Snapshot of the objects under a remote prefix."""

    def __init__(self, prefix: str, records: Iterable[RemoteFile]):
        super().__init__(records)
        self.prefix = prefix

"""Data models for COS API responses."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from .exceptions import CosInvalidResponseError
from .utils import normalize_etag

logger = logging.getLogger(__name__)


def _as_list(value: Any) -> list:
    """SDK responses hold a dict instead of a list when there is one entry."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


@dataclass
class ObjectEntry:
    """A single object returned by a bucket listing."""

    key: str
    etag: str
    size: int = 0
    last_modified: Optional[str] = None
    storage_class: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ObjectEntry":
        """Create an ObjectEntry from one item of a listing's ``Contents``."""
        key = data.get("Key")
        if key is None:
            raise CosInvalidResponseError("Listing entry without Key")
        size_text = data.get("Size") or "0"
        try:
            size = int(size_text)
        except (TypeError, ValueError):
            logger.debug("Unparseable size %r for %s", size_text, key)
            size = 0
        return cls(
            key=key,
            etag=normalize_etag(data.get("ETag")),
            size=size,
            last_modified=data.get("LastModified"),
            storage_class=data.get("StorageClass"),
        )

    @property
    def is_folder_marker(self) -> bool:
        """Zero-byte placeholder objects created by consoles for folders."""
        return self.key.endswith("/")


@dataclass
class ListBucketResult:
    """One page of a ``GET Bucket`` listing."""

    entries: list[ObjectEntry] = field(default_factory=list)
    is_truncated: bool = False
    next_marker: Optional[str] = None
    prefix: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ListBucketResult":
        """Build a page from the SDK's ``list_objects`` response.

        When the page is truncated but carries no ``NextMarker``, the key of
        the last entry is used as the marker, as the API documents.

        Raises:
            CosInvalidResponseError: If the response is not a mapping
        """
        if not isinstance(data, Mapping):
            raise CosInvalidResponseError(
                f"Unexpected listing response: {type(data).__name__}"
            )

        entries = [ObjectEntry.from_dict(e) for e in _as_list(data.get("Contents"))]
        is_truncated = str(data.get("IsTruncated", "false")).lower() == "true"
        next_marker = data.get("NextMarker") or None
        if is_truncated and next_marker is None and entries:
            next_marker = entries[-1].key

        return cls(
            entries=entries,
            is_truncated=is_truncated,
            next_marker=next_marker,
            prefix=data.get("Prefix"),
        )

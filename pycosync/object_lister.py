"""Remote listing with automatic pagination."""

import logging
from collections.abc import Generator
from typing import Optional

from .api import CosClient
from .exceptions import CosInvalidResponseError
from .models import ObjectEntry
from .utils import DEFAULT_MAX_KEYS, is_multipart_etag, normalize_prefix, strip_prefix

logger = logging.getLogger(__name__)


class ObjectListManager:
    """Lists every object under a remote prefix, following continuation markers."""

    def __init__(self, client: CosClient, max_keys: int = DEFAULT_MAX_KEYS):
        """Initialize the list manager.

        Args:
            client: COS API client
            max_keys: Objects requested per page
        """
        self.client = client
        self.max_keys = max_keys

    @staticmethod
    def listing_prefix(prefix: str) -> str:
        """Prefix sent to the service.

        A non-empty prefix gets a trailing slash so ``site`` does not also
        match ``site-old/...``.
        """
        prefix = normalize_prefix(prefix)
        return f"{prefix}/" if prefix else ""

    def iter_pages(self, prefix: str = "") -> Generator[list[ObjectEntry], None, None]:
        """Yield listing pages until the service reports no truncation.

        Args:
            prefix: Remote prefix (without trailing slash)

        Yields:
            Entries of each page, in service order

        Raises:
            CosAPIError: On the first failed listing call
        """
        request_prefix = self.listing_prefix(prefix)
        marker: Optional[str] = None
        page_num = 0

        while True:
            page_num += 1
            result = self.client.list_objects(
                prefix=request_prefix, marker=marker, max_keys=self.max_keys
            )
            logger.debug(
                "Listing page %d: %d entries, truncated=%s, next_marker=%s",
                page_num,
                len(result.entries),
                result.is_truncated,
                result.next_marker,
            )
            yield result.entries

            if not result.is_truncated:
                break
            if not result.next_marker or result.next_marker == marker:
                # A truncated page without a new marker would loop forever
                raise CosInvalidResponseError(
                    f"Truncated listing page {page_num} has no continuation marker"
                )
            marker = result.next_marker

    def iter_all_with_paths(
        self, prefix: str = ""
    ) -> Generator[tuple[ObjectEntry, str], None, None]:
        """Yield (entry, relative_path) for every object under ``prefix``.

        Folder placeholder objects (keys ending in ``/``) are skipped.
        """
        prefix = normalize_prefix(prefix)
        for entries in self.iter_pages(prefix):
            for entry in entries:
                if entry.is_folder_marker:
                    logger.debug("Skipping folder marker %s", entry.key)
                    continue
                relative_path = strip_prefix(entry.key, prefix)
                if not relative_path:
                    continue
                if is_multipart_etag(entry.etag):
                    logger.debug(
                        "ETag of %s is a multipart ETag, it will never match "
                        "a local MD5",
                        entry.key,
                    )
                yield entry, relative_path

    def get_all_with_paths(self, prefix: str = "") -> list[tuple[ObjectEntry, str]]:
        """Collect every (entry, relative_path) under ``prefix``.

        Any listing error propagates; no partial list is returned.
        """
        return list(self.iter_all_with_paths(prefix))

"""Sync operations wrapper for single object transfers."""

from typing import Optional

from ..api import CosClient
from ..utils import DEFAULT_STORAGE_CLASS, join_key
from .index import LocalFile


class SyncOperations:
    """Upload/delete primitives bound to one bucket and remote prefix."""

    def __init__(
        self,
        client: CosClient,
        prefix: str = "",
        storage_class: str = DEFAULT_STORAGE_CLASS,
    ):
        """Initialize sync operations.

        Args:
            client: COS API client
            prefix: Remote prefix objects are stored under
            storage_class: Storage class tagged on uploaded objects
        """
        self.client = client
        self.prefix = prefix
        self.storage_class = storage_class

    def remote_key(self, relative_path: str) -> str:
        """Object key for a relative path."""
        return join_key(self.prefix, relative_path)

    def upload_file(
        self, local_file: LocalFile, content_type: Optional[str] = None
    ) -> str:
        """Upload a local file to its remote key.

        Args:
            local_file: Local file to upload
            content_type: Optional MIME type override

        Returns:
            ETag of the uploaded object
        """
        return self.client.put_object(
            key=self.remote_key(local_file.relative_path),
            file_path=local_file.path,
            storage_class=self.storage_class,
            content_md5=local_file.md5,
            content_type=content_type,
        )

    def delete_remote(self, relative_path: str) -> None:
        """Delete the object stored for ``relative_path``."""
        self.client.delete_object(self.remote_key(relative_path))

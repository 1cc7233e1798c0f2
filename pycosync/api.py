"""API client for Tencent Cloud Object Storage."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Any, Callable
from urllib.parse import urlsplit

from qcloud_cos import CosConfig, CosS3Client
from qcloud_cos.cos_exception import CosClientError, CosServiceError

from .exceptions import (
    CosAPIError,
    CosAuthenticationError,
    CosConfigError,
    CosNetworkError,
    CosNotFoundError,
    CosPermissionError,
    CosRateLimitError,
    CosUploadError,
)
from .models import ListBucketResult
from .utils import (
    DEFAULT_MAX_KEYS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_STORAGE_CLASS,
    DEFAULT_TIMEOUT,
    md5_to_content_md5,
)

logger = logging.getLogger(__name__)

ACCELERATE_ENDPOINT = "cos.accelerate.myqcloud.com"

# Error codes COS returns with 403 when the credentials themselves are bad
AUTH_ERROR_CODES = frozenset(
    {
        "InvalidAccessKeyId",
        "SignatureDoesNotMatch",
        "AccessDenied.InvalidSecretId",
        "RequestTimeTooSkewed",
        "ExpiredToken",
        "InvalidToken",
    }
)


def _service_error_field(getter: Callable[[], Any]) -> Any:
    # The SDK raises on lookup when the error body could not be parsed
    try:
        return getter()
    except (KeyError, TypeError):
        return None


class CosClient:
    """Client for the object operations of a single COS bucket.

    Wraps ``qcloud_cos.CosS3Client``: the SDK signs requests, parses XML
    and retries transient failures; this class binds it to one bucket and
    maps SDK exceptions to the pycosync hierarchy.
    """

    def __init__(
        self,
        secret_id: str | None,
        secret_key: str | None,
        bucket: str | None,
        region: str | None,
        accelerate: bool = False,
        endpoint: str | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the COS client.

        Args:
            secret_id: SecretId of the API key
            secret_key: SecretKey of the API key
            bucket: Bucket name including the APPID suffix (``name-1250000000``)
            region: Region identifier (e.g. ``ap-guangzhou``)
            accelerate: Use the global acceleration endpoint
            endpoint: Override the service URL (``https://host``)
            max_retries: Retries per request for transient errors (default: 3)
            timeout: Request timeout in seconds (default: 60.0)
        """
        if not secret_id or not secret_key:
            raise CosConfigError(
                "COS credentials not configured. "
                "Please set COS_SECRET_ID and COS_SECRET_KEY."
            )
        if not bucket:
            raise CosConfigError("COS bucket not configured")
        if not region and not endpoint:
            raise CosConfigError("COS region not configured")

        self.secret_id = secret_id
        self.secret_key = secret_key
        self.bucket = bucket
        self.region = region
        self.accelerate = accelerate
        self.endpoint = endpoint
        self.max_retries = max_retries
        self.timeout = timeout
        self._client: CosS3Client | None = None

    def _build_config(self) -> CosConfig:
        """Translate the client settings into an SDK configuration."""
        options: dict[str, Any] = {
            "Region": self.region,
            "SecretId": self.secret_id,
            "SecretKey": self.secret_key,
            "Scheme": "https",
            "Timeout": int(self.timeout),
        }
        if self.endpoint:
            parts = urlsplit(
                self.endpoint if "://" in self.endpoint else f"https://{self.endpoint}"
            )
            options["Scheme"] = parts.scheme
            options["Domain"] = parts.netloc
        elif self.accelerate:
            options["Endpoint"] = ACCELERATE_ENDPOINT
        return CosConfig(**options)

    def _get_client(self) -> CosS3Client:
        """Get or create the SDK client."""
        if self._client is None:
            try:
                self._client = CosS3Client(
                    self._build_config(), retry=self.max_retries
                )
            except CosClientError as e:
                raise CosConfigError(f"Invalid COS configuration: {e}") from e
        return self._client

    def close(self) -> None:
        """Drop the SDK client; the next call creates a fresh one."""
        self._client = None

    def __enter__(self) -> CosClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================
    # Error mapping
    # =========================

    @staticmethod
    def _error_from_service(error: CosServiceError) -> CosAPIError:
        """Map a service error response to the matching exception."""
        status_code = error.get_status_code()
        code = _service_error_field(error.get_error_code)
        detail = _service_error_field(error.get_error_msg) or code or "unknown error"
        message = f"COS request failed with status {status_code}: {detail}"
        kwargs: dict[str, Any] = {
            "status_code": status_code,
            "code": code,
            "request_id": _service_error_field(error.get_request_id),
        }

        if status_code == 401 or (status_code == 403 and code in AUTH_ERROR_CODES):
            return CosAuthenticationError(message, **kwargs)
        if status_code == 403:
            return CosPermissionError(message, **kwargs)
        if status_code == 404:
            return CosNotFoundError(message, **kwargs)
        if status_code == 429 or code == "SlowDown":
            return CosRateLimitError(message, **kwargs)
        return CosAPIError(message, **kwargs)

    def _call(
        self, operation: str, key: str, func: Callable[..., Any], **kwargs: Any
    ) -> Any:
        """Invoke an SDK method bound to this bucket.

        Raises:
            CosAPIError: Mapped from the SDK's service or client errors
        """
        logger.debug("%s %s", operation, key or "/")
        try:
            return func(Bucket=self.bucket, **kwargs)
        except CosServiceError as e:
            raise self._error_from_service(e) from e
        except CosClientError as e:
            raise CosNetworkError(f"Network error: {e}") from e

    # =========================
    # Object operations
    # =========================

    def put_object(
        self,
        key: str,
        file_path: Path,
        storage_class: str = DEFAULT_STORAGE_CLASS,
        content_md5: str | None = None,
        content_type: str | None = None,
    ) -> str:
        """Upload a local file as a single-part object.

        Args:
            key: Object key
            file_path: Local file to upload
            storage_class: Storage class of the new object
            content_md5: Hex MD5 of the file, sent as ``Content-MD5`` so the
                service rejects corrupted bodies
            content_type: MIME type (guessed from the file name if omitted)

        Returns:
            ETag of the stored object (quotes removed)

        Raises:
            CosUploadError: If the local file cannot be read
            CosAPIError: If the service rejects the upload
        """
        if content_type is None:
            content_type, _ = mimetypes.guess_type(file_path.name)
        extra: dict[str, str] = {
            "StorageClass": storage_class,
            "ContentType": content_type or "application/octet-stream",
        }
        if content_md5:
            extra["ContentMD5"] = md5_to_content_md5(content_md5)

        try:
            body = open(file_path, "rb")
        except OSError as e:
            raise CosUploadError(f"Cannot read {file_path}: {e}") from e
        with body:
            response = self._call(
                "PUT",
                key,
                self._get_client().put_object,
                Body=body,
                Key=key.lstrip("/"),
                **extra,
            )
        return str((response or {}).get("ETag", "")).strip('"')

    def delete_object(self, key: str) -> None:
        """Delete an object. Deleting a missing key succeeds."""
        self._call(
            "DELETE", key, self._get_client().delete_object, Key=key.lstrip("/")
        )

    def list_objects(
        self,
        prefix: str = "",
        marker: str | None = None,
        max_keys: int = DEFAULT_MAX_KEYS,
    ) -> ListBucketResult:
        """List one page of objects (``GET Bucket``).

        Args:
            prefix: Only return keys starting with this prefix
            marker: Continuation marker from the previous page
            max_keys: Maximum entries in the page (up to 1000)

        Returns:
            Parsed listing page
        """
        response = self._call(
            "LIST",
            prefix,
            self._get_client().list_objects,
            Prefix=prefix,
            Marker=marker or "",
            MaxKeys=max_keys,
        )
        return ListBucketResult.from_dict(response)

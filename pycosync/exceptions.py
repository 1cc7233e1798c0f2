"""Exceptions raised by pycosync."""

from typing import Optional


class CosError(Exception):
    """Base exception for all pycosync errors."""


class CosConfigError(CosError):
    """Required configuration is missing or invalid."""


class ScanError(CosError):
    """Reading or stat-ing a local file failed during a scan."""

    def __init__(self, path: str, error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"cannot read {path}: {error.strerror or error}")


class CosAPIError(CosError):
    """Error returned by the COS service."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.request_id = request_id


class CosAuthenticationError(CosAPIError):
    """Credentials were rejected (bad SecretId/SecretKey or signature)."""


class CosPermissionError(CosAPIError):
    """The credentials are valid but not allowed to perform the action."""


class CosNotFoundError(CosAPIError):
    """Bucket or object does not exist."""


class CosRateLimitError(CosAPIError):
    """The service asked us to slow down."""


class CosNetworkError(CosAPIError):
    """Connection-level failure talking to COS."""


class CosInvalidResponseError(CosAPIError):
    """The service returned a body we could not parse."""


class CosUploadError(CosAPIError):
    """The local body of an upload could not be read."""

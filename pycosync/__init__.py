"""pycosync - mirror a local directory into a Tencent Cloud COS bucket."""

from .api import CosClient
from .config import SyncSettings, load_settings_from_env
from .exceptions import (
    CosAPIError,
    CosAuthenticationError,
    CosConfigError,
    CosError,
    CosInvalidResponseError,
    CosNetworkError,
    CosNotFoundError,
    CosPermissionError,
    CosRateLimitError,
    CosUploadError,
    ScanError,
)
from .utils import calculate_md5

__all__ = [
    "CosClient",
    "SyncSettings",
    "load_settings_from_env",
    "CosError",
    "CosAPIError",
    "CosAuthenticationError",
    "CosConfigError",
    "CosInvalidResponseError",
    "CosNetworkError",
    "CosNotFoundError",
    "CosPermissionError",
    "CosRateLimitError",
    "CosUploadError",
    "ScanError",
    "calculate_md5",
]

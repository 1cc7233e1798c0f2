"""Utility functions for pycosync."""

import base64
import hashlib
from pathlib import Path
from typing import Optional, Union

# =============================================================================
# Constants for file operations
# =============================================================================

# Read size used when hashing and streaming file bodies (1 MB)
DEFAULT_READ_CHUNK_SIZE: int = 1024 * 1024

# Objects requested per listing page (COS maximum is 1000)
DEFAULT_MAX_KEYS: int = 1000

# Storage class tagged on every uploaded object
DEFAULT_STORAGE_CLASS: str = "STANDARD"

# Retries per request for transient errors
DEFAULT_MAX_RETRIES: int = 3

# Request timeout
DEFAULT_TIMEOUT: float = 60.0  # seconds


# =============================================================================
# Key/path utilities
# =============================================================================


def strip_prefix(value: str, prefix: str) -> str:
    """Strip ``prefix`` and any leading slashes from ``value``.

    Turns a listed object key into its path relative to the remote
    prefix.

    Examples:
        >>> strip_prefix("site/sub/a.txt", "site")
        'sub/a.txt'
        >>> strip_prefix("site//a.txt", "site")
        'a.txt'
    """
    if prefix and value.startswith(prefix):
        value = value[len(prefix) :]
    return value.lstrip("/")


def join_key(prefix: str, relative_path: str) -> str:
    """Join a remote prefix and a relative path into an object key.

    Examples:
        >>> join_key("site", "sub/a.txt")
        'site/sub/a.txt'
        >>> join_key("", "a.txt")
        'a.txt'
        >>> join_key("/site/", "a.txt")
        'site/a.txt'
    """
    prefix = prefix.strip("/")
    relative_path = relative_path.lstrip("/")
    if not prefix:
        return relative_path
    if not relative_path:
        return prefix
    return f"{prefix}/{relative_path}"


def normalize_prefix(prefix: Optional[str]) -> str:
    """Normalize a remote prefix to have no leading or trailing slashes."""
    if not prefix:
        return ""
    return prefix.strip("/")


def normalize_etag(etag: Optional[str]) -> str:
    """Strip the surrounding quotes COS puts around ETag values."""
    if not etag:
        return ""
    return etag.strip().strip('"').lower()


def is_multipart_etag(etag: str) -> bool:
    """Return True for ETags of multipart uploads (``<md5>-<parts>``).

    Such ETags are not a hash of the object content and can never match a
    local MD5.
    """
    return "-" in etag


# =============================================================================
# Hash calculation utilities
# =============================================================================


def calculate_md5(
    file_path: Union[str, Path], chunk_size: int = DEFAULT_READ_CHUNK_SIZE
) -> str:
    """Calculate the hex MD5 digest of a file, reading it in chunks.

    Args:
        file_path: File to hash
        chunk_size: Bytes read per iteration

    Returns:
        Lowercase hexadecimal digest

    Raises:
        OSError: If the file cannot be opened or read
    """
    digest = hashlib.md5()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def md5_to_content_md5(hex_digest: str) -> str:
    """Convert a hex MD5 digest to the base64 form used by ``Content-MD5``.

    Examples:
        >>> md5_to_content_md5("d41d8cd98f00b204e9800998ecf8427e")
        '1B2M2Y8AsgTpgAmY7PhCfg=='
    """
    return base64.b64encode(bytes.fromhex(hex_digest)).decode("ascii")


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


def percent_of(completed: int, total: int) -> int:
    """Percentage of ``completed`` over ``total``, rounded down.

    Examples:
        >>> percent_of(1, 3)
        33
        >>> percent_of(0, 0)
        100
    """
    if total <= 0:
        return 100
    return completed * 100 // total

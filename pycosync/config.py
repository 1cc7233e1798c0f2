"""Configuration loading for pycosync.

Settings come from, in order of priority: explicit values (CLI options),
``COS_*`` environment variables, and GitHub Actions ``INPUT_*`` variables.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from .exceptions import CosConfigError
from .utils import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT, normalize_prefix

# setting name -> environment variables consulted, first match wins
ENV_VARS: dict[str, tuple[str, ...]] = {
    "secret_id": ("COS_SECRET_ID", "INPUT_SECRET_ID"),
    "secret_key": ("COS_SECRET_KEY", "INPUT_SECRET_KEY"),
    "bucket": ("COS_BUCKET", "INPUT_COS_BUCKET"),
    "region": ("COS_REGION", "INPUT_COS_REGION"),
    "local_path": ("COS_LOCAL_PATH", "INPUT_LOCAL_PATH"),
    "remote_path": ("COS_REMOTE_PATH", "INPUT_REMOTE_PATH"),
    "clean": ("COS_CLEAN", "INPUT_CLEAN"),
    "accelerate": ("COS_ACCELERATE", "INPUT_ACCELERATE"),
    "endpoint": ("COS_ENDPOINT",),
}

REQUIRED_FIELDS = ("secret_id", "secret_key", "bucket", "region", "local_path")


def parse_bool(value: Optional[str]) -> bool:
    """Parse a boolean input; only the string ``"true"`` counts as true."""
    if value is None:
        return False
    return value.strip().lower() == "true"


@dataclass
class SyncSettings:
    """Everything needed to run one sync."""

    secret_id: Optional[str] = None
    secret_key: Optional[str] = None
    bucket: Optional[str] = None
    region: Optional[str] = None
    local_path: Optional[str] = None
    remote_path: str = ""
    clean: bool = False
    accelerate: bool = False
    endpoint: Optional[str] = None
    workers: int = 1
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        self.remote_path = normalize_prefix(self.remote_path)

    @property
    def local_root(self) -> Path:
        if not self.local_path:
            raise CosConfigError("local_path is not configured")
        return Path(self.local_path)

    def missing_fields(self) -> list[str]:
        """Return names of required settings that are empty."""
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]

    def validate(self) -> "SyncSettings":
        """Check required settings before any I/O happens.

        Raises:
            CosConfigError: If a required value is missing or out of range
        """
        missing = self.missing_fields()
        if missing:
            raise CosConfigError(
                "Missing required configuration: " + ", ".join(missing)
            )
        if self.workers < 1:
            raise CosConfigError("workers must be at least 1")
        if self.max_retries < 0:
            raise CosConfigError("max_retries cannot be negative")
        return self

    def merged_with(self, **overrides: object) -> "SyncSettings":
        """Return a copy where every non-None override replaces the field."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for key, value in overrides.items():
            if key not in values:
                raise TypeError(f"Unknown setting: {key}")
            if value is not None:
                values[key] = value
        return SyncSettings(**values)  # type: ignore[arg-type]


def _lookup(environ: Mapping[str, str], names: tuple[str, ...]) -> Optional[str]:
    for name in names:
        value = environ.get(name)
        if value:
            return value
    return None


def load_settings_from_env(
    environ: Optional[Mapping[str, str]] = None,
) -> SyncSettings:
    """Build settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to ``os.environ``)

    Returns:
        SyncSettings, not yet validated
    """
    if environ is None:
        environ = os.environ

    raw = {name: _lookup(environ, names) for name, names in ENV_VARS.items()}
    return SyncSettings(
        secret_id=raw["secret_id"],
        secret_key=raw["secret_key"],
        bucket=raw["bucket"],
        region=raw["region"],
        local_path=raw["local_path"],
        remote_path=raw["remote_path"] or "",
        clean=parse_bool(raw["clean"]),
        accelerate=parse_bool(raw["accelerate"]),
        endpoint=raw["endpoint"],
    )


def is_github_actions(environ: Optional[Mapping[str, str]] = None) -> bool:
    """True when running inside a GitHub Actions job."""
    if environ is None:
        environ = os.environ
    return environ.get("GITHUB_ACTIONS") == "true"

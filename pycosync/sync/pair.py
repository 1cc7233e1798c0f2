"""Sync pair: what to mirror where."""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..config import SyncSettings
from ..utils import normalize_prefix


@dataclass
class SyncPair:
    """A local tree mirrored into a remote prefix.

    Examples:
        >>> pair = SyncPair(Path("public"), "/site/", clean=True)
        >>> pair.remote
        'site'
    """

    local: Path
    """Local root directory (or single file)"""

    remote: str = ""
    """Remote prefix, normalized without leading/trailing slashes"""

    clean: bool = False
    """Delete remote objects that no longer exist locally"""

    def __post_init__(self) -> None:
        if not isinstance(self.local, Path):
            self.local = Path(self.local)
        self.remote = normalize_prefix(self.remote)

    @classmethod
    def from_settings(cls, settings: SyncSettings) -> "SyncPair":
        """Create a sync pair from validated settings."""
        return cls(
            local=settings.local_root,
            remote=settings.remote_path,
            clean=settings.clean,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Union[str, bool]]) -> "SyncPair":
        """Create a sync pair from a ``{"local", "remote", "clean"}`` dict."""
        if "local" not in data:
            raise ValueError("Sync pair requires a 'local' path")
        return cls(
            local=Path(str(data["local"])),
            remote=str(data.get("remote", "")),
            clean=bool(data.get("clean", False)),
        )

    def __str__(self) -> str:
        arrow = " (clean)" if self.clean else ""
        return f"{self.local} -> /{self.remote}{arrow}"

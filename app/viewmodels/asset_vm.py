"""Lightweight view model wrapper around `Asset`."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from core.models import Asset
from core.services.date_extractor import mtime_ms, taken_at_ms


@dataclass
class AssetVM:
    """Expose convenient properties for bindings/templates."""

    asset: Asset

    @property
    def file_name(self) -> str:
        return self.asset.filename

    @property
    def folder_path(self) -> str:
        """Folder portion of the asset path."""
        if self.asset.dirname:
            return self.asset.dirname
        path = self.asset.path.replace("\\", "/")
        return path.rsplit("/", 1)[0] if "/" in path else ""

    @property
    def size_bytes(self) -> int:
        """File size in bytes (fallback to 0 when missing)."""
        return int(self.asset.size_bytes or 0)

    @property
    def display_date(self) -> str:
        """Taken date, else modification date, as YYYY-MM-DD (UTC)."""
        ts = taken_at_ms(self.asset) or mtime_ms(self.asset)
        if ts is None:
            return ""
        try:
            return datetime.fromtimestamp(ts / 1000.0, tz=timezone.utc).strftime("%Y-%m-%d")
        except (OverflowError, OSError, ValueError):
            return ""

    @property
    def is_video(self) -> bool:
        return self.asset.mime.startswith("video/") or self.asset.ext.lower() in {
            "mp4",
            "m4v",
            "mov",
            "qt",
            "avi",
            "mkv",
            "webm",
            "mpg",
            "mpeg",
        }

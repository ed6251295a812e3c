"""CSV-backed asset source.

Loads asset rows from a CSV export and serves them through the
`AssetSource` interface with server-like sorting, filtering and paging.
Used by the console entry point and as a local stand-in for the API.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
import csv
from pathlib import Path
from typing import Any

from loguru import logger

from core.models import Asset, PageResponse

CSV_HEADERS = [
    "id",
    "path",
    "filename",
    "ext",
    "size_bytes",
    "mtime_ns",
    "taken_at",
]

_SORT_COLUMNS = {
    "mtime": "mtime_ns",
    "taken_at": "taken_at",
    "filename": "filename",
    "size_bytes": "size_bytes",
}


def _parse_int(value: str | None) -> int | None:
    """Parse an integer CSV cell; empty or invalid cells become None."""
    if value is None or not str(value).strip():
        return None
    try:
        return int(float(str(value).strip()))
    except ValueError:
        logger.warning("Invalid integer: {}", value)
        return None


def _row_to_asset(row: Mapping[str, str]) -> Asset:
    path = row.get("path", "") or ""
    filename = row.get("filename", "") or Path(path.replace("\\", "/")).name
    ext = row.get("ext", "") or Path(filename).suffix.lstrip(".")
    asset_id = _parse_int(row.get("id"))
    if asset_id is None:
        raise ValueError("missing id")
    return Asset(
        id=asset_id,
        path=path,
        filename=filename,
        ext=ext.lower(),
        size_bytes=_parse_int(row.get("size_bytes")) or 0,
        mtime_ns=_parse_int(row.get("mtime_ns")) or 0,
        taken_at=_parse_int(row.get("taken_at")),
        dirname=str(Path(path.replace("\\", "/")).parent) if path else "",
        mime=row.get("mime", "") or "",
        camera_make=row.get("camera_make") or None,
        camera_model=row.get("camera_model") or None,
    )


def _matches(asset: Asset, filters: Mapping[str, Any]) -> bool:
    exts = filters.get("ext")
    if exts:
        allowed = {str(e).lower().lstrip(".") for e in exts}
        if asset.ext.lower() not in allowed:
            return False
    query = filters.get("q")
    if query and str(query).lower() not in asset.path.lower():
        return False
    return True


def _sorted(assets: list[Asset], sort_field: str, sort_order: str) -> list[Asset]:
    descending = sort_order != "asc"
    column = _SORT_COLUMNS.get(sort_field)
    if column is None:
        return sorted(assets, key=lambda a: a.id, reverse=descending)

    present = [a for a in assets if getattr(a, column) is not None]
    missing = [a for a in assets if getattr(a, column) is None]

    def key(a: Asset) -> Any:
        value = getattr(a, column)
        return value.lower() if isinstance(value, str) else value

    # Secondary key keeps pages deterministic for equal values
    present.sort(key=lambda a: a.id, reverse=descending)
    present.sort(key=key, reverse=descending)
    return present + sorted(missing, key=lambda a: a.id)


class CsvAssetSource:
    """Serve assets loaded from CSV as sorted, filtered pages."""

    def __init__(self, assets: Iterable[Asset] = ()) -> None:
        self._assets: dict[int, Asset] = {}
        self.add(assets)

    @classmethod
    def from_csv(cls, csv_path: str | Path) -> CsvAssetSource:
        return cls(cls.load(csv_path))

    @staticmethod
    def load(csv_path: str | Path) -> Iterator[Asset]:
        """Yield `Asset` rows from CSV at `csv_path`."""
        path = Path(csv_path)
        with path.open("r", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            missing = [h for h in ("id", "path") if h not in (reader.fieldnames or [])]
            if missing:
                raise ValueError(f"CSV missing required headers: {missing}")

            for row in reader:
                try:
                    yield _row_to_asset(row)
                except (ValueError, TypeError, KeyError) as ex:
                    logger.error("CSV row error: {} | row={} ", ex, row)
                    continue

    @staticmethod
    def save(csv_path: str | Path, assets: Iterable[Asset]) -> None:
        """Write assets to `csv_path` using the canonical headers."""
        path = Path(csv_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_HEADERS)
            writer.writeheader()
            for asset in assets:
                writer.writerow(
                    {
                        "id": asset.id,
                        "path": asset.path,
                        "filename": asset.filename,
                        "ext": asset.ext,
                        "size_bytes": asset.size_bytes,
                        "mtime_ns": asset.mtime_ns,
                        "taken_at": "" if asset.taken_at is None else asset.taken_at,
                    }
                )

    @property
    def count(self) -> int:
        return len(self._assets)

    def add(self, assets: Iterable[Asset]) -> None:
        for asset in assets:
            self._assets[asset.id] = asset

    def remove(self, asset_ids: Iterable[int]) -> None:
        for asset_id in asset_ids:
            self._assets.pop(asset_id, None)

    async def fetch_page(
        self,
        offset: int,
        limit: int,
        sort_field: str,
        sort_order: str,
        filters: Mapping[str, Any] | None = None,
    ) -> PageResponse:
        matching = [a for a in self._assets.values() if _matches(a, filters or {})]
        ordered = _sorted(matching, sort_field, sort_order)
        start = max(0, int(offset))
        return PageResponse(items=ordered[start : start + max(0, int(limit))], total=len(ordered))

    async def fetch_by_id(self, asset_id: int) -> Asset | None:
        return self._assets.get(asset_id)

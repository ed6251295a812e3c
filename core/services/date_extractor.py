"""Date inference for assets from filenames, folder paths, and metadata.

Dates are best-effort: nothing in this module raises on malformed input.
Callers should expect `None` fields in `DateParts` and `None` timestamps
when no source yields a usable date.
"""

from __future__ import annotations

from datetime import datetime, timezone
import re

from loguru import logger

from core.models import Asset, DateParts, OrganizationToggles

MIN_YEAR = 1900
MAX_YEAR = 2100
# 2100-01-01T00:00:00Z in milliseconds
MAX_TIMESTAMP_MS = 4_102_444_800_000

MONTH_NAMES: dict[str, int] = {
    "january": 1,
    "jan": 1,
    "february": 2,
    "feb": 2,
    "march": 3,
    "mar": 3,
    "april": 4,
    "apr": 4,
    "may": 5,
    "june": 6,
    "jun": 6,
    "july": 7,
    "jul": 7,
    "august": 8,
    "aug": 8,
    "september": 9,
    "sep": 9,
    "sept": 9,
    "october": 10,
    "oct": 10,
    "november": 11,
    "nov": 11,
    "december": 12,
    "dec": 12,
}

_EXT_RX = re.compile(r"\.[^.]*$")
_YEAR_SEGMENT_RX = re.compile(r"^(\d{4})$")
_MONTH_SEGMENT_RX = re.compile(r"^0?([1-9]|1[0-2])$")

# Year-first patterns, tried in order. The bool marks patterns whose third
# group is a day that must fall within 1..31.
_YEAR_FIRST_PATTERNS: list[tuple[re.Pattern[str], bool]] = [
    (re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})"), False),
    (re.compile(r"(\d{4})(\d{2})(\d{2})"), True),
    (re.compile(r"(\d{4})_(\d{1,2})_(\d{1,2})"), False),
    (re.compile(r"(\d{4})-(\d{1,2})(?![-\d])"), False),
    (re.compile(r"(\d{4})(\d{2})(?!\d)"), False),
]
_YEAR_LAST_RX = re.compile(r"(\d{1,2})-(\d{1,2})-(\d{4})")


def _valid_year(year: int) -> bool:
    return MIN_YEAR <= year <= MAX_YEAR


def _valid_month(month: int) -> bool:
    return 1 <= month <= 12


def _valid_day(day: int) -> bool:
    return 1 <= day <= 31


def extract_from_filename(filename: str) -> DateParts | None:
    """Return year/month parsed from `filename`, or None.

    Recognizes `2025-01-15`, `20250115`, `2025_01_15`, `2025-01`, `202501`,
    `15-01-2025` and `01-15-2025`, in that order. For `NN-NN-YYYY` the first
    number is read as the day whenever it exceeds 12 or both numbers could be
    a valid day/month; month-first is only used when the second number exceeds 12.
    """
    if not filename:
        return None
    stem = _EXT_RX.sub("", filename)

    for rx, has_day in _YEAR_FIRST_PATTERNS:
        m = rx.search(stem)
        if not m:
            continue
        year, month = int(m.group(1)), int(m.group(2))
        if has_day and not _valid_day(int(m.group(3))):
            continue
        if _valid_year(year) and _valid_month(month):
            return DateParts(year, month)

    m = _YEAR_LAST_RX.search(stem)
    if m:
        first, second, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if _valid_year(year):
            # DD-MM-YYYY; a first number above 12 can only be a day
            if _valid_month(second) and (first > 12 or _valid_day(first)):
                return DateParts(year, second)
            # MM-DD-YYYY
            if _valid_month(first) and second > 12 and _valid_day(second):
                return DateParts(year, first)
    return None


def _parse_month_segment(segment: str) -> int | None:
    m = _MONTH_SEGMENT_RX.match(segment)
    if m:
        return int(m.group(1))
    return MONTH_NAMES.get(segment.lower())


def _parse_year_segment(segment: str) -> int | None:
    m = _YEAR_SEGMENT_RX.match(segment)
    if not m:
        return None
    year = int(m.group(1))
    return year if _valid_year(year) else None


def extract_from_path(path: str) -> DateParts | None:
    """Return year/month from folder segments of `path`, or None.

    Recognizes `/2025/01/`, `/2025/1/`, `/2025/January/` and `/2025/Jan/`.
    A lone year folder yields month 1.
    """
    if not path:
        return None
    segments = [s for s in re.split(r"[\\/]", path) if s]
    if len(segments) < 2:
        return None

    for year_seg, month_seg in zip(segments, segments[1:]):
        year = _parse_year_segment(year_seg)
        if year is None:
            continue
        month = _parse_month_segment(month_seg)
        if month is not None and _valid_month(month):
            return DateParts(year, month)

    # The last segment is the filename
    for segment in segments[:-1]:
        year = _parse_year_segment(segment)
        if year is not None:
            return DateParts(year, 1)
    return None


def taken_at_ms(asset: Asset) -> float | None:
    """`taken_at` (seconds) as milliseconds; None when absent or non-positive."""
    try:
        if asset.taken_at and asset.taken_at > 0:
            return float(asset.taken_at) * 1000.0
    except TypeError:
        logger.debug("Bad taken_at for asset {}: {!r}", asset.id, asset.taken_at)
    return None


def mtime_ms(asset: Asset) -> float | None:
    """`mtime_ns` (nanoseconds) as milliseconds; None when absent or non-positive."""
    try:
        if asset.mtime_ns and asset.mtime_ns > 0:
            return asset.mtime_ns / 1_000_000
    except TypeError:
        logger.debug("Bad mtime_ns for asset {}: {!r}", asset.id, asset.mtime_ns)
    return None


def timestamp_in_range(timestamp_ms: float | None) -> bool:
    return timestamp_ms is not None and 0 <= timestamp_ms <= MAX_TIMESTAMP_MS


def timestamp_to_parts(timestamp_ms: float | None) -> DateParts | None:
    """Convert epoch milliseconds to a UTC year/month; None if out of range."""
    if not timestamp_in_range(timestamp_ms):
        return None
    try:
        dt = datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return DateParts(dt.year, dt.month)


def month_start_ms(parts: DateParts) -> int | None:
    """First instant (UTC) of the month in `parts` as epoch milliseconds."""
    if parts.year is None or parts.month is None:
        return None
    try:
        dt = datetime(parts.year, parts.month, 1, tzinfo=timezone.utc)
    except ValueError:
        return None
    return int(dt.timestamp() * 1000)


def metadata_preference(sort_field: str) -> str:
    """Metadata source tried first for a given sort field."""
    return "mtime" if sort_field == "mtime" else "taken_at"


class DateExtractor:
    """Infers dates for assets in the order filename, folder, metadata."""

    def metadata_timestamps(self, asset: Asset, prefer: str = "taken_at") -> list[float]:
        """Present metadata timestamps (ms) in preference order."""
        sources = (mtime_ms, taken_at_ms) if prefer == "mtime" else (taken_at_ms, mtime_ms)
        return [ts for ts in (src(asset) for src in sources) if ts is not None]

    def infer_date(
        self,
        asset: Asset,
        toggles: OrganizationToggles,
        prefer: str = "taken_at",
    ) -> DateParts:
        """Return the best-effort year/month for `asset`.

        Args:
            asset: The asset to inspect.
            toggles: Which of filename/folder dates dominate metadata.
            prefer: Metadata source tried first, "taken_at" or "mtime".

        Earlier sources are never overridden; later sources only fill fields
        still missing. The resulting month is clamped into 1..12.
        """
        year: int | None = None
        month: int | None = None

        candidates: list[DateParts | None] = []
        if toggles.prioritize_filename_date:
            candidates.append(extract_from_filename(asset.filename))
        if toggles.prioritize_folder_structure:
            candidates.append(extract_from_path(asset.path))
        candidates.extend(
            timestamp_to_parts(ts) for ts in self.metadata_timestamps(asset, prefer)
        )

        for parts in candidates:
            if year is not None and month is not None:
                break
            if parts is None:
                continue
            if year is None:
                year = parts.year
            if month is None:
                month = parts.month

        if month is not None:
            month = min(12, max(1, month))
        return DateParts(year, month)

    def sortable_timestamp(
        self,
        asset: Asset,
        toggles: OrganizationToggles,
        sort_field: str = "none",
    ) -> int | float | None:
        """Return a millisecond timestamp used for date ordering, or None.

        Filename and folder dates are anchored to the first instant of their
        month so that assets from the same month compare equal.
        """
        if toggles.prioritize_filename_date:
            parts = extract_from_filename(asset.filename)
            if parts is not None:
                ts = month_start_ms(parts)
                if ts is not None:
                    return ts

        if toggles.prioritize_folder_structure:
            parts = extract_from_path(asset.path)
            if parts is not None:
                ts = month_start_ms(parts)
                if ts is not None:
                    return ts

        for ts in self.metadata_timestamps(asset, metadata_preference(sort_field)):
            if timestamp_in_range(ts):
                return ts
        return None

"""Core domain models for media assets, sort settings, and pagination state."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, Literal

SortField = Literal["none", "mtime", "taken_at", "filename", "size_bytes"]
SortOrder = Literal["asc", "desc"]
GroupBy = Literal["none", "years", "months"]

SORT_FIELDS: tuple[str, ...] = ("none", "mtime", "taken_at", "filename", "size_bytes")
SORT_ORDERS: tuple[str, ...] = ("asc", "desc")
GROUP_BY_MODES: tuple[str, ...] = ("none", "years", "months")
DATE_SORT_FIELDS: frozenset[str] = frozenset({"none", "mtime", "taken_at"})


@dataclass(frozen=True)
class Asset:
    """A single media record as returned by the server. Never mutated."""

    id: int
    path: str
    filename: str
    ext: str = ""
    size_bytes: int = 0
    mtime_ns: int = 0
    taken_at: int | None = None
    dirname: str = ""
    ctime_ns: int = 0
    mime: str = ""
    width: int | None = None
    height: int | None = None
    duration_ms: int | None = None
    camera_make: str | None = None
    camera_model: str | None = None
    lens_model: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Asset:
        """Build an asset from an API-style mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class DateParts:
    """Year/month inferred for an asset; None means not inferable."""

    year: int | None = None
    month: int | None = None

    @property
    def complete(self) -> bool:
        return self.year is not None and self.month is not None


@dataclass(frozen=True)
class SortSpec:
    """Sort field and direction. Both are always defined."""

    field: SortField = "none"
    order: SortOrder = "desc"

    def __post_init__(self) -> None:
        if self.field not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field: {self.field!r}")
        if self.order not in SORT_ORDERS:
            raise ValueError(f"Unknown sort order: {self.order!r}")

    @property
    def ascending(self) -> bool:
        return self.order == "asc"

    @property
    def is_date_sort(self) -> bool:
        return self.field in DATE_SORT_FIELDS


@dataclass(frozen=True)
class OrganizationToggles:
    """Which date source dominates metadata when ordering by date."""

    prioritize_folder_structure: bool = False
    prioritize_filename_date: bool = False

    @property
    def active(self) -> bool:
        return self.prioritize_folder_structure or self.prioritize_filename_date


@dataclass
class GroupBucket:
    """A year ("YYYY") or month ("YYYY-MM") bucket of assets.

    `children` holds month sub-buckets when the folder view splits a year.
    """

    key: str
    items: list[Asset] = field(default_factory=list)
    children: list[GroupBucket] | None = None


@dataclass
class CursorState:
    """Loaded offset window of the server-side result set."""

    loaded_offset_start: int = 0
    loaded_offset_end: int = 0
    total: int | None = None


@dataclass(frozen=True)
class PageResponse:
    """One page from the fetch collaborator."""

    items: list[Asset]
    total: int


@dataclass(frozen=True)
class NextIndex:
    """Where navigation lands after the viewed asset is removed."""

    next_id: int
    next_index: int

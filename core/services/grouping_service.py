"""Year and month grouping of organized asset lists."""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Sequence
from functools import cmp_to_key

from core.models import GROUP_BY_MODES, Asset, GroupBucket, OrganizationToggles, SortSpec
from core.services.date_extractor import MAX_YEAR, MIN_YEAR, DateExtractor, metadata_preference
from core.services.sort_service import AssetOrganizer

UNKNOWN_YEAR = "unknown"


def parse_group_key(key: str) -> tuple[int | None, int | None]:
    """Split "YYYY" or "YYYY-MM" into numbers; unparseable parts become None."""
    parts = key.split("-")
    try:
        year: int | None = int(parts[0])
    except ValueError:
        year = None
    month: int | None = None
    if len(parts) == 2:
        try:
            month = int(parts[1])
        except ValueError:
            month = None
    return year, month


def format_group_label(key: str) -> str:
    """Human label for a bucket key: "2024" or "March 2024"."""
    year, month = parse_group_key(key)
    if year is not None and month is not None and 1 <= month <= 12:
        return f"{calendar.month_name[month]} {year}"
    return key


def _compare_keys(a: str, b: str, ascending: bool) -> int:
    a_year, a_month = parse_group_key(a)
    b_year, b_month = parse_group_key(b)
    if a_year is not None and b_year is not None:
        if a_year != b_year:
            cmp = a_year - b_year
        elif a_month is not None and b_month is not None:
            cmp = a_month - b_month
        else:
            return 0
    else:
        cmp = (a > b) - (a < b)
    return cmp if ascending else -cmp


def _month_sort_value(key: str) -> int:
    year, month = parse_group_key(key)
    if year is None or month is None:
        return -(2**63)
    return year * 100 + month


def flatten(buckets: Iterable[GroupBucket]) -> list[Asset]:
    """Items of `buckets` in bucket order, then intra-bucket order."""
    result: list[Asset] = []
    for bucket in buckets:
        result.extend(bucket.items)
    return result


class GroupingEngine:
    """Partitions an ordered asset list into year or year-month buckets."""

    def __init__(
        self,
        extractor: DateExtractor | None = None,
        organizer: AssetOrganizer | None = None,
    ) -> None:
        self._extractor = extractor or DateExtractor()
        self._organizer = organizer or AssetOrganizer(self._extractor)

    def group(
        self,
        ordered: Sequence[Asset],
        group_by: str,
        toggles: OrganizationToggles,
        sort: SortSpec,
        folder_months: bool = False,
    ) -> list[GroupBucket]:
        """Bucket `ordered` by year or month.

        Args:
            ordered: Output of `AssetOrganizer.organize`.
            group_by: "none", "years" or "months".
            toggles: Same toggles used to organize `ordered`.
            sort: Same sort spec used to organize `ordered`.
            folder_months: Attach month sub-buckets to each year bucket.

        Returns:
            Sorted buckets; an empty list for "none". Assets without an
            inferable year and month are left out.
        """
        if group_by not in GROUP_BY_MODES:
            raise ValueError(f"Unknown group-by mode: {group_by!r}")
        if group_by == "none":
            return []

        prefer = metadata_preference(sort.field)
        groups: dict[str, list[Asset]] = {}
        for asset in ordered:
            parts = self._extractor.infer_date(asset, toggles, prefer)
            if parts.year is None or parts.month is None:
                continue
            if not MIN_YEAR <= parts.year <= MAX_YEAR:
                continue
            key = str(parts.year) if group_by == "years" else f"{parts.year}-{parts.month:02d}"
            groups.setdefault(key, []).append(asset)

        buckets = [
            GroupBucket(key=key, items=self._organizer.organize(items, toggles, sort))
            for key, items in groups.items()
        ]
        ascending = sort.ascending
        buckets.sort(key=cmp_to_key(lambda a, b: _compare_keys(a.key, b.key, ascending)))

        if folder_months and group_by == "years":
            for bucket in buckets:
                bucket.children = self.folder_months(bucket, toggles, sort)
        return buckets

    def folder_months(
        self,
        bucket: GroupBucket,
        toggles: OrganizationToggles,
        sort: SortSpec,
    ) -> list[GroupBucket]:
        """Split a year bucket into month sub-buckets without dropping assets.

        An asset with no month goes to January; one with no year takes the
        parent bucket's year.
        """
        fallback_year, _ = parse_group_key(bucket.key)
        prefer = metadata_preference(sort.field)
        groups: dict[str, list[Asset]] = {}
        for asset in bucket.items:
            parts = self._extractor.infer_date(asset, toggles, prefer)
            year = parts.year if parts.year is not None else fallback_year
            month = parts.month if parts.month is not None else 1
            prefix = str(year) if year is not None else UNKNOWN_YEAR
            groups.setdefault(f"{prefix}-{month:02d}", []).append(asset)

        children = [GroupBucket(key=key, items=items) for key, items in groups.items()]
        sign = 1 if sort.ascending else -1
        children.sort(key=lambda b: sign * _month_sort_value(b.key))
        return children

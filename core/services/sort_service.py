"""Ordering service for asset lists.

The organizer produces one deterministic order over a list of assets for a
given sort spec and organization toggles. It never mutates its input and
every sort is stable; descending order negates the comparison instead of
reversing the result, so ties keep their input order in both directions.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from functools import cmp_to_key

from core.models import Asset, OrganizationToggles, SortSpec
from core.services.date_extractor import DateExtractor


def _cmp(a: float | str, b: float | str) -> int:
    return (a > b) - (a < b)


def _directed(compare: Callable[[Asset, Asset], int], ascending: bool) -> Callable[..., int]:
    if ascending:
        return compare
    return lambda a, b: -compare(a, b)


def _compare_filename(a: Asset, b: Asset) -> int:
    return _cmp((a.filename or "").casefold(), (b.filename or "").casefold())


def _compare_size(a: Asset, b: Asset) -> int:
    return _cmp(a.size_bytes or 0, b.size_bytes or 0)


class AssetOrganizer:
    """Sorts assets by a field or by an inferred date."""

    def __init__(self, extractor: DateExtractor | None = None) -> None:
        self._extractor = extractor or DateExtractor()

    def organize(
        self,
        assets: Sequence[Asset],
        toggles: OrganizationToggles,
        sort: SortSpec,
    ) -> list[Asset]:
        """Return `assets` in display order.

        Args:
            assets: Assets in the order the server returned them.
            toggles: Filename/folder date prioritization.
            sort: Sort field and order.

        Returns:
            A new list. With sort field "none" and both toggles off this is
            the input order unchanged. Assets without any date are placed
            last, in input order, regardless of `sort.order`.
        """
        if not assets:
            return []

        organize_by_date = sort.is_date_sort and toggles.active
        if sort.field == "none" and not organize_by_date:
            return list(assets)

        if sort.field == "filename":
            return sorted(assets, key=cmp_to_key(_directed(_compare_filename, sort.ascending)))
        if sort.field == "size_bytes":
            return sorted(assets, key=cmp_to_key(_directed(_compare_size, sort.ascending)))

        dated: list[tuple[float, Asset]] = []
        undated: list[Asset] = []
        for asset in assets:
            ts = self._extractor.sortable_timestamp(asset, toggles, sort.field)
            if ts is None:
                undated.append(asset)
            else:
                dated.append((ts, asset))

        ascending = sort.ascending
        dated.sort(key=cmp_to_key(lambda a, b: _cmp(a[0], b[0]) if ascending else _cmp(b[0], a[0])))
        return [asset for _, asset in dated] + undated

"""ViewModel for a paged, organized and grouped asset listing."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger

from core.file_types import active_extensions, filter_by_extension
from core.models import Asset, GroupBucket, OrganizationToggles, SortSpec
from core.services.grouping_service import GroupingEngine, flatten
from core.services.interfaces import AssetSource
from core.services.pagination_service import DEFAULT_PAGE_SIZE, PaginationCursor
from core.services.sort_service import AssetOrganizer
from infrastructure.debounce import Debouncer
from infrastructure.preferences import GalleryPreferences


class GalleryVM:
    """Gallery/search view-model.

    Owns one `PaginationCursor` per query and derives the display order from
    it on demand. Deletions are applied locally at once and reconciled by a
    delayed refetch; server-side count changes trigger a debounced reset.
    """

    def __init__(
        self,
        source: AssetSource,
        preferences: GalleryPreferences | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        filters: Mapping[str, Any] | None = None,
        initial_offset: int = 0,
        stats_debounce: float = 1.0,
        delete_refetch_delay: float = 0.5,
        organizer: AssetOrganizer | None = None,
        grouping: GroupingEngine | None = None,
    ) -> None:
        """Create a GalleryVM.

        Args:
            source: Fetch collaborator (optionally a `CachedAssetSource`).
            preferences: Remembered sort/group/filter settings.
            page_size: Items per page.
            filters: Query filters passed to the source (person, search terms).
            initial_offset: Offset of the first page, e.g. when opened mid-list.
            stats_debounce: Quiet period before refetching after a count change.
            delete_refetch_delay: Delay before refetching after a deletion.
        """
        self._source = source
        self._prefs = preferences or GalleryPreferences()
        self._page_size = page_size
        self._filters = dict(filters or {})
        self._initial_offset = initial_offset
        self._organizer = organizer or AssetOrganizer()
        self._grouping = grouping or GroupingEngine(organizer=self._organizer)

        self._sort = self._prefs.sort_spec
        self._toggles = self._prefs.toggles
        self._group_by = self._prefs.group_by
        self._show_folders = self._prefs.show_folders
        self._show_folder_months = self._prefs.show_folder_months
        self._type_filter = self._prefs.type_filter
        self._ext_filter = self._prefs.ext_filter
        self._expanded_years = self._prefs.expanded_years

        self._stats_debouncer = Debouncer(stats_debounce)
        self._delete_debouncer = Debouncer(delete_refetch_delay)
        self._last_asset_count: int | None = None
        self._cursor = self._new_cursor()

    # Query
    def _new_cursor(self) -> PaginationCursor:
        return PaginationCursor(
            self._source,
            self.server_sort,
            page_size=self._page_size,
            filters=self._filters,
            initial_offset=self._initial_offset,
        )

    @property
    def server_sort(self) -> SortSpec:
        """Sort requested from the source.

        With sort "none" and an organization toggle on, the source is asked
        for modification-time order so pages arrive roughly date ordered.
        """
        if self._sort.field == "none" and self._toggles.active:
            return SortSpec("mtime", self._sort.order)
        return self._sort

    @property
    def cursor(self) -> PaginationCursor:
        return self._cursor

    @property
    def source(self) -> AssetSource:
        return self._source

    @property
    def sort(self) -> SortSpec:
        return self._sort

    @property
    def toggles(self) -> OrganizationToggles:
        return self._toggles

    @property
    def group_by(self) -> str:
        return self._group_by

    @property
    def show_folders(self) -> bool:
        return self._show_folders

    @property
    def show_folder_months(self) -> bool:
        return self._show_folder_months

    async def _restart(self) -> None:
        self._delete_debouncer.cancel()
        self._stats_debouncer.cancel()
        self._cursor = self._new_cursor()
        await self._cursor.start()

    async def set_sort(self, sort: SortSpec) -> None:
        """Persist `sort` and restart paging from the top."""
        if sort == self._sort:
            return
        self._sort = sort
        self._prefs.sort_spec = sort
        await self._restart()

    async def set_toggles(self, toggles: OrganizationToggles) -> None:
        """Persist organization toggles; restart only if the source sort changes."""
        if toggles == self._toggles:
            return
        previous = self.server_sort
        self._toggles = toggles
        self._prefs.toggles = toggles
        if self.server_sort != previous:
            await self._restart()

    def set_group_by(self, group_by: str) -> None:
        if group_by != "years" and self._group_by == "years":
            self.set_show_folders(False)
        self._group_by = group_by
        self._prefs.group_by = group_by

    def set_show_folders(self, value: bool) -> None:
        """Toggle folder view; turning it off collapses every year."""
        if not value:
            self._expanded_years = set()
            self._prefs.expanded_years = ()
            self.set_show_folder_months(False)
        self._show_folders = bool(value)
        self._prefs.show_folders = bool(value)

    def set_show_folder_months(self, value: bool) -> None:
        self._show_folder_months = bool(value)
        self._prefs.show_folder_months = bool(value)

    def set_type_filter(self, type_key: str | None, extensions: str | None = None) -> None:
        self._type_filter = type_key or None
        self._ext_filter = extensions or None
        self._prefs.type_filter = self._type_filter
        self._prefs.ext_filter = self._ext_filter

    # Paging
    async def start(self) -> list[Asset]:
        return await self._cursor.start()

    async def load_more(self) -> list[Asset]:
        return await self._cursor.load_forward()

    async def load_previous(self) -> list[Asset]:
        return await self._cursor.load_backward()

    async def refetch(self) -> list[Asset]:
        """Reload from the first page, bypassing cached pages.

        If the reload fails while a deletion is still unreconciled, another
        attempt is scheduled; paging stays suppressed until one succeeds.
        """
        invalidate = getattr(self._source, "invalidate", None)
        if callable(invalidate):
            invalidate()
        try:
            return await self._cursor.reset()
        except Exception as ex:  # pylint: disable=broad-exception-caught
            if self._cursor.refetch_pending:
                logger.warning("Refetch after deletion failed, retrying: {}", ex)
                self._delete_debouncer.schedule(self.refetch)
            raise

    @property
    def has_next(self) -> bool:
        return self._cursor.has_next

    @property
    def has_previous(self) -> bool:
        return self._cursor.has_previous

    # Derived views
    @property
    def extensions(self) -> list[str]:
        return active_extensions(self._type_filter, self._ext_filter)

    @property
    def items(self) -> list[Asset]:
        """Loaded assets in display order, deleted and filtered ones removed."""
        organized = self._organizer.organize(self._cursor.items, self._toggles, self._sort)
        return filter_by_extension(organized, self.extensions)

    @property
    def groups(self) -> list[GroupBucket]:
        """Buckets for the current group-by mode; empty when ungrouped."""
        return self._grouping.group(
            self.items,
            self._group_by,
            self._toggles,
            self._sort,
            folder_months=self._show_folders and self._show_folder_months,
        )

    def navigation_ids(self, group_key: str | None = None) -> list[int]:
        """Ids in display order for the detail view.

        With `group_key`, only that bucket (or month sub-bucket) is returned,
        as used when a folder is open.
        """
        if self._group_by == "none":
            return [a.id for a in self.items]
        buckets = self.groups
        if group_key is None:
            return [a.id for a in flatten(buckets)]
        for bucket in buckets:
            if bucket.key == group_key:
                return [a.id for a in bucket.items]
            for child in bucket.children or []:
                if child.key == group_key:
                    return [a.id for a in child.items]
        return []

    def find(self, asset_id: int) -> Asset | None:
        return self._cursor.find(asset_id)

    # Folder state
    def is_expanded(self, year_key: str) -> bool:
        return year_key in self._expanded_years

    def toggle_year_expanded(self, year_key: str) -> bool:
        """Flip a year folder open/closed; returns the new state."""
        if year_key in self._expanded_years:
            self._expanded_years.discard(year_key)
        else:
            self._expanded_years.add(year_key)
        self._prefs.expanded_years = self._expanded_years
        return year_key in self._expanded_years

    # Live updates
    def assets_removed(self, asset_ids: int | Iterable[int]) -> None:
        """Hide deleted assets now and refetch shortly after."""
        self._cursor.mark_deleted(asset_ids)
        self._delete_debouncer.schedule(self.refetch)

    def on_stats(self, asset_count: int) -> None:
        """React to the server-side asset count reported by stats polling."""
        previous = self._last_asset_count
        self._last_asset_count = asset_count
        if previous is not None and asset_count != previous:
            logger.info("Asset count changed {} -> {}; scheduling refetch", previous, asset_count)
            self._stats_debouncer.schedule(self.refetch)

    @property
    def refresh_pending(self) -> bool:
        return self._stats_debouncer.pending or self._delete_debouncer.pending

    async def drain(self) -> None:
        """Wait for refetches already started by the debouncers."""
        await self._delete_debouncer.drain()
        await self._stats_debouncer.drain()

    def close(self) -> None:
        self._stats_debouncer.cancel()
        self._delete_debouncer.cancel()

"""Offset-based bidirectional paging over an `AssetSource`.

`PaginationCursor` keeps the loaded offset window of one logical query and
the deduplicated `WorkingSet` of assets fetched so far. Offsets are captured
when a request is issued and applied when it completes; responses that
arrive after a newer reset are discarded using a generation stamp.

Two counters are kept: `_generation` counts reset requests, `_window` counts
windows actually installed. Page loads stamp themselves with `_window`
together with the offset they read, so a load that overlaps a reset is
applied only if the old window is still installed when it completes.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from loguru import logger

from core.models import Asset, CursorState, PageResponse, SortSpec
from core.services.interfaces import AssetSource

DEFAULT_PAGE_SIZE = 200


class WorkingSet:
    """Ordered assets of one view, unique by id (first occurrence wins)."""

    def __init__(self, assets: Iterable[Asset] = ()) -> None:
        self._items: list[Asset] = []
        self._ids: set[int] = set()
        self.append(assets)

    def _fresh(self, assets: Iterable[Asset]) -> list[Asset]:
        fresh: list[Asset] = []
        for asset in assets:
            if asset.id in self._ids:
                continue
            self._ids.add(asset.id)
            fresh.append(asset)
        return fresh

    def append(self, assets: Iterable[Asset]) -> list[Asset]:
        """Add unseen assets at the end; return the ones actually added."""
        fresh = self._fresh(assets)
        self._items.extend(fresh)
        return fresh

    def prepend(self, assets: Iterable[Asset]) -> list[Asset]:
        """Add unseen assets at the front, keeping their order."""
        fresh = self._fresh(assets)
        self._items[:0] = fresh
        return fresh

    def get(self, asset_id: int) -> Asset | None:
        for asset in self._items:
            if asset.id == asset_id:
                return asset
        return None

    @property
    def items(self) -> list[Asset]:
        return list(self._items)

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._ids

    def __iter__(self) -> Iterator[Asset]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


class PaginationCursor:
    """Loads pages forward and backward from an initial offset."""

    def __init__(
        self,
        source: AssetSource,
        sort: SortSpec,
        page_size: int = DEFAULT_PAGE_SIZE,
        filters: Mapping[str, Any] | None = None,
        initial_offset: int = 0,
    ) -> None:
        """Create a cursor. Nothing is fetched until `start()`.

        Args:
            source: Fetch collaborator.
            sort: Server-side sort passed through to `source.fetch_page`.
            page_size: Items requested per page.
            filters: Opaque filter criteria passed to the source.
            initial_offset: Offset of the first page.
        """
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._source = source
        self._sort = sort
        self._page_size = int(page_size)
        self._filters = dict(filters or {})
        self._initial_offset = max(0, int(initial_offset))
        self._state = CursorState(self._initial_offset, self._initial_offset, None)
        self._working_set = WorkingSet()
        self._deleted_ids: set[int] = set()
        self._generation = 0
        self._window = 0
        self._refetch_pending = False
        self._forward_task: asyncio.Future[list[Asset]] | None = None
        self._backward_task: asyncio.Future[list[Asset]] | None = None

    # State
    @property
    def state(self) -> CursorState:
        """A copy of the current offset window."""
        s = self._state
        return CursorState(s.loaded_offset_start, s.loaded_offset_end, s.total)

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def sort(self) -> SortSpec:
        return self._sort

    @property
    def filters(self) -> dict[str, Any]:
        return dict(self._filters)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def has_next(self) -> bool:
        if self._state.total is None:
            return True
        return self._state.loaded_offset_end < self._state.total

    @property
    def has_previous(self) -> bool:
        return self._state.loaded_offset_start > 0

    @property
    def refetch_pending(self) -> bool:
        """True between a local deletion and the reconciling refetch."""
        return self._refetch_pending

    @property
    def is_loading(self) -> bool:
        return self._forward_task is not None or self._backward_task is not None

    @property
    def deleted_ids(self) -> frozenset[int]:
        return frozenset(self._deleted_ids)

    @property
    def items(self) -> list[Asset]:
        """Loaded assets in server order, without locally deleted ones."""
        return [a for a in self._working_set if a.id not in self._deleted_ids]

    def find(self, asset_id: int) -> Asset | None:
        if asset_id in self._deleted_ids:
            return None
        return self._working_set.get(asset_id)

    # Loading
    async def _fetch(self, offset: int, limit: int) -> PageResponse:
        return await self._source.fetch_page(
            offset, limit, self._sort.field, self._sort.order, self._filters
        )

    async def start(self) -> list[Asset]:
        """Load the first page at the initial offset."""
        return await self.reset()

    async def reset(self, initial_offset: int | None = None) -> list[Asset]:
        """Drop everything loaded and refetch the first page.

        The previous working set stays visible until the new page arrives. If
        the fetch fails the error propagates and the previous state is kept.
        """
        if initial_offset is not None:
            self._initial_offset = max(0, int(initial_offset))
        self._generation += 1
        generation = self._generation
        offset = self._initial_offset

        logger.info(
            "Cursor reset (generation {}) at offset {} sort={}/{}",
            generation,
            offset,
            self._sort.field,
            self._sort.order,
        )
        page = await self._fetch(offset, self._page_size)
        if generation != self._generation:
            logger.debug("Discarding superseded reset (generation {})", generation)
            return []

        # Loads still in flight were issued against the old window
        self._window += 1
        self._forward_task = None
        self._backward_task = None
        self._working_set = WorkingSet()
        added = self._working_set.append(page.items)
        self._state = CursorState(offset, offset + len(page.items), page.total)
        self._deleted_ids.clear()
        self._refetch_pending = False
        return added

    def _shared(self, attr: str, factory: Any) -> asyncio.Future[list[Asset]]:
        task = getattr(self, attr)
        if task is None:
            task = asyncio.ensure_future(factory())
            setattr(self, attr, task)

            def _clear(done: asyncio.Future[list[Asset]]) -> None:
                if getattr(self, attr) is done:
                    setattr(self, attr, None)

            task.add_done_callback(_clear)
        return task

    async def load_forward(self) -> list[Asset]:
        """Fetch the page after the loaded window and append it.

        Concurrent calls share one request. Returns the newly added assets.
        """
        if self._refetch_pending:
            logger.debug("Forward load suppressed: refetch pending")
            return []
        if not self.has_next:
            return []
        return await self._shared("_forward_task", self._load_forward_once)

    async def _load_forward_once(self) -> list[Asset]:
        window = self._window
        offset = self._state.loaded_offset_end
        page = await self._fetch(offset, self._page_size)
        if window != self._window:
            logger.debug("Discarding stale forward page at offset {}", offset)
            return []

        added = self._working_set.append(page.items)
        self._state.loaded_offset_end = offset + len(page.items)
        self._state.total = page.total
        if len(added) != len(page.items):
            logger.debug(
                "Forward page at offset {}: {} duplicate(s) skipped",
                offset,
                len(page.items) - len(added),
            )
        return added

    async def load_backward(self) -> list[Asset]:
        """Fetch the page before the loaded window and prepend it.

        A no-op returning an empty list when the window already starts at 0.
        """
        if self._refetch_pending:
            logger.debug("Backward load suppressed: refetch pending")
            return []
        if not self.has_previous:
            return []
        return await self._shared("_backward_task", self._load_backward_once)

    async def _load_backward_once(self) -> list[Asset]:
        window = self._window
        offset = max(0, self._state.loaded_offset_start - self._page_size)
        page = await self._fetch(offset, self._page_size)
        if window != self._window:
            logger.debug("Discarding stale backward page at offset {}", offset)
            return []

        added = self._working_set.prepend(page.items)
        self._state.loaded_offset_start = offset
        self._state.total = page.total
        if len(added) != len(page.items):
            logger.debug(
                "Backward page at offset {}: {} duplicate(s) skipped",
                offset,
                len(page.items) - len(added),
            )
        return added

    # Mutation
    def mark_deleted(self, asset_ids: int | Iterable[int]) -> None:
        """Hide assets immediately; offsets are stale until the next reset."""
        ids = [asset_ids] if isinstance(asset_ids, int) else list(asset_ids)
        if not ids:
            return
        self._deleted_ids.update(ids)
        self._refetch_pending = True
        logger.info("Marked {} asset(s) deleted: {}", len(ids), ids)

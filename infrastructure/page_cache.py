"""Shared page cache in front of an `AssetSource`.

Views with identical query parameters (sort, order, filters, offset, limit)
reuse the same page while it is fresh. Entries are kept in an LRU of fixed
capacity.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable, Mapping
from dataclasses import dataclass
import json
import time
from typing import Any

from loguru import logger

from core.models import Asset, PageResponse
from core.services.interfaces import AssetSource


def _cache_key(
    offset: int, limit: int, sort_field: str, sort_order: str, filters: Mapping[str, Any] | None
) -> str:
    """Stable key for one page request."""
    filt = json.dumps(dict(filters or {}), sort_keys=True, default=str)
    return f"{sort_field}|{sort_order}|{filt}|{int(offset)}|{int(limit)}"


@dataclass
class _PageCacheItem:
    key: str
    page: PageResponse
    stored_at: float


class _LRUCache:
    def __init__(self, capacity: int) -> None:
        self._cap = max(1, int(capacity or 1))
        self._data: OrderedDict[str, _PageCacheItem] = OrderedDict()

    def get(self, key: str) -> _PageCacheItem | None:
        """Return the cached entry for key, moving it to the MRU position."""
        item = self._data.get(key)
        if not item:
            return None
        self._data.move_to_end(key)
        return item

    def put(self, key: str, page: PageResponse, stored_at: float) -> None:
        """Insert or update `key`, evicting LRU entries when over capacity."""
        if key in self._data:
            self._data.move_to_end(key)
        self._data[key] = _PageCacheItem(key, page, stored_at)
        while len(self._data) > self._cap:
            self._data.popitem(last=False)

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


class CachedAssetSource:
    """An `AssetSource` that serves fresh pages from memory."""

    def __init__(
        self,
        source: AssetSource,
        capacity: int = 64,
        stale_after: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._stale_after = float(stale_after)
        self._clock = clock
        self._cache = _LRUCache(capacity)

    async def fetch_page(
        self,
        offset: int,
        limit: int,
        sort_field: str,
        sort_order: str,
        filters: Mapping[str, Any] | None = None,
    ) -> PageResponse:
        key = _cache_key(offset, limit, sort_field, sort_order, filters)
        now = self._clock()
        hit = self._cache.get(key)
        if hit is not None and now - hit.stored_at <= self._stale_after:
            logger.debug("Page cache hit: {}", key)
            return hit.page
        page = await self._source.fetch_page(offset, limit, sort_field, sort_order, filters)
        self._cache.put(key, page, self._clock())
        return page

    async def fetch_by_id(self, asset_id: int) -> Asset | None:
        return await self._source.fetch_by_id(asset_id)

    def invalidate(self) -> None:
        """Forget every cached page."""
        if len(self._cache):
            logger.debug("Page cache cleared ({} entries)", len(self._cache))
        self._cache.clear()

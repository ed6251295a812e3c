"""ViewModel for the single-asset detail view."""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from app.viewmodels.gallery_vm import GalleryVM
from core.models import Asset
from core.services.interfaces import NoContentError
from core.services.navigation_service import NavigationReconciler


class DetailVM:
    """Steps through the same order the gallery shows.

    Navigation runs over the gallery's organized items, or over a filtered
    id list handed over by a folder/person view.
    """

    def __init__(
        self,
        gallery: GalleryVM,
        filtered_ids: Sequence[int] | None = None,
        index: int | None = None,
        reconciler: NavigationReconciler | None = None,
    ) -> None:
        self._gallery = gallery
        self._filtered_ids: list[int] | None = (
            list(filtered_ids) if filtered_ids is not None else None
        )
        self._hinted_index = index
        self._reconciler = reconciler or NavigationReconciler()
        self._current: Asset | None = None

    @property
    def current(self) -> Asset | None:
        return self._current

    @property
    def filtered_ids(self) -> list[int] | None:
        return list(self._filtered_ids) if self._filtered_ids is not None else None

    @property
    def navigation_ids(self) -> list[int]:
        organized = [a.id for a in self._gallery.items]
        return self._reconciler.navigation_ids(organized, self._filtered_ids)

    @property
    def index(self) -> int:
        return self._reconciler.current_index(
            self.navigation_ids,
            self._current.id if self._current else None,
            self._hinted_index,
            self._filtered_ids,
        )

    @property
    def total(self) -> int:
        """Count for the "n of m" display."""
        if self._filtered_ids is not None:
            return len(self._filtered_ids)
        total = self._gallery.cursor.state.total
        return total if total is not None else len(self.navigation_ids)

    async def _resolve(self, asset_id: int) -> Asset | None:
        asset = self._gallery.find(asset_id)
        if asset is not None:
            return asset
        if asset_id in self._gallery.cursor.deleted_ids:
            return None
        logger.debug("Asset {} not loaded; fetching by id", asset_id)
        return await self._gallery.source.fetch_by_id(asset_id)

    async def open(self, asset_id: int) -> Asset:
        """Show `asset_id`, fetching it directly when no page holds it."""
        asset = await self._resolve(asset_id)
        if asset is None:
            raise NoContentError(f"Asset {asset_id} not found")
        self._current = asset
        return asset

    async def _step(self, step: int) -> Asset | None:
        if self._current is None:
            return None
        if self._filtered_ids is not None:
            target = self._reconciler.neighbor(self._filtered_ids, self.index, step)
        else:
            target = self._reconciler.neighbor(self.navigation_ids, self.index, step)
            if target is None and step > 0 and self._gallery.has_next:
                await self._gallery.load_more()
                target = self._reconciler.neighbor(self.navigation_ids, self.index, step)
        if target is None:
            return None
        asset = await self._resolve(target.next_id)
        if asset is None:
            return None
        self._current = asset
        self._hinted_index = target.next_index
        return asset

    async def next(self) -> Asset | None:
        return await self._step(1)

    async def previous(self) -> Asset | None:
        return await self._step(-1)

    async def delete_current(self) -> Asset:
        """Remove the current asset and move to its successor.

        Raises:
            NoContentError: nothing is left to show; the caller should leave
                the detail view.
        """
        if self._current is None:
            raise NoContentError("No asset is open")
        deleted_id = self._current.id
        last_index = self.index
        organized = [a.id for a in self._gallery.items]

        result, updated = self._reconciler.reconcile_after_delete(
            organized, deleted_id, last_index, self._filtered_ids
        )
        self._gallery.assets_removed(deleted_id)
        if updated is not None:
            self._filtered_ids = updated

        if result is None:
            self._current = None
            raise NoContentError("No assets left after deletion")

        asset = await self._resolve(result.next_id)
        if asset is None:
            self._current = None
            raise NoContentError(f"Successor {result.next_id} is unavailable")
        self._current = asset
        self._hinted_index = result.next_index
        logger.info("Deleted {}; now showing {} at {}", deleted_id, asset.id, result.next_index)
        return asset

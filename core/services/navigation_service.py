"""Index bookkeeping for the detail view.

All functions work on plain id sequences so the gallery, search and detail
views can share them as long as they agree on the organized order.
"""

from __future__ import annotations

from collections.abc import Sequence

from core.models import NextIndex


def _clamp(index: int, size: int) -> int:
    return min(max(0, index), size - 1)


class NavigationReconciler:
    """Computes where the detail view lands when its list changes."""

    def resolve_next_index(
        self,
        ordered_ids: Sequence[int],
        deleted_id: int,
        last_known_index: int,
    ) -> NextIndex | None:
        """Return the successor of `deleted_id` in `ordered_ids`, or None.

        The successor is the item that followed the deleted one, or the one
        before it when the deleted item was last. If `deleted_id` is no longer
        present it is treated as already removed and `last_known_index` is
        clamped to the current bounds. None means the list is empty.
        """
        ids = list(ordered_ids)
        if deleted_id in ids:
            pos = ids.index(deleted_id)
            del ids[pos]
            if not ids:
                return None
            next_index = pos if pos < len(ids) else len(ids) - 1
        else:
            if not ids:
                return None
            next_index = _clamp(last_known_index, len(ids))
        return NextIndex(next_id=ids[next_index], next_index=next_index)

    def reconcile_after_delete(
        self,
        organized_ids: Sequence[int],
        deleted_id: int,
        last_known_index: int,
        filtered_ids: Sequence[int] | None = None,
    ) -> tuple[NextIndex | None, list[int] | None]:
        """Resolve the successor against the filtered list when one is given.

        Returns:
            The successor (or None) and the filtered list with `deleted_id`
            removed (None when no filtered list was supplied).
        """
        if filtered_ids is not None:
            result = self.resolve_next_index(filtered_ids, deleted_id, last_known_index)
            return result, [i for i in filtered_ids if i != deleted_id]
        return self.resolve_next_index(organized_ids, deleted_id, last_known_index), None

    def navigation_ids(
        self,
        organized_ids: Sequence[int],
        filtered_ids: Sequence[int] | None = None,
    ) -> list[int]:
        """Ids the detail view steps through.

        With a filtered list, keeps its order but only ids that are loaded.
        """
        if filtered_ids is None:
            return list(organized_ids)
        loaded = set(organized_ids)
        return [i for i in filtered_ids if i in loaded]

    def current_index(
        self,
        navigation_ids: Sequence[int],
        current_id: int | None,
        hinted_index: int | None = None,
        filtered_ids: Sequence[int] | None = None,
    ) -> int:
        """Position of `current_id` for the "n of m" counter."""
        if current_id is None:
            return 0
        if filtered_ids is not None and hinted_index is not None:
            if 0 <= hinted_index < len(filtered_ids):
                return hinted_index
            if current_id in filtered_ids:
                return list(filtered_ids).index(current_id)
        if current_id in navigation_ids:
            return list(navigation_ids).index(current_id)
        if not navigation_ids:
            return 0
        return _clamp(hinted_index or 0, len(navigation_ids))

    def neighbor(self, navigation_ids: Sequence[int], index: int, step: int) -> NextIndex | None:
        """The id `step` positions away from `index`, or None at either end."""
        target = index + step
        if 0 <= target < len(navigation_ids):
            return NextIndex(next_id=navigation_ids[target], next_index=target)
        return None

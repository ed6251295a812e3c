"""Collaborator interfaces consumed by the core services.

The core never talks to HTTP or storage directly. Hosts supply an
`AssetSource` for paged asset data and `PreferenceStore` instances for
remembered UI choices.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from core.models import Asset, PageResponse


class NoContentError(LookupError):
    """Raised when a detail view has nothing left to show."""


class AssetSource(Protocol):
    """Paged access to the server-side asset list."""

    async def fetch_page(
        self,
        offset: int,
        limit: int,
        sort_field: str,
        sort_order: str,
        filters: Mapping[str, Any] | None = None,
    ) -> PageResponse:
        """Return up to `limit` assets starting at `offset`, with the full count.

        Items must already be in the order implied by `sort_field` and
        `sort_order`. Errors propagate to the caller.
        """
        raise NotImplementedError

    async def fetch_by_id(self, asset_id: int) -> Asset | None:
        """Return one asset, or None if it does not exist."""
        raise NotImplementedError


class PreferenceStore(Protocol):
    """Key/value store for remembered UI choices. May raise on any call."""

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for `key`, or `default`."""
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        """Store `value` under `key`."""
        raise NotImplementedError

    def remove(self, key: str) -> None:
        """Forget `key`."""
        raise NotImplementedError

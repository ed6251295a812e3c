"""Preference stores for remembered UI choices.

Two lifetimes are provided: a durable JSON file store and an in-memory
session store. Neither is trusted: `SafePreferences` turns every failure
into the caller's default on read and into a logged warning on write.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from core.models import GROUP_BY_MODES, SORT_FIELDS, SORT_ORDERS, OrganizationToggles, SortSpec
from core.services.interfaces import PreferenceStore

SORT_KEY = "gallery.sort"
ORDER_KEY = "gallery.order"
GROUP_BY_KEY = "gallery.groupBy"
FOLDERS_KEY = "gallery.showFolders"
FOLDER_MONTHS_KEY = "gallery.showFolderMonths"
TYPE_KEY = "gallery.type"
EXT_KEY = "gallery.ext"
PRIORITIZE_FOLDER_STRUCTURE_KEY = "organize.prioritizeFolderStructure"
PRIORITIZE_FILENAME_DATE_KEY = "organize.prioritizeFilenameDate"
EXPANDED_YEARS_KEY = "gallery.expandedYears"


class MemoryPreferenceStore:
    """Session-lifetime store; contents vanish with the process."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFilePreferenceStore:
    """Durable store persisted as one JSON object on disk.

    The file is read lazily and rewritten on every change. I/O and decode
    errors propagate.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(os.path.expandvars(str(path))).expanduser()
        self._data: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._data is None:
            if self._path.exists():
                with self._path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
                self._data = data if isinstance(data, dict) else {}
            else:
                self._data = {}
        return self._data

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(self._data or {}, f, indent=2, sort_keys=True)
        os.replace(tmp, self._path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._load()[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if self._load().pop(key, None) is not None:
            self._flush()


class SafePreferences:
    """Wraps a store so reads always yield a usable value and writes never raise."""

    def __init__(self, store: PreferenceStore | None) -> None:
        self._store = store

    def get(
        self,
        key: str,
        default: Any,
        valid: Callable[[Any], bool] | None = None,
    ) -> Any:
        """Stored value for `key`, or `default` when missing, invalid or unreadable."""
        if self._store is None:
            return default
        try:
            value = self._store.get(key, default)
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.warning("Preference read failed for {}: {}", key, ex)
            return default
        if value is None:
            return default
        if valid is not None and not valid(value):
            logger.debug("Ignoring invalid preference {}={!r}", key, value)
            return default
        return value

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return default

    def get_choice(self, key: str, choices: Iterable[str], default: str) -> str:
        allowed = set(choices)
        return self.get(key, default, valid=lambda v: v in allowed)

    def set(self, key: str, value: Any) -> None:
        """Best-effort write; failures are logged."""
        if self._store is None:
            return
        try:
            self._store.set(key, value)
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.warning("Preference write failed for {}: {}", key, ex)

    def remove(self, key: str) -> None:
        if self._store is None:
            return
        try:
            self._store.remove(key)
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.warning("Preference remove failed for {}: {}", key, ex)


class GalleryPreferences:
    """Typed access to the gallery's remembered settings.

    Sort, order, grouping, filters and organization toggles are durable;
    expanded year folders only live for the session.
    """

    def __init__(
        self,
        durable: PreferenceStore | None = None,
        session: PreferenceStore | None = None,
    ) -> None:
        self._durable = SafePreferences(durable)
        self._session = SafePreferences(session if session is not None else MemoryPreferenceStore())

    @property
    def sort_spec(self) -> SortSpec:
        field = self._durable.get_choice(SORT_KEY, SORT_FIELDS, "none")
        order = self._durable.get_choice(ORDER_KEY, SORT_ORDERS, "desc")
        return SortSpec(field, order)  # type: ignore[arg-type]

    @sort_spec.setter
    def sort_spec(self, spec: SortSpec) -> None:
        self._durable.set(SORT_KEY, spec.field)
        self._durable.set(ORDER_KEY, spec.order)

    @property
    def group_by(self) -> str:
        return self._durable.get_choice(GROUP_BY_KEY, GROUP_BY_MODES, "years")

    @group_by.setter
    def group_by(self, value: str) -> None:
        self._durable.set(GROUP_BY_KEY, value)

    @property
    def toggles(self) -> OrganizationToggles:
        return OrganizationToggles(
            prioritize_folder_structure=self._durable.get_bool(PRIORITIZE_FOLDER_STRUCTURE_KEY),
            prioritize_filename_date=self._durable.get_bool(PRIORITIZE_FILENAME_DATE_KEY),
        )

    @toggles.setter
    def toggles(self, value: OrganizationToggles) -> None:
        self._durable.set(PRIORITIZE_FOLDER_STRUCTURE_KEY, value.prioritize_folder_structure)
        self._durable.set(PRIORITIZE_FILENAME_DATE_KEY, value.prioritize_filename_date)

    @property
    def show_folders(self) -> bool:
        return self._durable.get_bool(FOLDERS_KEY)

    @show_folders.setter
    def show_folders(self, value: bool) -> None:
        self._durable.set(FOLDERS_KEY, bool(value))

    @property
    def show_folder_months(self) -> bool:
        return self._durable.get_bool(FOLDER_MONTHS_KEY)

    @show_folder_months.setter
    def show_folder_months(self, value: bool) -> None:
        if value:
            self._durable.set(FOLDER_MONTHS_KEY, True)
        else:
            self._durable.remove(FOLDER_MONTHS_KEY)

    @property
    def type_filter(self) -> str | None:
        return self._durable.get(TYPE_KEY, None, valid=lambda v: isinstance(v, str) and bool(v))

    @type_filter.setter
    def type_filter(self, value: str | None) -> None:
        if value:
            self._durable.set(TYPE_KEY, value)
        else:
            self._durable.remove(TYPE_KEY)

    @property
    def ext_filter(self) -> str | None:
        return self._durable.get(EXT_KEY, None, valid=lambda v: isinstance(v, str) and bool(v))

    @ext_filter.setter
    def ext_filter(self, value: str | None) -> None:
        if value:
            self._durable.set(EXT_KEY, value)
        else:
            self._durable.remove(EXT_KEY)

    @property
    def expanded_years(self) -> set[str]:
        raw = self._session.get(EXPANDED_YEARS_KEY, [], valid=lambda v: isinstance(v, list))
        return {str(v) for v in raw}

    @expanded_years.setter
    def expanded_years(self, years: Iterable[str]) -> None:
        values = sorted(set(years))
        if values:
            self._session.set(EXPANDED_YEARS_KEY, values)
        else:
            self._session.remove(EXPANDED_YEARS_KEY)

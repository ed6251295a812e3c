from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
import sys

from loguru import logger

from app.viewmodels.gallery_vm import GalleryVM
from app.viewmodels.group_vm import build_group_vms
from core.models import GROUP_BY_MODES, SORT_FIELDS, SORT_ORDERS, OrganizationToggles, SortSpec
from infrastructure.csv_repository import CsvAssetSource
from infrastructure.logging import init_logging
from infrastructure.page_cache import CachedAssetSource
from infrastructure.preferences import GalleryPreferences, JsonFilePreferenceStore
from infrastructure.settings import JsonSettings

BASE_DIR = Path(__file__).parent


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Print an organized, grouped asset listing from CSV.")
    ap.add_argument("csv", help="CSV export with id,path,filename,ext,size_bytes,mtime_ns,taken_at")
    ap.add_argument("--settings", default=str(BASE_DIR / "settings.json"))
    ap.add_argument("--sort", choices=SORT_FIELDS)
    ap.add_argument("--order", choices=SORT_ORDERS)
    ap.add_argument("--group-by", choices=GROUP_BY_MODES)
    ap.add_argument("--folders", action="store_true", help="split year groups into months")
    ap.add_argument("--prefer-folders", action="store_true")
    ap.add_argument("--prefer-filename", action="store_true")
    ap.add_argument("--ext", help="comma-separated extension filter")
    return ap.parse_args(argv)


def _load_settings(path: str) -> JsonSettings:
    try:
        return JsonSettings(path)
    except FileNotFoundError:
        return JsonSettings()


async def _run(args: argparse.Namespace, settings: JsonSettings) -> int:
    source = CachedAssetSource(
        CsvAssetSource.from_csv(args.csv),
        capacity=settings.get_int("cache.capacity", 64),
        stale_after=settings.get_float("cache.stale_seconds", 5.0),
    )
    pref_path = settings.get("preferences.path")
    prefs = GalleryPreferences(JsonFilePreferenceStore(pref_path) if pref_path else None)
    vm = GalleryVM(
        source,
        preferences=prefs,
        page_size=settings.get_int("pagination.page_size", 200),
        initial_offset=settings.get_int("pagination.initial_offset", 0),
        stats_debounce=settings.get_float("refresh.stats_debounce_seconds", 1.0),
        delete_refetch_delay=settings.get_float("refresh.delete_refetch_seconds", 0.5),
    )

    if args.prefer_folders or args.prefer_filename:
        await vm.set_toggles(OrganizationToggles(args.prefer_folders, args.prefer_filename))
    if args.sort or args.order:
        await vm.set_sort(SortSpec(args.sort or vm.sort.field, args.order or vm.sort.order))
    if args.group_by:
        vm.set_group_by(args.group_by)
    if args.folders:
        vm.set_show_folders(True)
        vm.set_show_folder_months(True)
    if args.ext:
        vm.set_type_filter(None, args.ext)

    await vm.start()
    while vm.has_next:
        if not await vm.load_more():
            break

    if vm.group_by == "none":
        for asset in vm.items:
            print(f"{asset.id}\t{asset.path}")
        return 0

    for group in build_group_vms(vm.groups):
        print(f"== {group.label} ({group.count_label})")
        if group.children:
            for child in group.children:
                print(f"  -- {child.label} ({child.count_label})")
                for item in child.items:
                    print(f"    {item.asset.id}\t{item.asset.path}")
        else:
            for item in group.items:
                print(f"  {item.asset.id}\t{item.asset.path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = _load_settings(args.settings)
    init_logging(settings.get("logging.dir"), level=settings.get("logging.level", "INFO"))
    try:
        return asyncio.run(_run(args, settings))
    except (OSError, ValueError) as ex:
        logger.error("Listing failed: {}", ex)
        print(f"error: {ex}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

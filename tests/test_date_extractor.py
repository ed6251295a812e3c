from __future__ import annotations

from datetime import datetime, timezone

import pytest

from core.models import DateParts, OrganizationToggles
from core.services import date_extractor
from core.services.date_extractor import (
    MAX_TIMESTAMP_MS,
    DateExtractor,
    extract_from_filename,
    extract_from_path,
    timestamp_to_parts,
)
from tests.factories import epoch, make_asset

BOTH = OrganizationToggles(prioritize_folder_structure=True, prioritize_filename_date=True)
FOLDER = OrganizationToggles(prioritize_folder_structure=True)
FILENAME = OrganizationToggles(prioritize_filename_date=True)
NONE = OrganizationToggles()


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("2025-01-15_photo.jpg", DateParts(2025, 1)),
        ("IMG_2025-1-5_123456.jpg", DateParts(2025, 1)),
        ("20250115_photo.jpg", DateParts(2025, 1)),
        ("2025_01_15.png", DateParts(2025, 1)),
        ("album 2025-07.jpg", DateParts(2025, 7)),
        ("scan_202411.tif", DateParts(2024, 11)),
        ("15-01-2025_photo.jpg", DateParts(2025, 1)),
        ("01-15-2025.jpg", DateParts(2025, 1)),
        ("13-03-2025.jpg", DateParts(2025, 3)),
    ],
)
def test_filename_patterns(filename, expected):
    assert extract_from_filename(filename) == expected


def test_ambiguous_day_month_reads_day_first():
    # 03-04-2025 is read as 3 April, not 4 March
    assert extract_from_filename("03-04-2025.jpg") == DateParts(2025, 4)


def test_first_number_above_twelve_is_always_a_day():
    assert extract_from_filename("45-03-2025.jpg") == DateParts(2025, 3)
    assert extract_from_filename("99-12-2024_scan.png") == DateParts(2024, 12)


@pytest.mark.parametrize(
    "filename",
    ["IMG_1234.jpg", "1850-05-01.jpg", "2025-13-01.jpg", "holiday.png", ""],
)
def test_filename_without_usable_date(filename):
    assert extract_from_filename(filename) is None


def test_year_month_pattern_not_followed_by_digit_or_dash():
    # "2025-07-" must not be read through the year-month pattern
    assert extract_from_filename("2025-07-xx.jpg") is None


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/archive/2024/12/x.jpg", DateParts(2024, 12)),
        ("/photos/2023/March/img.jpg", DateParts(2023, 3)),
        ("/photos/2023/mar/img.jpg", DateParts(2023, 3)),
        ("/photos/2024/Sept/img.jpg", DateParts(2024, 9)),
        ("C:\\Pictures\\2022\\07\\a.jpg", DateParts(2022, 7)),
        ("/photos/2022/7/a.jpg", DateParts(2022, 7)),
        ("/photos/2021/events/a.jpg", DateParts(2021, 1)),
    ],
)
def test_folder_patterns(path, expected):
    assert extract_from_path(path) == expected


@pytest.mark.parametrize(
    "path",
    ["/photos/2021.jpg", "/1850/05/a.jpg", "/photos/misc/a.jpg", "/a/2024", "", "a.jpg"],
)
def test_folder_without_usable_date(path):
    assert extract_from_path(path) is None


def test_scenario_filename_wins_over_folder():
    asset = make_asset(1, "2025-03-14_trip.jpg", "/archive/2024/12/x.jpg")
    assert DateExtractor().infer_date(asset, BOTH) == DateParts(2025, 3)


def test_scenario_folder_when_filename_not_prioritized():
    asset = make_asset(1, "2025-03-14_trip.jpg", "/archive/2024/12/x.jpg")
    assert DateExtractor().infer_date(asset, FOLDER) == DateParts(2024, 12)


def test_scenario_metadata_fallback_from_taken_at():
    asset = make_asset(1, "IMG_0001.jpg", "/misc/IMG_0001.jpg", taken_at=1_700_000_000)
    extractor = DateExtractor()
    assert extractor.infer_date(asset, NONE) == DateParts(2023, 11)
    assert extractor.sortable_timestamp(asset, NONE) == 1_700_000_000_000


def test_metadata_used_when_toggled_sources_fail():
    asset = make_asset(1, "IMG_0001.jpg", "/misc/IMG_0001.jpg", taken_at=epoch(2019, 5))
    assert DateExtractor().infer_date(asset, BOTH) == DateParts(2019, 5)


def test_metadata_preference_follows_sort_field():
    asset = make_asset(1, taken_at=epoch(2020, 2), mtime_ns=epoch(2021, 8) * 1_000_000_000)
    extractor = DateExtractor()
    assert extractor.infer_date(asset, NONE, prefer="taken_at") == DateParts(2020, 2)
    assert extractor.infer_date(asset, NONE, prefer="mtime") == DateParts(2021, 8)
    assert extractor.sortable_timestamp(asset, NONE, "mtime") == epoch(2021, 8) * 1000
    assert extractor.sortable_timestamp(asset, NONE, "taken_at") == epoch(2020, 2) * 1000
    assert extractor.sortable_timestamp(asset, NONE, "none") == epoch(2020, 2) * 1000


def test_out_of_range_metadata_is_skipped():
    asset = make_asset(1, taken_at=5_000_000_000, mtime_ns=epoch(2018, 4) * 1_000_000_000)
    extractor = DateExtractor()
    assert extractor.infer_date(asset, NONE) == DateParts(2018, 4)
    assert extractor.sortable_timestamp(asset, NONE) == epoch(2018, 4) * 1000


def test_no_date_anywhere_returns_nulls():
    asset = make_asset(1, "IMG_0001.jpg", "/misc/IMG_0001.jpg")
    extractor = DateExtractor()
    assert extractor.infer_date(asset, BOTH) == DateParts(None, None)
    assert extractor.sortable_timestamp(asset, BOTH) is None


def test_toggled_dates_anchor_to_month_start():
    asset = make_asset(1, "2025-03-14_trip.jpg", "/archive/2024/12/x.jpg", taken_at=epoch(2010, 1))
    expected = int(datetime(2025, 3, 1, tzinfo=timezone.utc).timestamp() * 1000)
    assert DateExtractor().sortable_timestamp(asset, BOTH) == expected


def test_month_is_clamped(monkeypatch):
    monkeypatch.setattr(date_extractor, "extract_from_filename", lambda _name: DateParts(2024, 14))
    asset = make_asset(1)
    assert DateExtractor().infer_date(asset, FILENAME) == DateParts(2024, 12)


def test_partial_source_is_merged_not_overridden(monkeypatch):
    partial = DateParts(2001, None)
    monkeypatch.setattr(date_extractor, "extract_from_filename", lambda _name: partial)
    asset = make_asset(1, taken_at=epoch(2015, 6))
    assert DateExtractor().infer_date(asset, FILENAME) == DateParts(2001, 6)


def test_timestamp_bounds():
    assert timestamp_to_parts(0) == DateParts(1970, 1)
    assert timestamp_to_parts(MAX_TIMESTAMP_MS) == DateParts(2100, 1)
    assert timestamp_to_parts(MAX_TIMESTAMP_MS + 1) is None
    assert timestamp_to_parts(-1) is None

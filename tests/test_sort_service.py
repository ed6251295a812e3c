from __future__ import annotations

import random

import pytest

from core.models import OrganizationToggles, SortSpec
from core.services.sort_service import AssetOrganizer
from tests.factories import dated_asset, epoch, make_asset

NONE = OrganizationToggles()
FOLDER = OrganizationToggles(prioritize_folder_structure=True)


def ids(assets):
    return [a.id for a in assets]


@pytest.fixture
def organizer():
    return AssetOrganizer()


def test_empty_input(organizer):
    assert organizer.organize([], NONE, SortSpec("mtime", "asc")) == []


def test_none_without_toggles_is_identity(organizer):
    assets = [dated_asset(3, 2020, 1), dated_asset(1, 2024, 1), make_asset(2)]
    result = organizer.organize(assets, NONE, SortSpec("none", "asc"))
    assert ids(result) == [3, 1, 2]
    assert result is not assets


def test_filename_sort_is_case_insensitive_and_stable(organizer):
    assets = [
        make_asset(1, "beach.jpg"),
        make_asset(2, "Apple.jpg"),
        make_asset(3, "apple.JPG"),
        make_asset(4, "APPLE.jpg"),
    ]
    asc = organizer.organize(assets, NONE, SortSpec("filename", "asc"))
    assert ids(asc) == [2, 3, 4, 1]


def test_descending_keeps_tie_order(organizer):
    assets = [make_asset(1, "b.jpg"), make_asset(2, "A.jpg"), make_asset(3, "a.jpg")]
    desc = organizer.organize(assets, NONE, SortSpec("filename", "desc"))
    # Ties stay in input order rather than being reversed
    assert ids(desc) == [1, 2, 3]


def test_scenario_case_only_difference_keeps_input_order(organizer):
    assets = [make_asset(7, "Trip.jpg"), make_asset(5, "trip.jpg")]
    assert ids(organizer.organize(assets, NONE, SortSpec("filename", "asc"))) == [7, 5]


def test_size_sort(organizer):
    assets = [
        make_asset(1, size_bytes=300),
        make_asset(2, size_bytes=100),
        make_asset(3, size_bytes=300),
        make_asset(4, size_bytes=200),
    ]
    assert ids(organizer.organize(assets, NONE, SortSpec("size_bytes", "asc"))) == [2, 4, 1, 3]
    assert ids(organizer.organize(assets, NONE, SortSpec("size_bytes", "desc"))) == [1, 3, 4, 2]


def test_non_date_fields_ignore_toggles(organizer):
    assets = [
        make_asset(1, "b.jpg", "/2001/01/b.jpg"),
        make_asset(2, "a.jpg", "/2020/01/a.jpg"),
    ]
    assert ids(organizer.organize(assets, FOLDER, SortSpec("filename", "asc"))) == [2, 1]


def test_date_sort_by_taken_at(organizer):
    assets = [dated_asset(1, 2021, 5), dated_asset(2, 2019, 1), dated_asset(3, 2023, 7)]
    assert ids(organizer.organize(assets, NONE, SortSpec("taken_at", "desc"))) == [3, 1, 2]
    assert ids(organizer.organize(assets, NONE, SortSpec("taken_at", "asc"))) == [2, 1, 3]


def test_mtime_sort_prefers_mtime(organizer):
    a = make_asset(1, taken_at=epoch(2010, 1), mtime_ns=epoch(2022, 1) * 1_000_000_000)
    b = make_asset(2, taken_at=epoch(2015, 1), mtime_ns=epoch(2020, 1) * 1_000_000_000)
    assert ids(organizer.organize([a, b], NONE, SortSpec("mtime", "desc"))) == [1, 2]
    assert ids(organizer.organize([a, b], NONE, SortSpec("taken_at", "desc"))) == [2, 1]


def test_undated_assets_sink_in_both_orders(organizer):
    assets = [
        make_asset(1),
        dated_asset(2, 2020, 1),
        make_asset(3),
        dated_asset(4, 2022, 1),
    ]
    assert ids(organizer.organize(assets, NONE, SortSpec("taken_at", "asc"))) == [2, 4, 1, 3]
    assert ids(organizer.organize(assets, NONE, SortSpec("taken_at", "desc"))) == [4, 2, 1, 3]


def test_folder_dates_tie_within_month_keep_input_order(organizer):
    assets = [
        make_asset(1, "x.jpg", "/2024/03/x.jpg", taken_at=epoch(2024, 3, 20)),
        make_asset(2, "y.jpg", "/2024/03/y.jpg", taken_at=epoch(2024, 3, 2)),
        make_asset(3, "z.jpg", "/2023/11/z.jpg"),
    ]
    assert ids(organizer.organize(assets, FOLDER, SortSpec("none", "desc"))) == [1, 2, 3]
    assert ids(organizer.organize(assets, FOLDER, SortSpec("none", "asc"))) == [3, 1, 2]


def test_organize_is_deterministic_and_pure(organizer):
    rng = random.Random(7)
    assets = [
        make_asset(
            i,
            f"IMG_{rng.randint(0, 3)}.jpg",
            f"/{rng.choice(['2020', '2021', 'misc'])}/{rng.choice(['01', '06', 'x'])}/f.jpg",
            taken_at=rng.choice([None, epoch(2019, rng.randint(1, 12))]),
            size_bytes=rng.randint(0, 5),
        )
        for i in range(60)
    ]
    snapshot = list(assets)
    for toggles in (NONE, FOLDER, OrganizationToggles(True, True)):
        for field in ("none", "mtime", "taken_at", "filename", "size_bytes"):
            for order in ("asc", "desc"):
                spec = SortSpec(field, order)
                first = organizer.organize(assets, toggles, spec)
                second = organizer.organize(assets, toggles, spec)
                assert ids(first) == ids(second)
                assert sorted(ids(first)) == sorted(ids(assets))
    assert assets == snapshot


def test_invalid_sort_spec_rejected():
    with pytest.raises(ValueError):
        SortSpec("rating", "asc")
    with pytest.raises(ValueError):
        SortSpec("mtime", "up")

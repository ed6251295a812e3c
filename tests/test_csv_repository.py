from __future__ import annotations

import pytest

from infrastructure.csv_repository import CsvAssetSource
from tests.factories import make_asset


@pytest.fixture
def source():
    return CsvAssetSource(
        [
            make_asset(1, "b.jpg", "/pics/2020/b.jpg", taken_at=300, size_bytes=10),
            make_asset(2, "A.png", "/pics/2021/A.png", taken_at=None, size_bytes=30),
            make_asset(3, "c.JPG", "/other/c.JPG", taken_at=100, size_bytes=20),
        ]
    )


async def test_none_sort_orders_by_id(source):
    page = await source.fetch_page(0, 10, "none", "desc")
    assert [a.id for a in page.items] == [3, 2, 1]
    assert page.total == 3


async def test_nulls_sort_last_in_both_orders(source):
    asc = await source.fetch_page(0, 10, "taken_at", "asc")
    desc = await source.fetch_page(0, 10, "taken_at", "desc")
    assert [a.id for a in asc.items] == [3, 1, 2]
    assert [a.id for a in desc.items] == [1, 3, 2]


async def test_filename_sort_ignores_case(source):
    page = await source.fetch_page(0, 10, "filename", "asc")
    assert [a.filename for a in page.items] == ["A.png", "b.jpg", "c.JPG"]


async def test_filters_and_paging(source):
    page = await source.fetch_page(0, 1, "size_bytes", "asc", {"ext": ["jpg"]})
    assert [a.id for a in page.items] == [1]
    assert page.total == 2
    page = await source.fetch_page(0, 10, "none", "asc", {"q": "PICS"})
    assert [a.id for a in page.items] == [1, 2]


async def test_remove_and_fetch_by_id(source):
    source.remove([2])
    assert source.count == 2
    assert await source.fetch_by_id(2) is None
    assert (await source.fetch_by_id(3)).filename == "c.JPG"


def test_csv_round_trip_and_bad_rows(tmp_path):
    path = tmp_path / "assets.csv"
    CsvAssetSource.save(path, [make_asset(1, "a.jpg", "/x/a.jpg", taken_at=5, mtime_ns=7)])
    with path.open("a", encoding="utf-8") as f:
        f.write(",/x/broken.jpg,broken.jpg,jpg,1,1,\n")

    loaded = list(CsvAssetSource.load(path))
    assert len(loaded) == 1
    asset = loaded[0]
    assert (asset.id, asset.taken_at, asset.mtime_ns, asset.dirname) == (1, 5, 7, "/x")


def test_missing_headers_rejected(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("name,size\na,1\n", encoding="utf-8")
    with pytest.raises(ValueError):
        list(CsvAssetSource.load(path))

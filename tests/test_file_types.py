from __future__ import annotations

from core.file_types import (
    RAW_EXTENSIONS,
    active_extensions,
    filter_by_extension,
    parse_extension_list,
)
from tests.factories import make_asset


def test_parse_extension_list():
    assert parse_extension_list("jpg, .PNG ,, .") == ["jpg", "png"]
    assert parse_extension_list(["HEIC", " tif"]) == ["heic", "tif"]
    assert parse_extension_list(None) == []


def test_preset_wins_over_custom():
    assert active_extensions("Image/JPEG", "png") == ["jpg", "jpeg"]
    assert active_extensions("image/raw", None) == list(RAW_EXTENSIONS)
    assert active_extensions("unknown/type", "png") == ["png"]
    assert active_extensions(None, None) == []


def test_filter_by_extension():
    assets = [make_asset(1, "a.JPG"), make_asset(2, "b.png"), make_asset(3, "c")]
    assert [a.id for a in filter_by_extension(assets, ["jpg"])] == [1]
    assert [a.id for a in filter_by_extension(assets, [])] == [1, 2, 3]

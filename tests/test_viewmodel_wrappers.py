from __future__ import annotations

from app.viewmodels.asset_vm import AssetVM
from app.viewmodels.group_vm import build_group_vms
from core.models import Asset, GroupBucket
from tests.factories import epoch, make_asset


def test_asset_from_dict_ignores_unknown_keys():
    asset = Asset.from_dict(
        {"id": 3, "path": "/a/b.mp4", "filename": "b.mp4", "ext": "mp4", "rating": 5}
    )
    assert asset.id == 3
    assert asset.taken_at is None


def test_asset_vm_properties():
    vm = AssetVM(make_asset(1, "clip.MOV", "C:\\videos\\clip.MOV", taken_at=epoch(2024, 2, 3)))
    assert vm.file_name == "clip.MOV"
    assert vm.folder_path == "C:/videos"
    assert vm.display_date == "2024-02-03"
    assert vm.is_video

    plain = AssetVM(make_asset(2, "a.jpg", "a.jpg"))
    assert plain.folder_path == ""
    assert plain.display_date == ""
    assert not plain.is_video
    assert plain.size_bytes == 0


def test_group_vms_labels_counts_and_expansion():
    buckets = [
        GroupBucket(
            "2024",
            [make_asset(1), make_asset(2)],
            children=[
                GroupBucket("2024-02", [make_asset(1)]),
                GroupBucket("2024-01", [make_asset(2)]),
            ],
        ),
        GroupBucket("2023", [make_asset(3)]),
    ]
    vms = build_group_vms(buckets, expanded={"2024"})
    assert [g.label for g in vms] == ["2024", "2023"]
    assert [g.count_label for g in vms] == ["2 photos", "1 photo"]
    assert vms[0].is_expanded and not vms[1].is_expanded
    assert [c.label for c in vms[0].children] == ["February 2024", "January 2024"]
    assert vms[1].children == []

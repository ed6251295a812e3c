from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from app.viewmodels.asset_vm import AssetVM
from core.models import GroupBucket
from core.services.grouping_service import format_group_label


@dataclass
class GroupVM:
    key: str
    label: str
    items: List[AssetVM] = field(default_factory=list)
    children: List[GroupVM] = field(default_factory=list)
    is_expanded: bool = False

    @property
    def count_label(self) -> str:
        n = len(self.items)
        return f"{n} {'photo' if n == 1 else 'photos'}"


def build_group_vms(buckets: List[GroupBucket], expanded: set[str] | None = None) -> List[GroupVM]:
    expanded = expanded or set()
    return [
        GroupVM(
            key=b.key,
            label=format_group_label(b.key),
            items=[AssetVM(a) for a in b.items],
            children=build_group_vms(b.children or [], expanded),
            is_expanded=b.key in expanded,
        )
        for b in buckets
    ]

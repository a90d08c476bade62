"""Region component tracking backed by a disjoint-set union structure."""

from __future__ import annotations

from typing import Dict, Iterable


class DisjointSetUnion:
    """Disjoint set union with path compression and canonical minimum roots."""

    def __init__(self, items: Iterable[int] = ()) -> None:
        self._parent: Dict[int, int] = {}
        for item in items:
            self._ensure(item)

    def _ensure(self, item: int) -> None:
        if item not in self._parent:
            self._parent[item] = item

    def find(self, item: int) -> int:
        self._ensure(item)
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        # Second pass compresses the path without recursion.
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, a: int, b: int) -> int:
        root_a = self.find(a)
        root_b = self.find(b)
        if root_a == root_b:
            return root_a
        # Always keep the smaller id as the canonical representative to retain determinism.
        if root_a < root_b:
            self._parent[root_b] = root_a
            return root_a
        self._parent[root_a] = root_b
        return root_b

    def connected(self, a: int, b: int) -> bool:
        return self.find(a) == self.find(b)

    def all_connected(self, items: Iterable[int]) -> bool:
        return len({self.find(item) for item in items}) <= 1

    def __contains__(self, item: object) -> bool:
        return item in self._parent


class ComponentManager:
    """Tracks which regions have been joined by selected tunnels."""

    def __init__(self, region_count: int) -> None:
        self._dsu = DisjointSetUnion(range(region_count))
        self._region_count = region_count

    def find(self, region: int) -> int:
        self._check(region)
        return self._dsu.find(region)

    def union(self, *regions: int) -> int:
        if not regions:
            raise ValueError("Cannot merge empty component set")
        root = self.find(regions[0])
        for region in regions[1:]:
            root = self._dsu.union(root, self.find(region))
        return self._dsu.find(root)

    def connected(self, region_a: int, region_b: int) -> bool:
        return self.find(region_a) == self.find(region_b)

    def all_connected(self, regions: Iterable[int]) -> bool:
        roots = {self.find(region) for region in regions}
        return len(roots) <= 1

    def _check(self, region: int) -> None:
        if not (0 <= region < self._region_count):
            raise IndexError(f"Region index {region} out of range")

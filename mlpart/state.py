"""Shared refinement state: a max-priority queue and the partitioning control block."""

from __future__ import annotations

import random
from dataclasses import dataclass, field


class PriorityQueue:
    """Addressable binary max-heap of integer items keyed by floats."""

    def __init__(self) -> None:
        self._heap: list[tuple[float, int]] = []
        self._pos: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._heap)

    def __contains__(self, item: object) -> bool:
        return item in self._pos

    def reset(self) -> None:
        """Remove every item."""
        self._heap.clear()
        self._pos.clear()

    def insert(self, item: int, key: float) -> None:
        """Add ``item`` with priority ``key``."""
        if item in self._pos:
            raise ValueError(f"item {item} is already queued")
        self._heap.append((key, item))
        self._sift_up(len(self._heap) - 1)

    def update(self, item: int, key: float) -> None:
        """Change the priority of a queued item."""
        i = self._pos[item]
        old_key = self._heap[i][0]
        self._heap[i] = (key, item)
        if key > old_key:
            self._sift_up(i)
        else:
            self._sift_down(i)

    def delete(self, item: int) -> None:
        """Remove a queued item."""
        i = self._pos.pop(item)
        old_key = self._heap[i][0]
        last = self._heap.pop()
        if i < len(self._heap):
            self._heap[i] = last
            self._pos[last[1]] = i
            if last[0] > old_key:
                self._sift_up(i)
            else:
                self._sift_down(i)

    def get_top(self) -> tuple[int, float] | None:
        """Remove and return ``(item, key)`` with the largest key, or None if empty."""
        if not self._heap:
            return None
        key, item = self._heap[0]
        del self._pos[item]
        last = self._heap.pop()
        if self._heap:
            self._heap[0] = last
            self._pos[last[1]] = 0
            self._sift_down(0)
        return item, key

    def _sift_up(self, i: int) -> None:
        heap = self._heap
        entry = heap[i]
        key = entry[0]
        while i > 0:
            parent = (i - 1) // 2
            if heap[parent][0] < key:
                heap[i] = heap[parent]
                self._pos[heap[i][1]] = i
                i = parent
            else:
                break
        heap[i] = entry
        self._pos[entry[1]] = i

    def _sift_down(self, i: int) -> None:
        heap = self._heap
        size = len(heap)
        entry = heap[i]
        key = entry[0]
        while (child := 2 * i + 1) < size:
            if child + 1 < size and heap[child + 1][0] > heap[child][0]:
                child += 1
            if heap[child][0] > key:
                heap[i] = heap[child]
                self._pos[heap[i][1]] = i
                i = child
            else:
                break
        heap[i] = entry
        self._pos[entry[1]] = i


@dataclass
class NeighborInfo:
    """External degree of a vertex towards one neighbouring part."""

    part_id: int = -1
    external_degree: int = 0


@dataclass
class Control:
    """Parameters, random source and neighbour pool shared by the refiners."""

    num_parts: int = 2
    num_constraints: int = 1
    imbalance_tols: list[float] = field(default_factory=list)
    target_part_weights: list[float] = field(default_factory=list)
    partition_ij_balance_multipliers: list[float] = field(default_factory=list)
    num_iter: int = 10
    init_part_type: int = 0
    seed: int = 0
    neighbor_pool: list[NeighborInfo] = field(default_factory=list, repr=False)
    rng: random.Random = field(init=False, repr=False)
    _pool_next: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.num_parts < 1:
            raise ValueError("num_parts must be at least 1")
        if self.num_constraints < 1:
            raise ValueError("num_constraints must be at least 1")
        ncon = self.num_constraints
        if not self.imbalance_tols:
            self.imbalance_tols = [1.03] * ncon
        elif len(self.imbalance_tols) < ncon:
            raise ValueError("imbalance_tols needs one value per constraint")
        if not self.target_part_weights:
            share = 1.0 / self.num_parts
            self.target_part_weights = [share] * (self.num_parts * ncon)
        elif len(self.target_part_weights) != self.num_parts * ncon:
            raise ValueError("target_part_weights needs num_parts * num_constraints values")
        self.rng = random.Random(self.seed)

    def random_permutation(self, n: int) -> list[int]:
        """Return a random ordering of ``range(n)``."""
        if n < 0:
            raise ValueError("permutation length must not be negative")
        perm = list(range(n))
        self.rng.shuffle(perm)
        return perm

    def random_below(self, n: int) -> int:
        """Return a random integer in ``[0, n)``."""
        if n <= 0:
            raise ValueError("upper bound must be positive")
        return self.rng.randrange(n)

    def init_neighbor_pool(self, size: int) -> None:
        """Create a fresh neighbour pool with room for ``size`` entries."""
        self.neighbor_pool = [NeighborInfo() for _ in range(max(size, 0))]
        self._pool_next = 0

    def reset_neighbor_pool(self) -> None:
        """Mark every pool entry as free again."""
        self._pool_next = 0

    def alloc_neighbor_info(self, count: int) -> int:
        """Reserve ``count`` consecutive pool entries and return the first offset."""
        if count < 0:
            raise ValueError("count must not be negative")
        offset = self._pool_next
        self._pool_next += count
        missing = self._pool_next - len(self.neighbor_pool)
        if missing > 0:
            self.neighbor_pool.extend(NeighborInfo() for _ in range(missing))
        return offset
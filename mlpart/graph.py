"""Graph in compressed sparse row form plus its partition working state."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from itertools import pairwise


@dataclass
class KwayCutInfo:
    """Per-vertex k-way refinement record."""

    internal_degree: int = 0
    external_degree: int = 0
    num_neighbors: int = 0
    neighbor_offset: int = -1


@dataclass
class GraphData:
    """Undirected graph (CSR) with vertex/edge weights and refinement state."""

    xadj: list[int]
    adjacency: list[int]
    vertex_weights: list[int]
    edge_weights: list[int]
    num_constraints: int = 1
    total_vertex_weight: list[int] = field(init=False)
    inv_total_vertex_weight: list[float] = field(init=False)
    partition: list[int] = field(default_factory=list)
    part_weights: list[int] = field(default_factory=list)
    boundary_map: list[int] = field(default_factory=list)
    boundary_list: list[int] = field(default_factory=list)
    num_boundary: int = 0
    internal_degree: list[int] = field(default_factory=list)
    external_degree: list[int] = field(default_factory=list)
    edge_cut: int = 0
    kway_refinement_info: list[KwayCutInfo] = field(default_factory=list)
    coarse_map: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.xadj = list(self.xadj)
        self.adjacency = list(self.adjacency)
        self.vertex_weights = list(self.vertex_weights)
        self.edge_weights = list(self.edge_weights)
        ncon = self.num_constraints
        if ncon < 1:
            raise ValueError("num_constraints must be at least 1")
        if not self.xadj or self.xadj[0] != 0:
            raise ValueError("xadj must start with 0")
        if any(b < a for a, b in pairwise(self.xadj)):
            raise ValueError("xadj must be non-decreasing")
        if self.xadj[-1] != len(self.adjacency):
            raise ValueError("xadj must end at the length of adjacency")
        n = self.num_vertices
        if any(not 0 <= u < n for u in self.adjacency):
            raise ValueError("adjacency refers to a vertex out of range")
        if len(self.vertex_weights) != n * ncon:
            raise ValueError("vertex_weights needs num_vertices * num_constraints values")
        if len(self.edge_weights) != len(self.adjacency):
            raise ValueError("edge_weights needs one value per adjacency entry")
        self.total_vertex_weight = [sum(self.vertex_weights[j::ncon]) for j in range(ncon)]
        self.inv_total_vertex_weight = [
            1.0 / (total if total > 0 else 1) for total in self.total_vertex_weight
        ]

    @classmethod
    def from_csr(
        cls,
        xadj: Sequence[int],
        adjacency: Sequence[int],
        vertex_weights: Sequence[int] | None = None,
        edge_weights: Sequence[int] | None = None,
        num_constraints: int = 1,
    ) -> GraphData:
        """Build a graph, giving unit weights where none are supplied."""
        n = max(len(xadj) - 1, 0)
        if vertex_weights is None:
            vertex_weights = [1] * (n * num_constraints)
        if edge_weights is None:
            edge_weights = [1] * len(adjacency)
        return cls(
            list(xadj),
            list(adjacency),
            list(vertex_weights),
            list(edge_weights),
            num_constraints,
        )

    @property
    def num_vertices(self) -> int:
        return len(self.xadj) - 1

    @property
    def num_edges(self) -> int:
        return len(self.adjacency)

    def neighbors(self, v: int) -> Iterator[tuple[int, int]]:
        """Yield ``(neighbour, edge_weight)`` pairs of vertex ``v``."""
        start, end = self.xadj[v], self.xadj[v + 1]
        yield from zip(self.adjacency[start:end], self.edge_weights[start:end])

    def add_to_boundary(self, v: int) -> None:
        """Append ``v`` to the boundary list."""
        self.boundary_list[self.num_boundary] = v
        self.boundary_map[v] = self.num_boundary
        self.num_boundary += 1

    def remove_from_boundary(self, v: int) -> None:
        """Remove ``v`` from the boundary, filling its slot with the last entry."""
        slot = self.boundary_map[v]
        if slot == -1:
            raise KeyError(f"vertex {v} is not on the boundary")
        self.num_boundary -= 1
        last = self.boundary_list[self.num_boundary]
        self.boundary_list[slot] = last
        self.boundary_map[last] = slot
        self.boundary_map[v] = -1

    def alloc_2way(self) -> None:
        """Allocate fresh working arrays for a bisection."""
        n = self.num_vertices
        self.partition = [0] * n
        self.part_weights = [0] * (2 * self.num_constraints)
        self.boundary_map = [-1] * n
        self.boundary_list = [0] * n
        self.num_boundary = 0
        self.internal_degree = [0] * n
        self.external_degree = [0] * n


def compute_2way_partition_params(graph: GraphData) -> None:
    """Recompute part weights, degrees, boundary and edge cut of a bisection."""
    n = graph.num_vertices
    ncon = graph.num_constraints
    if len(graph.partition) != n:
        raise ValueError("partition must assign every vertex")

    graph.part_weights = [0] * (2 * ncon)
    graph.boundary_map = [-1] * n
    graph.boundary_list = [0] * n
    graph.num_boundary = 0
    graph.internal_degree = [0] * n
    graph.external_degree = [0] * n

    for v, part in enumerate(graph.partition):
        for j in range(ncon):
            graph.part_weights[part * ncon + j] += graph.vertex_weights[v * ncon + j]

    cut = 0
    for v, me in enumerate(graph.partition):
        tid = ted = 0
        for u, weight in graph.neighbors(v):
            if graph.partition[u] == me:
                tid += weight
            else:
                ted += weight
        graph.internal_degree[v] = tid
        graph.external_degree[v] = ted
        if ted > 0 or graph.xadj[v] == graph.xadj[v + 1]:
            graph.add_to_boundary(v)
            cut += ted

    graph.edge_cut = cut // 2
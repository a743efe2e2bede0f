import pytest

from mlpart.bisection import grow_bisection, random_bisection
from mlpart.graph import GraphData
from mlpart.state import Control


def path_5v():
    return [0, 1, 3, 5, 7, 8], [1, 0, 2, 1, 3, 2, 4, 3]


def build_grid(rows, cols):
    xadj = [0]
    adjacency = []
    for r in range(rows):
        for c in range(cols):
            v = r * cols + c
            if r > 0:
                adjacency.append(v - cols)
            if c > 0:
                adjacency.append(v - 1)
            if c + 1 < cols:
                adjacency.append(v + 1)
            if r + 1 < rows:
                adjacency.append(v + cols)
            xadj.append(len(adjacency))
    return xadj, adjacency


def is_connected(graph, vertices):
    vertices = set(vertices)
    if not vertices:
        return True
    start = next(iter(vertices))
    seen = {start}
    stack = [start]
    while stack:
        v = stack.pop()
        for u, _ in graph.neighbors(v):
            if u in vertices and u not in seen:
                seen.add(u)
                stack.append(u)
    return seen == vertices


TARGETS = [0.5, 0.5]


@pytest.mark.parametrize("seed", [0, 1, 2, 7])
def test_grow_bisection_on_grid(seed):
    g = GraphData.from_csr(*build_grid(10, 10))
    grow_bisection(Control(seed=seed), g, TARGETS)
    zeros = [v for v, p in enumerate(g.partition) if p == 0]
    assert len(zeros) == 49
    assert set(g.partition) == {0, 1}
    assert is_connected(g, zeros)


def test_grow_bisection_without_edges_splits_pair():
    g = GraphData.from_csr([0, 0, 0], [])
    grow_bisection(Control(seed=3), g, TARGETS)
    assert sorted(g.partition) == [0, 1]


def test_grow_bisection_rejects_multi_constraint():
    xadj, adjacency = path_5v()
    g = GraphData.from_csr(xadj, adjacency, num_constraints=2)
    with pytest.raises(ValueError):
        grow_bisection(Control(num_constraints=2), g, [0.5] * 4)


@pytest.mark.parametrize("seed", [0, 5, 11])
def test_random_bisection_on_grid(seed):
    g = GraphData.from_csr(*build_grid(10, 10))
    random_bisection(Control(seed=seed), g, TARGETS)
    assert g.partition.count(0) == 51
    assert g.partition.count(1) == 49


def test_random_bisection_on_path():
    g = GraphData.from_csr(*path_5v())
    random_bisection(Control(seed=4), g, TARGETS)
    assert g.partition.count(0) == 2


def test_random_bisection_respects_weight_limit():
    xadj, adjacency = path_5v()
    g = GraphData.from_csr(xadj, adjacency, vertex_weights=[3, 1, 1, 1, 4])
    for seed in range(10):
        random_bisection(Control(seed=seed), g, TARGETS)
        weight0 = sum(w for w, p in zip(g.vertex_weights, g.partition) if p == 0)
        assert 0 < weight0 <= 5


def test_random_bisection_single_vertex_stays_in_part_one():
    g = GraphData.from_csr([0, 0], [])
    random_bisection(Control(seed=0), g, TARGETS)
    assert g.partition == [1]


def test_random_bisection_is_reproducible():
    first = GraphData.from_csr(*build_grid(5, 5))
    second = GraphData.from_csr(*build_grid(5, 5))
    random_bisection(Control(seed=9), first, TARGETS)
    random_bisection(Control(seed=9), second, TARGETS)
    assert first.partition == second.partition
    assert first.partition.count(0) == 12
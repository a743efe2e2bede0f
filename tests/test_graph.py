import pytest

from mlpart.graph import GraphData, KwayCutInfo, compute_2way_partition_params


def trivial_2v():
    return [0, 1, 2], [1, 0]


def path_5v():
    return [0, 1, 3, 5, 7, 8], [1, 0, 2, 1, 3, 2, 4, 3]


def irregular_6v():
    return [0, 2, 5, 7, 11, 14, 16], [1, 3, 0, 2, 3, 1, 4, 0, 1, 4, 5, 2, 3, 5, 3, 4]


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


def weighted_grid_graph(rows, cols):
    xadj = [0]
    adjncy = []
    adjwgt = []
    for r in range(rows):
        for c in range(cols):
            v = r * cols + c
            if r > 0:
                adjncy.append(v - cols)
                adjwgt.append(3)
            if c > 0:
                adjncy.append(v - 1)
                adjwgt.append(1)
            if c + 1 < cols:
                adjncy.append(v + 1)
                adjwgt.append(1)
            if r + 1 < rows:
                adjncy.append(v + cols)
                adjwgt.append(3)
            xadj.append(len(adjncy))
    return xadj, adjncy, adjwgt


def bisect(graph, partition):
    graph.alloc_2way()
    graph.partition = list(partition)
    compute_2way_partition_params(graph)
    return graph


def boundary_set(graph):
    return set(graph.boundary_list[: graph.num_boundary])


def test_from_csr_unit_weights():
    graph = GraphData.from_csr(*path_5v())
    assert graph.num_vertices == 5
    assert graph.num_edges == 8
    assert graph.total_vertex_weight == [5]
    assert graph.inv_total_vertex_weight == [pytest.approx(0.2)]
    assert graph.edge_weights == [1] * 8


def test_from_csr_multi_constraint_totals():
    xadj, adj = path_5v()
    graph = GraphData.from_csr(xadj, adj, [1, 2] * 5, None, 2)
    assert graph.total_vertex_weight == [5, 10]


@pytest.mark.parametrize(
    "xadj, adjacency, vwgt, ewgt",
    [
        ([1, 2], [0], None, None),
        ([0, 2, 1], [1, 0], None, None),
        ([0, 1, 3], [1, 0], None, None),
        ([0, 1, 2], [1, 5], None, None),
        ([0, 1, 2], [1, 0], [1], None),
        ([0, 1, 2], [1, 0], None, [1]),
    ],
)
def test_from_csr_rejects_malformed(xadj, adjacency, vwgt, ewgt):
    with pytest.raises(ValueError):
        GraphData.from_csr(xadj, adjacency, vwgt, ewgt)


def test_alloc_2way_sizes():
    graph = GraphData.from_csr(*irregular_6v())
    graph.alloc_2way()
    assert graph.partition == [0] * 6
    assert graph.part_weights == [0, 0]
    assert graph.boundary_map == [-1] * 6
    assert graph.num_boundary == 0


def test_boundary_add_remove_keeps_map_consistent():
    graph = GraphData.from_csr(*path_5v())
    graph.alloc_2way()
    for v in (0, 1, 2):
        graph.add_to_boundary(v)
    graph.remove_from_boundary(0)
    assert graph.num_boundary == 2
    assert boundary_set(graph) == {1, 2}
    assert graph.boundary_map[0] == -1
    for slot, v in enumerate(graph.boundary_list[: graph.num_boundary]):
        assert graph.boundary_map[v] == slot
    with pytest.raises(KeyError):
        graph.remove_from_boundary(0)


def test_trivial_split():
    graph = bisect(GraphData.from_csr(*trivial_2v()), [0, 1])
    assert graph.edge_cut == 1
    assert boundary_set(graph) == {0, 1}
    assert graph.part_weights == [1, 1]


def test_path_split():
    graph = bisect(GraphData.from_csr(*path_5v()), [0, 0, 1, 1, 1])
    assert graph.edge_cut == 1
    assert graph.part_weights == [2, 3]
    assert boundary_set(graph) == {1, 2}
    assert graph.internal_degree == [1, 1, 1, 2, 1]
    assert graph.external_degree == [0, 1, 1, 0, 0]


def test_grid_3x5_column_split():
    partition = [0 if v % 5 < 2 else 1 for v in range(15)]
    graph = bisect(GraphData.from_csr(*build_grid(3, 5)), partition)
    assert graph.edge_cut == 3
    assert graph.part_weights == [6, 9]
    assert boundary_set(graph) == {1, 6, 11, 2, 7, 12}


def test_grid_10x10_half_split():
    partition = [0 if v < 50 else 1 for v in range(100)]
    graph = bisect(GraphData.from_csr(*build_grid(10, 10)), partition)
    assert graph.edge_cut == 10
    assert graph.num_boundary == 20


def test_irregular_split():
    graph = bisect(GraphData.from_csr(*irregular_6v()), [0, 0, 0, 1, 1, 1])
    assert graph.edge_cut == 3
    assert boundary_set(graph) == {0, 1, 2, 3, 4}


def test_isolated_vertex_is_boundary():
    graph = bisect(GraphData.from_csr([0, 0, 1, 2], [2, 1]), [0, 0, 0])
    assert graph.edge_cut == 0
    assert boundary_set(graph) == {0}


def test_multi_constraint_part_weights():
    xadj, adj = path_5v()
    graph = GraphData.from_csr(xadj, adj, [1, 2, 1, 2, 1, 2, 1, 2, 1, 2], None, 2)
    bisect(graph, [0, 1, 0, 1, 1])
    assert graph.part_weights == [2, 4, 3, 6]
    assert graph.edge_cut == 3


@pytest.mark.parametrize("mask", [0b0101010101, 0b1111100000, 0b1000000001, 0b0110011001])
def test_degree_invariants(mask):
    graph = GraphData.from_csr(*build_grid(2, 5))
    partition = [(mask >> v) & 1 for v in range(10)]
    bisect(graph, partition)
    for v in range(10):
        degree = sum(w for _, w in graph.neighbors(v))
        assert graph.internal_degree[v] + graph.external_degree[v] == degree
    assert sum(graph.external_degree) == 2 * graph.edge_cut
    assert boundary_set(graph) == {v for v in range(10) if graph.external_degree[v] > 0}


def test_partition_length_checked():
    graph = GraphData.from_csr(*path_5v())
    graph.partition = [0, 1]
    with pytest.raises(ValueError):
        compute_2way_partition_params(graph)


def test_kway_cut_info_default_has_no_neighbors():
    info = KwayCutInfo()
    assert (info.num_neighbors, info.neighbor_offset) == (0, -1)
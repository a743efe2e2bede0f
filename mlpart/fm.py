"""Fiduccia–Mattheyses refinement of a single-constraint bisection."""

from __future__ import annotations

from collections.abc import Sequence

from .graph import GraphData
from .state import Control, PriorityQueue


def _gain(graph: GraphData, v: int) -> int:
    return graph.external_degree[v] - graph.internal_degree[v]


def _has_edges(graph: GraphData, v: int) -> bool:
    return graph.xadj[v] < graph.xadj[v + 1]


def _swap_degrees(graph: GraphData, v: int) -> None:
    graph.internal_degree[v], graph.external_degree[v] = (
        graph.external_degree[v],
        graph.internal_degree[v],
    )


def fm_2way_cut_refine(
    ctrl: Control,
    graph: GraphData,
    target_part_weights: Sequence[float],
    niter: int,
) -> None:
    """Improve the edge cut of a bisection with FM passes and rollback.

    The graph must already hold its two-way parameters (part weights,
    degrees, boundary and edge cut). Each pass moves boundary vertices from
    the heavier side, remembers the best cut seen and rolls back every move
    made after it.
    """
    n = graph.num_vertices
    if graph.num_boundary <= 0:
        return

    total = graph.total_vertex_weight[0]
    target0 = int(total * target_part_weights[0])
    targets = (target0, total - target0)

    limit = int(min(max(0.01 * n, 15.0), 100.0))
    both = graph.part_weights[0] + graph.part_weights[1]
    avg_vertex_weight = min(both // 20, 2 * both // max(n, 1))
    orig_diff = abs(targets[0] - graph.part_weights[0])

    moved = [-1] * n
    queues = (PriorityQueue(), PriorityQueue())

    for _ in range(niter):
        init_cut = graph.edge_cut
        best_cut = init_cut
        new_cut = init_cut
        best_order = -1
        min_diff = abs(targets[0] - graph.part_weights[0])

        for queue in queues:
            queue.reset()

        for p in ctrl.random_permutation(graph.num_boundary):
            v = graph.boundary_list[p]
            queues[graph.partition[v]].insert(v, float(_gain(graph, v)))

        swaps: list[int] = []

        while True:
            if targets[0] - graph.part_weights[0] < targets[1] - graph.part_weights[1]:
                from_part = 0
            else:
                from_part = 1
            to_part = 1 - from_part

            top = queues[from_part].get_top()
            if top is None:
                break
            v = top[0]
            weight = graph.vertex_weights[v]

            new_cut -= _gain(graph, v)
            graph.part_weights[to_part] += weight
            graph.part_weights[from_part] -= weight

            nswaps = len(swaps)
            new_diff = abs(targets[0] - graph.part_weights[0])
            if (new_cut < best_cut and new_diff <= orig_diff + avg_vertex_weight) or (
                new_cut == best_cut and new_diff < min_diff
            ):
                best_cut = new_cut
                min_diff = new_diff
                best_order = nswaps
            elif nswaps - best_order > limit:
                graph.part_weights[from_part] += weight
                graph.part_weights[to_part] -= weight
                new_cut += _gain(graph, v)
                break

            graph.partition[v] = to_part
            moved[v] = nswaps
            swaps.append(v)
            _swap_degrees(graph, v)

            if (
                graph.external_degree[v] == 0
                and _has_edges(graph, v)
                and graph.boundary_map[v] != -1
            ):
                graph.remove_from_boundary(v)

            start, end = graph.xadj[v], graph.xadj[v + 1]
            for k, edge_weight in zip(graph.adjacency[start:end], graph.edge_weights[start:end]):
                delta = edge_weight if graph.partition[k] == to_part else -edge_weight
                graph.internal_degree[k] += delta
                graph.external_degree[k] -= delta

                queue = queues[graph.partition[k]]
                if graph.boundary_map[k] != -1:
                    if graph.external_degree[k] == 0 and _has_edges(graph, k):
                        graph.remove_from_boundary(k)
                        if moved[k] == -1:
                            queue.delete(k)
                    elif moved[k] == -1:
                        queue.update(k, float(_gain(graph, k)))
                elif graph.external_degree[k] > 0:
                    graph.add_to_boundary(k)
                    if moved[k] == -1:
                        queue.insert(k, float(_gain(graph, k)))

        for v in swaps:
            moved[v] = -1

        rollback_start = 0 if best_order < 0 else best_order + 1
        for v in reversed(swaps[rollback_start:]):
            to_part = graph.partition[v]
            from_part = 1 - to_part
            graph.partition[v] = from_part
            _swap_degrees(graph, v)

            weight = graph.vertex_weights[v]
            graph.part_weights[from_part] += weight
            graph.part_weights[to_part] -= weight

            if graph.external_degree[v] == 0 and _has_edges(graph, v):
                if graph.boundary_map[v] != -1:
                    graph.remove_from_boundary(v)
            elif graph.boundary_map[v] == -1:
                graph.add_to_boundary(v)

            start, end = graph.xadj[v], graph.xadj[v + 1]
            for k, edge_weight in zip(graph.adjacency[start:end], graph.edge_weights[start:end]):
                delta = edge_weight if graph.partition[k] == from_part else -edge_weight
                graph.internal_degree[k] += delta
                graph.external_degree[k] -= delta

                if (
                    graph.boundary_map[k] != -1
                    and graph.external_degree[k] == 0
                    and _has_edges(graph, k)
                ):
                    graph.remove_from_boundary(k)
                elif graph.boundary_map[k] == -1 and graph.external_degree[k] > 0:
                    graph.add_to_boundary(k)

        graph.edge_cut = best_cut

        if best_order <= 0 or best_cut == init_cut:
            break
"""Initial bisections of a single-constraint graph."""

from __future__ import annotations

from collections.abc import Sequence
from itertools import islice

from .graph import GraphData
from .state import Control


def _require_single_constraint(graph: GraphData) -> None:
    if graph.num_constraints != 1:
        raise ValueError("bisection needs a single-constraint graph")


def grow_bisection(ctrl: Control, graph: GraphData, target_part_weights: Sequence[float]) -> None:
    """Grow part 0 breadth-first from a random seed until part 1 is light enough.

    Sets ``graph.partition``; every vertex not reached stays in part 1.
    """
    _require_single_constraint(graph)
    n = graph.num_vertices
    tol = ctrl.imbalance_tols[0]
    total = graph.total_vertex_weight[0]
    share = target_part_weights[1]
    max_target = int(tol * total * share)
    min_target = int((1.0 / tol) * total * share)

    graph.partition = [1] * n
    touched = [False] * n
    part_weights = [0, total]

    start = ctrl.random_below(n)
    queue = [start]
    touched[start] = True
    first = 0
    nleft = n - 1
    drain = False

    while True:
        if first == len(queue):
            if nleft == 0 or drain:
                break
            k = ctrl.random_below(nleft)
            untouched = (v for v in range(n) if not touched[v])
            seed = next(islice(untouched, k, None))
            queue = [seed]
            touched[seed] = True
            first = 0
            nleft -= 1

        v = queue[first]
        first += 1
        weight = graph.vertex_weights[v]

        if part_weights[0] > 0 and part_weights[1] - weight < min_target:
            drain = True
            continue

        graph.partition[v] = 0
        part_weights[0] += weight
        part_weights[1] -= weight

        if part_weights[1] <= max_target:
            break

        drain = False
        for u, _ in graph.neighbors(v):
            if not touched[u]:
                touched[u] = True
                queue.append(u)
                nleft -= 1

    if part_weights[1] == 0:
        graph.partition[ctrl.random_below(n)] = 1
    if part_weights[0] == 0:
        graph.partition[ctrl.random_below(n)] = 0


def random_bisection(
    ctrl: Control, graph: GraphData, target_part_weights: Sequence[float]
) -> None:
    """Put vertices, in random order, into part 0 while it stays under its limit."""
    _require_single_constraint(graph)
    n = graph.num_vertices
    max_zero = int(ctrl.imbalance_tols[0] * graph.total_vertex_weight[0] * target_part_weights[0])

    graph.partition = [1] * n
    weight0 = 0
    for v in ctrl.random_permutation(n):
        weight = graph.vertex_weights[v]
        if weight0 + weight <= max_zero:
            graph.partition[v] = 0
            weight0 += weight
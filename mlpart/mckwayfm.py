"""Greedy k-way boundary refinement of a multi-constraint partition."""

from __future__ import annotations

import math
import struct
from collections.abc import Sequence
from enum import Enum

from .graph import GraphData, KwayCutInfo
from .state import Control, NeighborInfo, PriorityQueue

_REFINE = 1
_BALANCE = 2


class _Status(Enum):
    PRESENT = 1
    EXTRACTED = 2
    NOT_PRESENT = 3


def _single(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def _priority(info: KwayCutInfo) -> float:
    if info.num_neighbors > 0:
        gain = info.external_degree / math.sqrt(info.num_neighbors) - info.internal_degree
    else:
        gain = float(-info.internal_degree)
    return _single(gain)


def _is_boundary(info: KwayCutInfo, mode: int) -> bool:
    if mode == _REFINE:
        return info.external_degree - info.internal_degree >= 0
    return info.external_degree > 0


def _copy_entry(pool: list[NeighborInfo], dst: int, src: int) -> None:
    entry = pool[src]
    pool[dst] = NeighborInfo(entry.part_id, entry.external_degree)


def better_balance_kway(
    vwgt: Sequence[int],
    ubvec: Sequence[float],
    a1: int,
    pt1: Sequence[int],
    bm1: Sequence[float],
    a2: int,
    pt2: Sequence[int],
    bm2: Sequence[float],
) -> bool:
    """Tell whether adding ``a2 * vwgt`` to ``pt2`` balances better than ``a1 * vwgt`` to ``pt1``.

    The worst excess over ``ubvec`` decides; on a tie the sum of squared
    excesses does.
    """
    nrm1 = nrm2 = 0.0
    max1 = max2 = 0.0
    for w, ub, p1, m1, p2, m2 in zip(vwgt, ubvec, pt1, bm1, pt2, bm2):
        tmp1 = m1 * (p1 + a1 * w) - ub
        nrm1 += tmp1 * tmp1
        max1 = max(max1, tmp1)
        tmp2 = m2 * (p2 + a2 * w) - ub
        nrm2 += tmp2 * tmp2
        max2 = max(max2, tmp2)
    return max2 < max1 or (max2 == max1 and nrm2 < nrm1)


def load_imbalance_vector(
    graph: GraphData, nparts: int, multipliers: Sequence[float]
) -> list[float]:
    """Per constraint, the largest scaled part weight over all parts."""
    ncon = graph.num_constraints
    pw = graph.part_weights
    return [
        max(pw[p * ncon + c] * multipliers[p * ncon + c] for p in range(max(nparts, 1)))
        for c in range(ncon)
    ]


def _load_imbalance_diff(
    graph: GraphData,
    nparts: int,
    multipliers: Sequence[float],
    tolerances: Sequence[float],
) -> float:
    ncon = graph.num_constraints
    worst = -math.inf
    for p in range(nparts):
        for c in range(ncon):
            idx = p * ncon + c
            if idx < len(graph.part_weights) and idx < len(multipliers) and c < len(tolerances):
                worst = max(worst, graph.part_weights[idx] * multipliers[idx] - tolerances[c])
    return worst


def _update_moved_vertex(
    graph: GraphData, ctrl: Control, v: int, from_part: int, k: int, to_part: int, mode: int
) -> None:
    info = graph.kway_refinement_info[v]
    pool = ctrl.neighbor_pool
    slot = info.neighbor_offset + k
    ed_k = pool[slot].external_degree

    graph.partition[v] = to_part
    info.external_degree += info.internal_degree - ed_k
    old_id = info.internal_degree
    info.internal_degree = ed_k
    pool[slot].external_degree = old_id

    if pool[slot].external_degree == 0:
        if info.num_neighbors > 0:
            info.num_neighbors -= 1
            _copy_entry(pool, slot, info.neighbor_offset + info.num_neighbors)
    else:
        pool[slot].part_id = from_part

    on_boundary = graph.boundary_map[v] != -1
    wanted = _is_boundary(info, mode)
    if on_boundary and not wanted:
        graph.remove_from_boundary(v)
    elif not on_boundary and wanted:
        graph.add_to_boundary(v)


def _update_adjacent_vertex(
    ctrl: Control,
    graph: GraphData,
    v: int,
    me: int,
    from_part: int,
    to_part: int,
    ewgt: int,
    mode: int,
) -> None:
    info = graph.kway_refinement_info[v]
    pool = ctrl.neighbor_pool

    if info.neighbor_offset == -1:
        info.neighbor_offset = ctrl.alloc_neighbor_info(graph.xadj[v + 1] - graph.xadj[v])
        info.num_neighbors = 0
    base = info.neighbor_offset

    if me == from_part:
        info.external_degree += ewgt
        info.internal_degree -= ewgt
        if _is_boundary(info, mode) and graph.boundary_map[v] == -1:
            graph.add_to_boundary(v)
    elif me == to_part:
        info.internal_degree += ewgt
        info.external_degree -= ewgt
        if not _is_boundary(info, mode) and graph.boundary_map[v] != -1:
            graph.remove_from_boundary(v)

    if me != from_part:
        for slot in range(base, base + info.num_neighbors):
            if pool[slot].part_id == from_part:
                if pool[slot].external_degree == ewgt:
                    info.num_neighbors -= 1
                    _copy_entry(pool, slot, base + info.num_neighbors)
                else:
                    pool[slot].external_degree -= ewgt
                break

    if me != to_part:
        for slot in range(base, base + info.num_neighbors):
            if pool[slot].part_id == to_part:
                pool[slot].external_degree += ewgt
                break
        else:
            pool[base + info.num_neighbors] = NeighborInfo(to_part, ewgt)
            info.num_neighbors += 1


def _requeue(
    queue: PriorityQueue, status: list[_Status], info: KwayCutInfo, v: int, mode: int
) -> None:
    keep = _is_boundary(info, mode)
    if status[v] is _Status.PRESENT:
        if keep:
            queue.update(v, _priority(info))
        else:
            queue.delete(v)
            status[v] = _Status.NOT_PRESENT
    elif status[v] is _Status.NOT_PRESENT and keep:
        queue.insert(v, _priority(info))
        status[v] = _Status.PRESENT


def greedy_mc_kway_cut_optimize(ctrl: Control, graph: GraphData, niter: int, mode: int) -> None:
    """Run up to ``niter`` greedy passes over the boundary of a multi-constraint k-way partition.

    ``mode`` is 1 to reduce the edge cut and 2 to restore balance. The graph
    must hold its k-way refinement state with the boundary built for ``mode``.
    """
    mode = int(mode)
    if mode not in (_REFINE, _BALANCE):
        raise ValueError(f"unknown optimisation mode {mode}")
    n = graph.num_vertices
    if n == 0:
        return

    nparts = ctrl.num_parts
    ncon = graph.num_constraints
    pijbm = list(ctrl.partition_ij_balance_multipliers)
    tpw = ctrl.target_part_weights
    tols = ctrl.imbalance_tols

    if mode == _BALANCE:
        ubfactors = list(tols[:ncon])
    else:
        current = load_imbalance_vector(graph, nparts, pijbm)
        ubfactors = [max(t, c) for t, c in zip(tols[:ncon], current)]

    maxpw = [0] * (nparts * ncon)
    minpw = [0] * (nparts * ncon)
    for p in range(nparts):
        for c in range(ncon):
            idx = p * ncon + c
            total = graph.total_vertex_weight[c]
            maxpw[idx] = int(tpw[idx] * total * ubfactors[c])
            minpw[idx] = int(tpw[idx] * total * 0.2)

    queue = PriorityQueue()

    for _ in range(niter):
        if mode == _BALANCE and _load_imbalance_diff(graph, nparts, pijbm, tols) <= 0.0:
            break

        old_cut = graph.edge_cut
        status = [_Status.NOT_PRESENT] * n
        queue.reset()

        for p in ctrl.random_permutation(graph.num_boundary):
            v = graph.boundary_list[p]
            if v >= n:
                continue
            queue.insert(v, _priority(graph.kway_refinement_info[v]))
            status[v] = _Status.PRESENT

        pw = graph.part_weights
        pool = ctrl.neighbor_pool

        def weights(part: int) -> list[int]:
            return pw[part * ncon : (part + 1) * ncon]

        def mults(part: int) -> list[float]:
            return pijbm[part * ncon : (part + 1) * ncon]

        def fits(vw: list[int], to: int) -> bool:
            s = to * ncon
            return all(pw[s + c] + vw[c] <= maxpw[s + c] for c in range(ncon))

        def keeps_min(vw: list[int], part: int) -> bool:
            s = part * ncon
            return all(pw[s + c] - vw[c] >= minpw[s + c] for c in range(ncon))

        def balances(vw: list[int], a1: int, p1: int, a2: int, p2: int) -> bool:
            return better_balance_kway(
                vw, ubfactors, a1, weights(p1), mults(p1), a2, weights(p2), mults(p2)
            )

        nmoved = 0
        extracted = -1
        while (top := queue.get_top()) is not None:
            extracted += 1
            v = top[0]
            status[v] = _Status.EXTRACTED

            from_part = graph.partition[v]
            info = graph.kway_refinement_info[v]
            id_v = info.internal_degree
            base = info.neighbor_offset
            if base < 0 or info.num_neighbors == 0:
                continue

            vw = graph.vertex_weights[v * ncon : (v + 1) * ncon]

            if mode == _REFINE:
                if id_v > 0 and not keeps_min(vw, from_part):
                    continue
            elif not keeps_min(vw, from_part):
                continue

            best = None
            for k in reversed(range(info.num_neighbors)):
                nbr = pool[base + k]
                to = nbr.part_id
                if to >= nparts:
                    continue
                if mode == _REFINE:
                    accept = nbr.external_degree - id_v >= 0 and fits(vw, to)
                else:
                    accept = fits(vw, to) or balances(vw, -1, from_part, 1, to)
                if accept:
                    best = k
                    break
            if best is None:
                continue

            cto = pool[base + best].part_id
            for j in reversed(range(best)):
                nbr_j = pool[base + j]
                to = nbr_j.part_id
                if to >= nparts:
                    continue
                if mode == _REFINE:
                    ed_k = pool[base + best].external_degree
                    better = (nbr_j.external_degree > ed_k and fits(vw, to)) or (
                        nbr_j.external_degree == ed_k and balances(vw, 1, cto, 1, to)
                    )
                else:
                    better = balances(vw, 1, cto, 1, to)
                if better:
                    best = j
                    cto = to

            gain = pool[base + best].external_degree - id_v
            if mode == _REFINE:
                if not (
                    gain > 0
                    or (
                        gain == 0
                        and (balances(vw, -1, from_part, 1, cto) or extracted % 2 == 0)
                    )
                ):
                    continue
            elif gain < 0 and not balances(vw, -1, from_part, 1, cto):
                continue

            to_part = cto
            graph.edge_cut -= gain
            nmoved += 1
            for c in range(ncon):
                pw[to_part * ncon + c] += vw[c]
                pw[from_part * ncon + c] -= vw[c]

            _update_moved_vertex(graph, ctrl, v, from_part, best, to_part, mode)

            for u, ewgt in list(graph.neighbors(v)):
                me = graph.partition[u]
                u_info = graph.kway_refinement_info[u]
                old_nnbrs = u_info.num_neighbors
                _update_adjacent_vertex(ctrl, graph, u, me, from_part, to_part, ewgt, mode)
                pool = ctrl.neighbor_pool
                if me in (from_part, to_part) or old_nnbrs != u_info.num_neighbors:
                    _requeue(queue, status, u_info, u, mode)

        if nmoved == 0 or (mode == _REFINE and graph.edge_cut == old_cut):
            break
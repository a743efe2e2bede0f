# mlpart

Building blocks for graph partitioning. The package works on undirected graphs
in compressed sparse row form (`xadj`, `adjacency`) with integer vertex and
edge weights. It needs only the standard library.

## Modules

- `mlpart.graph`: `GraphData` holds a graph and its partition working state.
  `KwayCutInfo` is the per-vertex k-way refinement record.
  `compute_2way_partition_params` recomputes part weights, internal and
  external degrees, the boundary and the edge cut of a bisection.
- `mlpart.state`: `PriorityQueue`, an addressable max-heap, and `Control`.
  `Control` holds the number of parts, imbalance tolerances, target part
  weights, balance multipliers, the random source and the neighbour pool used
  by k-way refinement.
- `mlpart.bisection`: `grow_bisection` grows part 0 breadth-first from a
  random seed. `random_bisection` fills part 0 in random order. Both work on
  single-constraint graphs.
- `mlpart.fm`: `fm_2way_cut_refine` improves a single-constraint bisection
  with Fiduccia–Mattheyses passes. After each pass it rolls back to the best
  cut it saw.
- `mlpart.mckwayfm`: `greedy_mc_kway_cut_optimize` makes greedy boundary
  passes over a multi-constraint k-way partition. Mode `1` lowers the edge
  cut and mode `2` brings the part weights back within their tolerances. The
  module also has the helpers `better_balance_kway` and
  `load_imbalance_vector`.

## Installation

```
pip install .
```

## Example: bisect a path graph

```python
from mlpart.state import Control
from mlpart.graph import GraphData, compute_2way_partition_params
from mlpart.bisection import grow_bisection
from mlpart.fm import fm_2way_cut_refine

# Path 0--1--2--3--4
xadj = [0, 1, 3, 5, 7, 8]
adjacency = [1, 0, 2, 1, 3, 2, 4, 3]

graph = GraphData.from_csr(xadj, adjacency, None, None, 1)
graph.alloc_2way()
ctrl = Control()

target = [0.5, 0.5]
grow_bisection(ctrl, graph, target)
compute_2way_partition_params(graph)
fm_2way_cut_refine(ctrl, graph, target, 10)

print(graph.partition, graph.edge_cut)
```

`GraphData.from_csr` gives unit weights where none are passed in. It raises
`ValueError` for a malformed graph.

## Multi-constraint k-way refinement

`greedy_mc_kway_cut_optimize(ctrl, graph, niter, mode)` assumes the graph's
k-way state is already in place:

- `partition` and `part_weights`;
- one `KwayCutInfo` per vertex in `kway_refinement_info`, with its neighbour
  entries held in `ctrl.neighbor_pool`;
- the boundary, built for the chosen mode;
- `edge_cut`.

`ctrl.partition_ij_balance_multipliers` must hold one multiplier per part and
constraint. Any other mode raises `ValueError`.

## What the package does not do

The package does not compute k-way partition parameters from scratch. It has
no single-constraint k-way refiner. It cannot project a partition from a
coarse graph to a finer one. It provides no coarsening step and no complete
multilevel partitioning run, and it has no command-line tool. Callers put
these stages together from the pieces above.

## Randomness

All random choices come from the `Control` object you pass in, through
`Control.random_permutation` and `Control.random_below`. Two `Control`
objects created with the same `seed` give the same results.

## Tests

```
pip install .[test]
pytest
```
"""Graph partitioning building blocks: bisection, FM refinement and multi-constraint k-way refinement."""

__version__ = "0.1.0"

__all__ = ["bisection", "fm", "graph", "mckwayfm", "state"]
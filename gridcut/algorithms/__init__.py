"""Flow, cut and distance algorithms operating on flow networks."""

from gridcut.algorithms.distance import adjacency_fabric, distance_field
from gridcut.algorithms.min_cut import cut_boundary, min_cut, residual_reachable
from gridcut.algorithms.push_relabel import check_terminals, push_relabel_max_flow

__all__ = [
    "adjacency_fabric",
    "check_terminals",
    "cut_boundary",
    "distance_field",
    "min_cut",
    "push_relabel_max_flow",
    "residual_reachable",
]

"""gridcut: max flow, min cut and distance fields on bounded grids.

Primary API:
    GridTopology - grid snapshot, network construction and cut/distance mapping
    FlowNetwork, DenseFlowNetwork - flow networks
    push_relabel_max_flow() - maximum flow, in place
    min_cut() - residual reachability and cut frontier
    distance_field() - multi-source layered BFS

Example:
    from gridcut import GridTopology

    grid = GridTopology(sources=[27], sinks=[0, 1, 2], walls=[10, 11], size=7)
    result = grid.solve()
    print(result.max_flow, result.cut_cells)
"""

from __future__ import annotations

from gridcut import logging
from gridcut._version import __version__
from gridcut.algorithms import (
    adjacency_fabric,
    cut_boundary,
    distance_field,
    min_cut,
    push_relabel_max_flow,
    residual_reachable,
)
from gridcut.graph import DenseFlowNetwork, FlowNetwork
from gridcut.graph.io import network_to_node_link, node_link_to_network
from gridcut.grid import GridTopology, TerrainSnapshot, load_terrain_yaml
from gridcut.results import FlowSummary, GridCut, MinCut, distance_items
from gridcut.types import Adjacency, CutModel

__all__ = [
    "__version__",
    "logging",
    # Networks
    "FlowNetwork",
    "DenseFlowNetwork",
    "network_to_node_link",
    "node_link_to_network",
    # Algorithms
    "push_relabel_max_flow",
    "min_cut",
    "residual_reachable",
    "cut_boundary",
    "distance_field",
    "adjacency_fabric",
    # Grid
    "GridTopology",
    "TerrainSnapshot",
    "load_terrain_yaml",
    # Results and types
    "FlowSummary",
    "MinCut",
    "GridCut",
    "distance_items",
    "Adjacency",
    "CutModel",
]

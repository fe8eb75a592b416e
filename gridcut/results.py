"""Result containers returned by the solver, cut extraction and grid planner."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Sequence, Tuple

from gridcut.types import CutModel, EdgePair, NodeID


@dataclass(frozen=True)
class FlowSummary:
    """Summary of a push-relabel run.

    Attributes:
        total_flow: Maximum flow value.
        pushes: Number of push operations performed.
        relabels: Number of relabel operations performed.
        edge_flow: Positive flow per edge with positive capacity.
    """

    total_flow: int
    pushes: int
    relabels: int
    edge_flow: Dict[EdgePair, int] = field(default_factory=dict)


@dataclass(frozen=True)
class MinCut:
    """Source side of a minimum cut and its frontier.

    Attributes:
        reachable: Nodes reachable from the source in the residual network.
        boundary: Nodes adjacent to ``reachable`` (any edge) but outside it.
        cut_edges: Edges with positive capacity leaving ``reachable``.
        capacity: Total capacity of ``cut_edges``; equals the max flow after a solve.
    """

    reachable: FrozenSet[NodeID]
    boundary: FrozenSet[NodeID]
    cut_edges: List[EdgePair]
    capacity: int


@dataclass(frozen=True)
class GridCut:
    """Grid-level outcome of a cut computation.

    Attributes:
        model: Network construction used.
        max_flow: Number of disjoint source-to-sink routes.
        cut_cells: Cells to wall off, ascending.
        reachable_cells: Traversable cells left on the source side, ascending.
    """

    model: CutModel
    max_flow: int
    cut_cells: List[int]
    reachable_cells: List[int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model.name.lower(),
            "max_flow": self.max_flow,
            "cut_cells": list(self.cut_cells),
            "reachable_cells": list(self.reachable_cells),
        }


def distance_items(distances: Sequence[int], unreached: int) -> List[Tuple[int, int]]:
    """Return ``(cell, distance)`` pairs for every reached cell, in cell order."""
    return [
        (cell, int(value))
        for cell, value in enumerate(distances)
        if int(value) != unreached
    ]

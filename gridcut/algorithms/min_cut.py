"""Minimum cut extraction from a solved flow network.

After ``push_relabel_max_flow`` the nodes reachable from the source through
edges with positive residual capacity form the source side of a minimum cut.
Everything here reads the network and never mutates it.
"""

from __future__ import annotations

from collections import deque
from typing import FrozenSet, Iterable, Optional, Set

from gridcut.graph import AnyFlowNetwork
from gridcut.results import MinCut
from gridcut.types import NodeID


def residual_reachable(
    network: AnyFlowNetwork, source: Optional[NodeID] = None
) -> FrozenSet[NodeID]:
    """
    Breadth-first search from ``source`` over edges with residual capacity.

    Args:
        network: A flow network, normally after a max-flow solve.
        source: Start node; defaults to ``network.source``.

    Returns:
        FrozenSet[NodeID]: The reachable set, including ``source``.

    Raises:
        ValueError: If the start node is unset or absent.
    """
    if source is None:
        source = network.source
    if source is None or source not in network:
        raise ValueError(f"Source node '{source}' does not exist.")

    discovered: Set[NodeID] = {source}
    queue = deque([source])
    while queue:
        node = queue.popleft()
        for neighbor in network.neighbors(node):
            if neighbor in discovered:
                continue
            if network.residual_capacity(node, neighbor) > 0:
                discovered.add(neighbor)
                queue.append(neighbor)
    return frozenset(discovered)


def cut_boundary(
    network: AnyFlowNetwork, reachable: Iterable[NodeID]
) -> FrozenSet[NodeID]:
    """Nodes adjacent to ``reachable`` by any edge, residual or not, but outside it."""
    reachable = frozenset(reachable)
    return frozenset(
        neighbor
        for node in reachable
        for neighbor in network.neighbors(node)
        if neighbor not in reachable
    )


def min_cut(network: AnyFlowNetwork, source: Optional[NodeID] = None) -> MinCut:
    """
    Extract the minimum cut from a solved network.

    Args:
        network: A flow network after ``push_relabel_max_flow``.
        source: Start node; defaults to ``network.source``.

    Returns:
        MinCut: Reachable set, its frontier, the saturated edges leaving it and
        their total capacity (equal to the max flow).
    """
    reachable = residual_reachable(network, source)
    cut_edges = sorted(
        (
            (u, v)
            for u in reachable
            for v in network.neighbors(u)
            if v not in reachable and network.capacity(u, v) > 0
        ),
        key=repr,
    )
    return MinCut(
        reachable=reachable,
        boundary=cut_boundary(network, reachable),
        cut_edges=cut_edges,
        capacity=sum(network.capacity(u, v) for u, v in cut_edges),
    )

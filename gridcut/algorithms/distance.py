"""Multi-source layered BFS distance fields over a flow network."""

from __future__ import annotations

from collections import deque
from typing import Callable, Dict, Iterable, Iterator, Optional, Union

from gridcut.config import GRID_CONFIG
from gridcut.graph import AnyFlowNetwork
from gridcut.logging import get_logger
from gridcut.types import Adjacency, NodeID

logger = get_logger(__name__)

AdjacencyFunc = Callable[[AnyFlowNetwork, NodeID], Iterable[NodeID]]


def adjacency_fabric(
    adjacency: Adjacency, adjacency_func: Optional[AdjacencyFunc] = None
) -> AdjacencyFunc:
    """
    Fabric producing the neighbor function used to walk a network.

    Args:
        adjacency: ``RAW`` follows every stored edge (distances before any
            solve); ``RESIDUAL`` follows only edges with positive residual
            capacity (distances in the residual network after a solve);
            ``USER_DEFINED`` uses ``adjacency_func``.
        adjacency_func: Callable ``(network, node) -> neighbors``.

    Returns:
        AdjacencyFunc: The neighbor function.
    """

    def raw_neighbors(network: AnyFlowNetwork, node: NodeID) -> Iterator[NodeID]:
        return network.neighbors(node)

    def residual_neighbors(network: AnyFlowNetwork, node: NodeID) -> Iterator[NodeID]:
        return (
            t for t in network.neighbors(node) if network.residual_capacity(node, t) > 0
        )

    if adjacency == Adjacency.RAW:
        return raw_neighbors
    if adjacency == Adjacency.RESIDUAL:
        return residual_neighbors
    if adjacency == Adjacency.USER_DEFINED:
        if adjacency_func is None:
            raise ValueError("adjacency_func is required for USER_DEFINED adjacency")
        return adjacency_func
    raise ValueError(f"Unknown adjacency: {adjacency}")


def distance_field(
    network: AnyFlowNetwork,
    boundary: Iterable[NodeID],
    adjacency: Union[Adjacency, AdjacencyFunc] = Adjacency.RAW,
    unreached: Optional[int] = None,
) -> Dict[NodeID, int]:
    """
    Hop distance from the nearest boundary node for every node of ``network``.

    All boundary nodes start in distance class 0. The queue is drained class
    by class: the size of the class being drained is fixed before draining
    starts, and once that many nodes have been settled the distance advances
    and the next class size is taken from the queue length.

    Args:
        network: The network to walk.
        boundary: Non-empty collection of start nodes.
        adjacency: An ``Adjacency`` member or a neighbor callable.
        unreached: Sentinel for nodes no boundary node reaches. Defaults to the
            maximum of ``GRID_CONFIG.distance_dtype``.

    Returns:
        Dict[NodeID, int]: Distance per node.

    Raises:
        ValueError: If ``boundary`` is empty or names an unknown node, or a
            distance would reach the sentinel.
    """
    if unreached is None:
        unreached = GRID_CONFIG.unreached()
    if callable(adjacency) and not isinstance(adjacency, Adjacency):
        next_nodes = adjacency_fabric(Adjacency.USER_DEFINED, adjacency)
    else:
        next_nodes = adjacency_fabric(adjacency)

    queue = deque()
    discovered = set()
    for node in boundary:
        if node not in network:
            raise ValueError(f"Boundary node '{node}' does not exist.")
        if node not in discovered:
            discovered.add(node)
            queue.append(node)
    if not queue:
        raise ValueError("Distance field needs at least one boundary node.")
    boundary_size = len(queue)

    distances: Dict[NodeID, int] = {node: unreached for node in network}

    distance = 0
    previous_class_size = len(queue)
    current_class_size = 0
    while queue:
        if current_class_size == previous_class_size:
            previous_class_size = len(queue)
            current_class_size = 0
            distance += 1
            if distance >= unreached:
                raise ValueError(
                    f"Distance {distance} reaches the unreached sentinel {unreached}."
                )
        node = queue.popleft()
        distances[node] = distance
        current_class_size += 1
        for neighbor in next_nodes(network, node):
            if neighbor not in discovered:
                discovered.add(neighbor)
                queue.append(neighbor)

    logger.debug(
        "Distance field: %d boundary nodes, %d reached, max distance %d",
        boundary_size,
        len(discovered),
        distance,
    )
    return distances

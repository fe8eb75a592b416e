"""Maximum flow via the generic push-relabel method.

Overflowing nodes are processed in FIFO order and each one is discharged
until its excess is gone. No gap or global-relabel heuristics are applied.
Flow is updated in place on the given network, so cut extraction can read
the residual state afterwards.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Literal, Optional, Set, Tuple, Union, overload

from gridcut.config import SOLVER_CONFIG
from gridcut.graph import AnyFlowNetwork
from gridcut.logging import get_logger
from gridcut.results import FlowSummary
from gridcut.types import NodeID

logger = get_logger(__name__)


def check_terminals(network: AnyFlowNetwork) -> Tuple[NodeID, NodeID]:
    """
    Validate the network's source and sink.

    Returns:
        Tuple[NodeID, NodeID]: ``(source, sink)``.

    Raises:
        ValueError: If a terminal is unset, missing from the network, or both
            terminals are the same node.
    """
    source, sink = network.source, network.sink
    if source is None or sink is None:
        raise ValueError("Flow network needs both a source and a sink.")
    if source not in network:
        raise ValueError(f"Source node '{source}' does not exist.")
    if sink not in network:
        raise ValueError(f"Sink node '{sink}' does not exist.")
    if source == sink:
        raise ValueError(f"Source and sink are the same node '{source}'.")
    return source, sink


def _push(network: AnyFlowNetwork, node: NodeID, target: NodeID, amount: int) -> None:
    if not network.has_edge(target, node):
        raise RuntimeError(
            f"Cannot push on ({node}, {target}): reverse edge ({target}, {node}) "
            "is missing. Add it with capacity 0 before solving."
        )
    network.set_flow(node, target, network.flow(node, target) + amount)
    network.set_flow(target, node, network.flow(target, node) - amount)
    network.set_excess(node, network.excess(node) - amount)
    network.set_excess(target, network.excess(target) + amount)


@overload
def push_relabel_max_flow(
    network: AnyFlowNetwork,
    *,
    max_iterations: Optional[int] = None,
    return_summary: Literal[False] = False,
) -> int: ...


@overload
def push_relabel_max_flow(
    network: AnyFlowNetwork,
    *,
    max_iterations: Optional[int] = None,
    return_summary: Literal[True],
) -> Tuple[int, FlowSummary]: ...


def push_relabel_max_flow(
    network: AnyFlowNetwork,
    *,
    max_iterations: Optional[int] = None,
    return_summary: bool = False,
) -> Union[int, Tuple[int, FlowSummary]]:
    """Compute the maximum flow from ``network.source`` to ``network.sink``.

    The network is reset and then mutated in place: heights, excesses and
    flows reflect the final preflow, which is a maximum flow.

    Steps:
      1. Zero all labels and flows, set ``height(source) = |V|``.
      2. Saturate every edge leaving the source, adding a zero-capacity
         reverse edge where one is missing.
      3. While some node other than the terminals has positive excess and an
         edge with residual capacity, push along the first edge (insertion
         order) whose head is exactly one level lower, or relabel the node to
         one above its lowest residual neighbor.

    Args:
        network: The flow network; both terminals must be set.
        max_iterations: Ceiling on push plus relabel operations. Defaults to
            ``SOLVER_CONFIG.max_iterations`` (no ceiling when None).
        return_summary: If True, also return a ``FlowSummary``.

    Returns:
        Union[int, Tuple[int, FlowSummary]]: The max flow value, plus the
        summary when requested.

    Raises:
        ValueError: If the terminals are unset, missing or equal.
        RuntimeError: If a node is left overflowing with no residual edge
            (malformed network), a push needs a missing reverse edge, or the
            iteration ceiling is exceeded.

    Examples:
        >>> net = FlowNetwork(source="s", sink="t")
        >>> net.add_node("a")
        >>> net.add_edge_pair("s", "a", 3)
        >>> net.add_edge_pair("a", "t", 2)
        >>> push_relabel_max_flow(net)
        2
    """
    source, sink = check_terminals(network)
    if max_iterations is None:
        max_iterations = SOLVER_CONFIG.max_iterations
    log_every = SOLVER_CONFIG.log_every

    node_count = len(network)
    height_limit = 2 * node_count - 1

    network.reset_flow()
    network.set_height(source, node_count)

    active: Deque[NodeID] = deque()
    queued: Set[NodeID] = set()
    for n in list(network.neighbors(source)):
        if not network.has_edge(n, source):
            network.add_edge(n, source, 0, 0)
        amount = network.capacity(source, n)
        network.set_flow(source, n, amount)
        network.set_flow(n, source, -amount)
        network.set_excess(n, network.excess(n) + amount)
        if amount > 0 and n != sink and n not in queued:
            active.append(n)
            queued.add(n)

    pushes = 0
    relabels = 0
    while active:
        node = active.popleft()
        queued.discard(node)
        while network.excess(node) > 0:
            residual: List[NodeID] = [
                t
                for t in network.neighbors(node)
                if network.residual_capacity(node, t) > 0
            ]
            if not residual:
                # Not overflowing by definition; reported after the loop.
                break

            node_height = network.height(node)
            target = next(
                (t for t in residual if node_height == network.height(t) + 1), None
            )
            if target is not None:
                amount = min(
                    network.excess(node), network.residual_capacity(node, target)
                )
                _push(network, node, target, amount)
                pushes += 1
                if target != source and target != sink and target not in queued:
                    active.append(target)
                    queued.add(target)
            else:
                new_height = 1 + min(network.height(t) for t in residual)
                if new_height > height_limit:
                    raise RuntimeError(
                        f"Height of node '{node}' would reach {new_height}, above "
                        f"the bound {height_limit}; the network is inconsistent."
                    )
                network.set_height(node, new_height)
                relabels += 1

            iterations = pushes + relabels
            if max_iterations is not None and iterations > max_iterations:
                logger.error(
                    "Push-relabel exceeded %d iterations (%d pushes, %d relabels)",
                    max_iterations,
                    pushes,
                    relabels,
                )
                raise RuntimeError(
                    f"Push-relabel exceeded the iteration ceiling of {max_iterations}."
                )
            if log_every and iterations % log_every == 0:
                logger.debug(
                    "Push-relabel progress: %d pushes, %d relabels, %d active",
                    pushes,
                    relabels,
                    len(active),
                )

    stalled = [
        n for n in network if n != source and n != sink and network.excess(n) > 0
    ]
    if stalled:
        logger.error(
            "Push-relabel stalled with %d overflowing nodes without residual edges",
            len(stalled),
        )
        raise RuntimeError(
            f"Node '{stalled[0]}' keeps excess {network.excess(stalled[0])} with no "
            "residual edge; the network is missing reverse edges."
        )

    total_flow = sum(network.flow(source, n) for n in network.neighbors(source))
    logger.debug(
        "Max flow %s -> %s: %d (%d pushes, %d relabels, %d nodes)",
        source,
        sink,
        total_flow,
        pushes,
        relabels,
        node_count,
    )

    if not return_summary:
        return total_flow

    edge_flow = {
        (u, v): network.flow(u, v)
        for u, v in network.edge_pairs()
        if network.capacity(u, v) > 0 and network.flow(u, v) > 0
    }
    return total_flow, FlowSummary(
        total_flow=total_flow, pushes=pushes, relabels=relabels, edge_flow=edge_flow
    )

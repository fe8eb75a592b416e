"""Sparse flow network backed by ``networkx.DiGraph``."""

from __future__ import annotations

from numbers import Integral
from pickle import dumps, loads
from typing import Any, Iterator, List, Optional

import networkx as nx

from gridcut.logging import get_logger
from gridcut.types import EdgePair, NodeID

logger = get_logger(__name__)


def check_int(value: Any, name: str) -> int:
    """Return ``value`` as a Python int, rejecting bools and non-integers."""
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}.")
    return int(value)


class FlowNetwork(nx.DiGraph):
    """
    A directed graph holding push-relabel state on nodes and edges.

    Nodes carry ``height`` and ``excess``; edges carry integer ``capacity`` and
    ``flow``. At most one edge exists per ordered ``(from, to)`` pair.

    This class enforces:
      - Idempotent node insertion (an existing node keeps its labels).
      - First-writer-wins edge insertion: re-adding ``(u, v)`` is a no-op.
      - No automatic creation of missing nodes when adding an edge.
      - Integer, non-negative capacities.
      - No self-loops.

    Reverse edges are never created implicitly by ``add_edge``. Residual
    pushes against an edge need its ``(v, u)`` twin, so callers add it with
    capacity 0 (``add_edge_pair`` or ``ensure_reverse_edges``).

    Inherits from:
        networkx.DiGraph
    """

    def __init__(
        self,
        incoming_graph_data: Any = None,
        source: Optional[NodeID] = None,
        sink: Optional[NodeID] = None,
        **attr: Any,
    ) -> None:
        """
        Initialize a FlowNetwork.

        The terminals are added as nodes when given.

        Args:
            incoming_graph_data: Forwarded to ``networkx.DiGraph``.
            source: The flow source node.
            sink: The flow sink node.
            **attr: Graph attributes.
        """
        super().__init__(incoming_graph_data, **attr)
        self.graph["source"] = source
        self.graph["sink"] = sink
        for terminal in (source, sink):
            if terminal is not None:
                self.add_node(terminal)

    @property
    def source(self) -> Optional[NodeID]:
        return self.graph.get("source")

    @source.setter
    def source(self, node: Optional[NodeID]) -> None:
        self.graph["source"] = node

    @property
    def sink(self) -> Optional[NodeID]:
        return self.graph.get("sink")

    @sink.setter
    def sink(self, node: Optional[NodeID]) -> None:
        self.graph["sink"] = node

    def copy(self, as_view: bool = False) -> FlowNetwork:
        """
        Create a deep copy, keeping terminals and all flow state.

        Args:
            as_view: If True, return a read-only networkx view instead.

        Returns:
            FlowNetwork: The copy.
        """
        if as_view:
            return super().copy(as_view=True)
        return loads(dumps(self))

    #
    # Node management
    #
    def add_node(self, node_for_adding: NodeID, **attr: Any) -> None:
        """
        Add a node with height 0 and excess 0 unless it already exists.

        Args:
            node_for_adding: The node to add.
            **attr: Extra node attributes (ignored for existing nodes).
        """
        if node_for_adding in self:
            return
        super().add_node(node_for_adding, height=0, excess=0, **attr)

    def height(self, n: NodeID) -> int:
        return self._node[n]["height"]

    def set_height(self, n: NodeID, value: int) -> None:
        self._node[n]["height"] = value

    def excess(self, n: NodeID) -> int:
        return self._node[n]["excess"]

    def set_excess(self, n: NodeID, value: int) -> None:
        self._node[n]["excess"] = value

    #
    # Edge management
    #
    def add_edge(
        self, u_of_edge: NodeID, v_of_edge: NodeID, capacity: int = 0, flow: int = 0
    ) -> bool:
        """
        Add the directed edge ``u -> v`` unless the pair already exists.

        Args:
            u_of_edge: The tail node. Must exist in the network.
            v_of_edge: The head node. Must exist in the network.
            capacity: Non-negative integer capacity.
            flow: Initial integer flow.

        Returns:
            bool: True if the edge was inserted, False if the pair existed.

        Raises:
            ValueError: If a node is missing, the edge is a self-loop, or the
                capacity is negative.
            TypeError: If capacity or flow is not an integer.
        """
        if u_of_edge not in self:
            raise ValueError(f"Source node '{u_of_edge}' does not exist.")
        if v_of_edge not in self:
            raise ValueError(f"Target node '{v_of_edge}' does not exist.")
        capacity = check_int(capacity, "capacity")
        flow = check_int(flow, "flow")
        if u_of_edge == v_of_edge:
            raise ValueError(f"Self-loop on node '{u_of_edge}' is not allowed.")
        if capacity < 0:
            raise ValueError(
                f"Capacity of edge ({u_of_edge}, {v_of_edge}) must be non-negative."
            )

        if v_of_edge in self._succ[u_of_edge]:
            logger.debug(
                "Ignoring duplicate edge (%s, %s); first insertion wins",
                u_of_edge,
                v_of_edge,
            )
            return False
        super().add_edge(u_of_edge, v_of_edge, capacity=capacity, flow=flow)
        return True

    def add_edge_pair(self, u: NodeID, v: NodeID, capacity: int) -> None:
        """Add ``u -> v`` with ``capacity`` and a zero-capacity ``v -> u`` twin."""
        self.add_edge(u, v, capacity, 0)
        self.add_edge(v, u, 0, 0)

    def missing_reverse_edges(self) -> List[EdgePair]:
        """List edges whose ``(v, u)`` twin is absent."""
        return [(u, v) for u, v in self.edges() if u not in self._succ[v]]

    def ensure_reverse_edges(self) -> int:
        """
        Add a zero-capacity twin for every edge that lacks one.

        Returns:
            int: Number of reverse edges added.
        """
        missing = self.missing_reverse_edges()
        for u, v in missing:
            self.add_edge(v, u, 0, 0)
        return len(missing)

    def capacity(self, u: NodeID, v: NodeID) -> int:
        edge = self._succ.get(u, {}).get(v)
        return 0 if edge is None else edge["capacity"]

    def flow(self, u: NodeID, v: NodeID) -> int:
        edge = self._succ.get(u, {}).get(v)
        return 0 if edge is None else edge["flow"]

    def set_flow(self, u: NodeID, v: NodeID, value: int) -> None:
        try:
            self._succ[u][v]["flow"] = value
        except KeyError:
            raise ValueError(f"No edge from '{u}' to '{v}'.") from None

    def residual_capacity(self, u: NodeID, v: NodeID) -> int:
        """Remaining pushable amount on ``u -> v``: ``capacity - flow``."""
        edge = self._succ.get(u, {}).get(v)
        if edge is None:
            return 0
        return edge["capacity"] - edge["flow"]

    def neighbors(self, n: NodeID) -> Iterator[NodeID]:
        """
        Iterate over the heads of all edges leaving ``n``, in insertion order.

        Zero-capacity reverse placeholders count as neighbors.
        """
        try:
            return iter(self._succ[n])
        except KeyError:
            raise ValueError(f"Node '{n}' does not exist.") from None

    def edge_pairs(self) -> Iterator[EdgePair]:
        return iter(self.edges())

    def reset_flow(self) -> None:
        """Zero every height, excess and flow."""
        for attrs in self._node.values():
            attrs["height"] = 0
            attrs["excess"] = 0
        for _, _, attrs in self.edges(data=True):
            attrs["flow"] = 0

"""Dense flow network over a known integer node range.

Capacity and flow are stored in ``node_count x node_count`` numpy matrices,
trading memory for hash-free O(1) access. Use it when node identities are the
integers ``0 .. node_count - 1`` (for example, cell indices of a small grid).
"""

from __future__ import annotations

from pickle import dumps, loads
from typing import Any, Dict, Iterator, List, Optional

import numpy as np

from gridcut.config import GRID_CONFIG
from gridcut.graph.flow_network import check_int
from gridcut.logging import get_logger
from gridcut.types import EdgePair

logger = get_logger(__name__)


class DenseFlowNetwork:
    """
    Flow network with the same contract as ``FlowNetwork`` on dense integer ids.

    Capacity and flow use ``dtype``. A capacity is accepted only when
    ``capacity * node_count`` fits in ``dtype``, so neither flow nor excess
    can wrap around; larger values raise ``ValueError`` at insertion time.
    Heights and excesses are kept in ``int64`` vectors.

    Attributes:
        graph: Graph attribute dict (``source``, ``sink`` and user metadata).
    """

    def __init__(
        self,
        node_count: int,
        source: Optional[int] = None,
        sink: Optional[int] = None,
        dtype: Optional[Any] = None,
        **attr: Any,
    ) -> None:
        node_count = check_int(node_count, "node_count")
        if node_count < 0:
            raise ValueError("node_count must be non-negative")
        self.node_count = node_count
        self.dtype = np.dtype(dtype if dtype is not None else GRID_CONFIG.dense_dtype)
        if self.dtype.kind != "i":
            raise ValueError(f"dtype must be a signed integer type, got {self.dtype}")
        self.capacity_ceiling = int(np.iinfo(self.dtype).max) // max(node_count, 1)

        self.graph: Dict[str, Any] = dict(attr)
        self._cap = np.zeros((node_count, node_count), dtype=self.dtype)
        self._flow = np.zeros((node_count, node_count), dtype=self.dtype)
        self._height = np.zeros(node_count, dtype=np.int64)
        self._excess = np.zeros(node_count, dtype=np.int64)
        self._present = np.zeros(node_count, dtype=bool)
        # Insertion-ordered successor sets
        self._succ: List[Dict[int, None]] = [{} for _ in range(node_count)]

        self.graph["source"] = source
        self.graph["sink"] = sink
        for terminal in (source, sink):
            if terminal is not None:
                self.add_node(terminal)

    @property
    def source(self) -> Optional[int]:
        return self.graph.get("source")

    @source.setter
    def source(self, node: Optional[int]) -> None:
        self.graph["source"] = node

    @property
    def sink(self) -> Optional[int]:
        return self.graph.get("sink")

    @sink.setter
    def sink(self, node: Optional[int]) -> None:
        self.graph["sink"] = node

    def copy(self) -> DenseFlowNetwork:
        return loads(dumps(self))

    def _index(self, n: Any) -> int:
        if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
            raise ValueError(f"Node '{n}' is not an integer id.")
        if not 0 <= n < self.node_count:
            raise ValueError(f"Node {n} outside range 0..{self.node_count - 1}.")
        return int(n)

    def __contains__(self, n: Any) -> bool:
        if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
            return False
        return 0 <= n < self.node_count and bool(self._present[n])

    def __len__(self) -> int:
        return int(self._present.sum())

    def __iter__(self) -> Iterator[int]:
        return (int(n) for n in np.flatnonzero(self._present))

    def number_of_edges(self) -> int:
        return sum(len(succ) for succ in self._succ)

    #
    # Node management
    #
    def add_node(self, n: int) -> None:
        """Add node ``n`` with height 0 and excess 0 unless present."""
        i = self._index(n)
        if self._present[i]:
            return
        self._present[i] = True
        self._height[i] = 0
        self._excess[i] = 0

    def height(self, n: int) -> int:
        return int(self._height[n])

    def set_height(self, n: int, value: int) -> None:
        self._height[n] = value

    def excess(self, n: int) -> int:
        return int(self._excess[n])

    def set_excess(self, n: int, value: int) -> None:
        self._excess[n] = value

    #
    # Edge management
    #
    def add_edge(self, u: int, v: int, capacity: int = 0, flow: int = 0) -> bool:
        """
        Add the directed edge ``u -> v`` unless the pair already exists.

        Returns:
            bool: True if the edge was inserted, False if the pair existed.

        Raises:
            ValueError: If a node is missing, the capacity is negative, or a
                value exceeds the dtype capacity ceiling.
            TypeError: If capacity or flow is not an integer.
        """
        if u not in self:
            raise ValueError(f"Source node '{u}' does not exist.")
        if v not in self:
            raise ValueError(f"Target node '{v}' does not exist.")
        capacity = check_int(capacity, "capacity")
        flow = check_int(flow, "flow")
        if u == v:
            raise ValueError(f"Self-loop on node '{u}' is not allowed.")
        if capacity < 0:
            raise ValueError(f"Capacity of edge ({u}, {v}) must be non-negative.")
        if capacity > self.capacity_ceiling or abs(flow) > self.capacity_ceiling:
            raise ValueError(
                f"Edge ({u}, {v}) value exceeds the {self.dtype} ceiling of "
                f"{self.capacity_ceiling} for {self.node_count} nodes."
            )

        u, v = int(u), int(v)
        if v in self._succ[u]:
            logger.debug("Ignoring duplicate edge (%s, %s); first insertion wins", u, v)
            return False
        self._succ[u][v] = None
        self._cap[u, v] = capacity
        self._flow[u, v] = flow
        return True

    def add_edge_pair(self, u: int, v: int, capacity: int) -> None:
        """Add ``u -> v`` with ``capacity`` and a zero-capacity ``v -> u`` twin."""
        self.add_edge(u, v, capacity, 0)
        self.add_edge(v, u, 0, 0)

    def has_edge(self, u: int, v: int) -> bool:
        return u in self and v in self._succ[u]

    def missing_reverse_edges(self) -> List[EdgePair]:
        return [(u, v) for u, v in self.edge_pairs() if u not in self._succ[v]]

    def ensure_reverse_edges(self) -> int:
        missing = self.missing_reverse_edges()
        for u, v in missing:
            self.add_edge(v, u, 0, 0)
        return len(missing)

    def capacity(self, u: int, v: int) -> int:
        if not self.has_edge(u, v):
            return 0
        return int(self._cap[u, v])

    def flow(self, u: int, v: int) -> int:
        if not self.has_edge(u, v):
            return 0
        return int(self._flow[u, v])

    def set_flow(self, u: int, v: int, value: int) -> None:
        if not self.has_edge(u, v):
            raise ValueError(f"No edge from '{u}' to '{v}'.")
        self._flow[u, v] = value

    def residual_capacity(self, u: int, v: int) -> int:
        if not self.has_edge(u, v):
            return 0
        return int(self._cap[u, v]) - int(self._flow[u, v])

    def neighbors(self, n: int) -> Iterator[int]:
        if n not in self:
            raise ValueError(f"Node '{n}' does not exist.")
        return iter(self._succ[n])

    def edge_pairs(self) -> Iterator[EdgePair]:
        for u in self:
            for v in self._succ[u]:
                yield u, v

    def reset_flow(self) -> None:
        self._height[:] = 0
        self._excess[:] = 0
        self._flow[:, :] = 0


def dense_dtype_for(max_capacity: int, node_count: int) -> np.dtype:
    """
    Narrowest signed dtype whose capacity ceiling holds ``max_capacity``.

    Candidates are ``GRID_CONFIG.dense_dtype``, int32 and int64; none is
    narrower than the configured one.

    Raises:
        ValueError: If even int64 cannot hold ``max_capacity * node_count``.
    """
    configured = np.dtype(GRID_CONFIG.dense_dtype)
    for candidate in (configured, np.dtype(np.int32), np.dtype(np.int64)):
        if candidate.itemsize < configured.itemsize:
            continue
        if int(np.iinfo(candidate).max) // max(node_count, 1) >= max_capacity:
            if candidate != configured:
                logger.debug(
                    "Widening dense dtype %s to %s for capacity %d on %d nodes",
                    configured,
                    candidate,
                    max_capacity,
                    node_count,
                )
            return candidate
    raise ValueError(
        f"No integer dtype holds capacity {max_capacity} for {node_count} nodes."
    )

"""Global pytest configuration and shared flow-network fixtures."""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Tuple

import pytest

from gridcut.graph import AnyFlowNetwork, DenseFlowNetwork, FlowNetwork

EdgeSpec = Tuple[int, int, int]

#: 0->1:2, 0->2:4, 1->2:3, 2->3:5, 1->3:1 (max flow 6)
SCENARIO_A_EDGES = [(0, 1, 2), (0, 2, 4), (1, 2, 3), (2, 3, 5), (1, 3, 1)]

#: Textbook instance (max flow 23)
SCENARIO_B_EDGES = [
    (0, 1, 16),
    (0, 2, 13),
    (1, 3, 12),
    (2, 1, 4),
    (2, 4, 14),
    (3, 2, 9),
    (3, 5, 20),
    (4, 3, 7),
    (4, 5, 4),
]


def build_network(
    edges: Iterable[EdgeSpec],
    source: int,
    sink: int,
    node_count: Optional[int] = None,
    dense: bool = False,
) -> AnyFlowNetwork:
    """Network with the given natural edges plus zero-capacity reverse twins."""
    edges = list(edges)
    if node_count is None:
        node_count = 1 + max([source, sink] + [max(u, v) for u, v, _ in edges])
    if dense:
        network: AnyFlowNetwork = DenseFlowNetwork(
            node_count, source, sink, dtype="int64"
        )
    else:
        network = FlowNetwork(source=source, sink=sink)
    for n in range(node_count):
        network.add_node(n)
    for u, v, capacity in edges:
        network.add_edge(u, v, capacity)
    network.ensure_reverse_edges()
    return network


@pytest.fixture
def make_network() -> Callable[..., AnyFlowNetwork]:
    return build_network


@pytest.fixture(params=[False, True], ids=["sparse", "dense"])
def dense(request) -> bool:
    return request.param


@pytest.fixture
def scenario_a(dense) -> AnyFlowNetwork:
    return build_network(SCENARIO_A_EDGES, 0, 3, dense=dense)


@pytest.fixture
def scenario_b(dense) -> AnyFlowNetwork:
    # Min cut {0, 1, 2, 4} | {3, 5}: 1->3 (12), 4->3 (7), 4->5 (4)
    return build_network(SCENARIO_B_EDGES, 0, 5, dense=dense)


@pytest.fixture
def scenario_c(dense) -> AnyFlowNetwork:
    # Source and sink only, no edges
    return build_network([], 0, 1, dense=dense)

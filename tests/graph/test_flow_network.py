import networkx as nx
import numpy as np
import pytest

from gridcut.graph import FlowNetwork


def test_terminals_are_added_as_nodes():
    g = FlowNetwork(source="s", sink="t")
    assert set(g) == {"s", "t"}
    assert g.source == "s"
    assert g.sink == "t"
    assert g.graph["source"] == "s"


def test_add_node_is_idempotent():
    g = FlowNetwork()
    g.add_node("A")
    g.set_height("A", 7)
    g.set_excess("A", 3)
    g.add_node("A")
    assert len(g) == 1
    assert g.height("A") == 7
    assert g.excess("A") == 3


def test_new_node_labels_are_zero():
    g = FlowNetwork()
    g.add_node(5)
    assert g.height(5) == 0
    assert g.excess(5) == 0


def test_add_edge_first_writer_wins():
    g = FlowNetwork()
    g.add_node("A")
    g.add_node("B")
    assert g.add_edge("A", "B", 3, 1) is True
    assert g.add_edge("A", "B", 10, 0) is False
    assert g.capacity("A", "B") == 3
    assert g.flow("A", "B") == 1
    assert g.number_of_edges() == 1


def test_add_edge_does_not_create_reverse():
    g = FlowNetwork()
    g.add_node("A")
    g.add_node("B")
    g.add_edge("A", "B", 3)
    assert not g.has_edge("B", "A")
    assert g.missing_reverse_edges() == [("A", "B")]


def test_add_edge_requires_existing_nodes():
    g = FlowNetwork()
    g.add_node("A")
    with pytest.raises(ValueError, match="Target node 'B' does not exist"):
        g.add_edge("A", "B", 1)
    with pytest.raises(ValueError, match="Source node 'C' does not exist"):
        g.add_edge("C", "A", 1)


@pytest.mark.parametrize("capacity", [1.5, "3", True, None])
def test_add_edge_rejects_non_integer_capacity(capacity):
    g = FlowNetwork()
    g.add_node("A")
    g.add_node("B")
    with pytest.raises(TypeError):
        g.add_edge("A", "B", capacity)


def test_add_edge_accepts_numpy_integers():
    g = FlowNetwork()
    g.add_node("A")
    g.add_node("B")
    g.add_edge("A", "B", np.int64(4))
    assert g.capacity("A", "B") == 4
    assert type(g.capacity("A", "B")) is int


def test_add_edge_rejects_negative_capacity_and_self_loops():
    g = FlowNetwork()
    g.add_node("A")
    g.add_node("B")
    with pytest.raises(ValueError, match="non-negative"):
        g.add_edge("A", "B", -1)
    with pytest.raises(ValueError, match="Self-loop"):
        g.add_edge("A", "A", 1)


def test_absent_edge_reads_as_zero():
    g = FlowNetwork()
    g.add_node("A")
    g.add_node("B")
    assert g.capacity("A", "B") == 0
    assert g.flow("A", "B") == 0
    assert g.residual_capacity("A", "B") == 0
    assert g.capacity("X", "Y") == 0


def test_residual_capacity_with_negative_flow():
    g = FlowNetwork()
    g.add_node("A")
    g.add_node("B")
    g.add_edge_pair("A", "B", 5)
    g.set_flow("A", "B", 2)
    g.set_flow("B", "A", -2)
    assert g.residual_capacity("A", "B") == 3
    assert g.residual_capacity("B", "A") == 2


def test_set_flow_on_missing_edge_raises():
    g = FlowNetwork()
    g.add_node("A")
    g.add_node("B")
    with pytest.raises(ValueError, match="No edge"):
        g.set_flow("A", "B", 1)


def test_neighbors_include_zero_capacity_edges_in_insertion_order():
    g = FlowNetwork()
    for n in "ABCD":
        g.add_node(n)
    g.add_edge("A", "C", 1)
    g.add_edge("A", "B", 0)
    g.add_edge("D", "A", 2)
    g.ensure_reverse_edges()
    assert list(g.neighbors("A")) == ["C", "B", "D"]


def test_neighbors_of_missing_node_raises():
    g = FlowNetwork()
    with pytest.raises(ValueError):
        g.neighbors("nope")


def test_ensure_reverse_edges_keeps_natural_reverse():
    g = FlowNetwork()
    for n in "AB":
        g.add_node(n)
    g.add_edge("A", "B", 3)
    g.add_edge("B", "A", 2)
    assert g.ensure_reverse_edges() == 0
    assert g.capacity("B", "A") == 2


def test_ensure_reverse_edges_adds_zero_capacity_twins():
    g = FlowNetwork()
    for n in "ABC":
        g.add_node(n)
    g.add_edge("A", "B", 3)
    g.add_edge("B", "C", 4)
    assert g.ensure_reverse_edges() == 2
    assert g.capacity("B", "A") == 0
    assert g.capacity("C", "B") == 0
    assert g.missing_reverse_edges() == []


def test_reset_flow():
    g = FlowNetwork(source="s", sink="t")
    g.add_edge_pair("s", "t", 4)
    g.set_flow("s", "t", 4)
    g.set_flow("t", "s", -4)
    g.set_height("s", 2)
    g.set_excess("t", 4)
    g.reset_flow()
    assert g.flow("s", "t") == 0
    assert g.flow("t", "s") == 0
    assert g.height("s") == 0
    assert g.excess("t") == 0
    assert g.capacity("s", "t") == 4


def test_copy_is_deep_and_keeps_terminals():
    g = FlowNetwork(source="s", sink="t")
    g.add_edge_pair("s", "t", 4)
    g2 = g.copy()
    g2.set_flow("s", "t", 4)
    assert g2.source == "s"
    assert g2.sink == "t"
    assert g.flow("s", "t") == 0
    assert g2.flow("s", "t") == 4


def test_networkx_algorithms_accept_flow_network():
    g = FlowNetwork(source="s", sink="t")
    g.add_node("a")
    g.add_edge_pair("s", "a", 3)
    g.add_edge_pair("a", "t", 2)
    assert nx.maximum_flow_value(g, "s", "t") == 2

"""Node-link serialization of flow networks.

The persistence layer stores networks in whatever medium it likes; this module
only converts between a network and a plain, JSON-friendly dict. Loading goes
through ``add_node``/``add_edge``, so a reloaded network is validated exactly
like a freshly built one.
"""

from __future__ import annotations

from typing import Any, Dict

from gridcut.graph import AnyFlowNetwork, DenseFlowNetwork, FlowNetwork
from gridcut.types import NodeID


def network_to_node_link(network: AnyFlowNetwork) -> Dict[str, Any]:
    """
    Convert a flow network into a node-link dict.

    The returned dict has the following structure:
        {
            "graph": {"source": ..., "sink": ..., ... graph attributes ...},
            "dense": {"node_count": int, "dtype": str} or None,
            "nodes": [{"id": node_id, "height": int, "excess": int}, ...],
            "links": [
                {"source": <node index>, "target": <node index>,
                 "capacity": int, "flow": int},
                ...
            ]
        }

    Node ids must be JSON scalars if the dict is to be stored as JSON.

    Args:
        network: The network to convert.

    Returns:
        The node-link dict.
    """
    node_list = list(network)
    node_map = {node_id: i for i, node_id in enumerate(node_list)}

    dense = None
    if isinstance(network, DenseFlowNetwork):
        dense = {"node_count": network.node_count, "dtype": network.dtype.name}

    return {
        "graph": dict(network.graph),
        "dense": dense,
        "nodes": [
            {
                "id": node_id,
                "height": network.height(node_id),
                "excess": network.excess(node_id),
            }
            for node_id in node_list
        ],
        "links": [
            {
                "source": node_map[u],
                "target": node_map[v],
                "capacity": network.capacity(u, v),
                "flow": network.flow(u, v),
            }
            for u, v in network.edge_pairs()
        ],
    }


def node_link_to_network(data: Dict[str, Any]) -> AnyFlowNetwork:
    """
    Rebuild a flow network from its node-link dict.

    Args:
        data: A dict produced by ``network_to_node_link``.

    Returns:
        A ``FlowNetwork``, or a ``DenseFlowNetwork`` when ``data["dense"]`` is set.

    Raises:
        ValueError: If a link references an unknown node index, or on any
            validation error raised by the network itself.
    """
    graph_attrs = dict(data.get("graph", {}))
    source = graph_attrs.pop("source", None)
    sink = graph_attrs.pop("sink", None)

    dense = data.get("dense")
    network: AnyFlowNetwork
    if dense:
        network = DenseFlowNetwork(
            dense["node_count"], source, sink, dtype=dense["dtype"], **graph_attrs
        )
    else:
        network = FlowNetwork(source=source, sink=sink, **graph_attrs)

    node_map: Dict[int, NodeID] = {}
    for idx, node_obj in enumerate(data.get("nodes", [])):
        node_id = node_obj["id"]
        network.add_node(node_id)
        network.set_height(node_id, node_obj.get("height", 0))
        network.set_excess(node_id, node_obj.get("excess", 0))
        node_map[idx] = node_id

    for link in data.get("links", []):
        try:
            u = node_map[link["source"]]
            v = node_map[link["target"]]
        except KeyError:
            raise ValueError(f"Link {link} references an unknown node index.") from None
        network.add_edge(u, v, link.get("capacity", 0), link.get("flow", 0))

    return network

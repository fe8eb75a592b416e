"""Flow network primitives.

This package provides the sparse ``FlowNetwork`` (networkx-backed), the dense
``DenseFlowNetwork`` (numpy-backed) and node-link serialization (``io``).
"""

from __future__ import annotations

from typing import Union

from gridcut.graph.dense import DenseFlowNetwork, dense_dtype_for
from gridcut.graph.flow_network import FlowNetwork

#: Either network flavour; both expose the same flow contract.
AnyFlowNetwork = Union[FlowNetwork, DenseFlowNetwork]

__all__ = ["AnyFlowNetwork", "DenseFlowNetwork", "FlowNetwork", "dense_dtype_for"]

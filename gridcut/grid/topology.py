"""Implicit 8-connected grid graph and its flow-network constructions.

Cells are linear indices ``x + y * size`` into a square grid. Walls never
become nodes. All source cells collapse into ``sources[0]`` and all sink
cells into ``sinks[0]``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import numpy as np

from gridcut.algorithms.distance import AdjacencyFunc, distance_field
from gridcut.algorithms.min_cut import min_cut
from gridcut.algorithms.push_relabel import push_relabel_max_flow
from gridcut.config import GRID_CONFIG
from gridcut.graph import (
    AnyFlowNetwork,
    DenseFlowNetwork,
    FlowNetwork,
    dense_dtype_for,
)
from gridcut.logging import get_logger
from gridcut.results import GridCut, MinCut
from gridcut.types import Adjacency, CutModel

logger = get_logger(__name__)


def rectangle(
    top_left: int, bottom_right: int, size: Optional[int] = None
) -> List[int]:
    """Cells of the rectangle spanned by two corner cells, clipped to the grid."""
    size = GRID_CONFIG.size if size is None else size
    x0, y0 = top_left % size, top_left // size
    x1, y1 = bottom_right % size, bottom_right // size
    return [
        x + y * size
        for y in range(max(y0, 0), min(y1, size - 1) + 1)
        for x in range(max(x0, 0), min(x1, size - 1) + 1)
    ]


def cells_around(cells: Iterable[int], size: Optional[int] = None) -> List[int]:
    """
    Expand each cell into its clipped 3x3 block (the cell included).

    Used to turn exit cells into the sink cells surrounding them.

    Returns:
        List[int]: Distinct cells in first-seen order.
    """
    size = GRID_CONFIG.size if size is None else size
    expanded: Dict[int, None] = {}
    for cell in cells:
        x, y = cell % size, cell // size
        top_left = max(x - 1, 0) + max(y - 1, 0) * size
        bottom_right = min(x + 1, size - 1) + min(y + 1, size - 1) * size
        for c in rectangle(top_left, bottom_right, size):
            expanded[c] = None
    return list(expanded)


class GridTopology:
    """
    Grid snapshot with protected sources, exit sinks and walls.

    Builds flow networks from the snapshot and maps cuts and distances back
    to cells. Instances are immutable after construction; a terrain change
    needs a new topology and a new network.

    Attributes:
        size: Side length of the grid.
        cell_count: ``size * size``.
        sources: Source cells; ``sources[0]`` represents all of them.
        sinks: Sink cells; ``sinks[0]`` represents all of them.
        walls: Impassable cells.
    """

    def __init__(
        self,
        sources: Sequence[int],
        sinks: Sequence[int],
        walls: Iterable[int] = (),
        size: Optional[int] = None,
    ) -> None:
        """
        Args:
            sources: Protected cells, non-empty.
            sinks: Exit-side cells, non-empty.
            walls: Impassable cells.
            size: Grid side length; defaults to ``GRID_CONFIG.size``.

        Raises:
            ValueError: On empty terminal groups, out-of-range cells or cells
                that belong to more than one group.
        """
        self.size = GRID_CONFIG.size if size is None else size
        if self.size < 1:
            raise ValueError(f"Grid size must be positive, got {self.size}.")
        self.cell_count = self.size * self.size

        self.sources = list(dict.fromkeys(sources))
        self.sinks = list(dict.fromkeys(sinks))
        self.walls = frozenset(walls)
        if not self.sources:
            raise ValueError("At least one source cell is required.")
        if not self.sinks:
            raise ValueError("At least one sink cell is required.")
        for group, cells in (
            ("source", self.sources),
            ("sink", self.sinks),
            ("wall", self.walls),
        ):
            for cell in cells:
                if not 0 <= cell < self.cell_count:
                    raise ValueError(
                        f"{group.capitalize()} cell {cell} is outside the "
                        f"{self.size}x{self.size} grid."
                    )

        self._source_set = frozenset(self.sources)
        self._sink_set = frozenset(self.sinks)
        overlap = (
            (self._source_set & self._sink_set)
            | (self._source_set & self.walls)
            | (self._sink_set & self.walls)
        )
        if overlap:
            raise ValueError(
                f"Cells {sorted(overlap)} belong to more than one of "
                "sources, sinks and walls."
            )

    @property
    def source(self) -> int:
        return self.sources[0]

    @property
    def sink(self) -> int:
        return self.sinks[0]

    def out_node(self, cell: int) -> int:
        """Node id of the out-copy of ``cell`` in the vertex model."""
        return cell + self.cell_count

    #
    # Adjacency
    #
    def surrounding(self, cell: int) -> List[int]:
        """The up to 8 cells around ``cell``, clipped at the grid edge."""
        x, y = cell % self.size, cell // self.size
        return [
            nx_ + ny_ * self.size
            for ny_ in range(max(y - 1, 0), min(y + 1, self.size - 1) + 1)
            for nx_ in range(max(x - 1, 0), min(x + 1, self.size - 1) + 1)
            if not (nx_ == x and ny_ == y)
        ]

    def node_for(self, cell: int) -> Optional[int]:
        """Representative node of ``cell``; None for walls."""
        if cell in self._source_set:
            return self.source
        if cell in self._sink_set:
            return self.sink
        if cell in self.walls:
            return None
        return cell

    def neighbors(self, cell: int) -> List[int]:
        """
        Collapsed neighbor nodes of ``cell``.

        A source or sink cell answers for its whole group: the result covers
        the surroundings of every member cell. Walls have no neighbors and the
        node itself is never listed.
        """
        node = self.node_for(cell)
        if node is None:
            return []
        if node == self.source:
            members: Sequence[int] = self.sources
        elif node == self.sink:
            members = self.sinks
        else:
            members = (cell,)

        found: Dict[int, None] = {}
        for member in members:
            for adjacent in self.surrounding(member):
                neighbor = self.node_for(adjacent)
                if neighbor is not None and neighbor != node:
                    found[neighbor] = None
        return list(found)

    def free_cells(self) -> List[int]:
        """Cells that are neither walls nor terminals, ascending."""
        return [
            cell
            for cell in range(self.cell_count)
            if cell not in self.walls
            and cell not in self._source_set
            and cell not in self._sink_set
        ]

    #
    # Network construction
    #
    def build_network(
        self,
        model: CutModel = CutModel.VERTEX,
        dense: bool = False,
        dtype: Optional[Any] = None,
    ) -> AnyFlowNetwork:
        """
        Build a flow network from the grid.

        Args:
            model: ``CutModel.VERTEX`` splits each free cell into a unit
                capacity in/out pair, so the min cut is an exact set of
                cells. ``CutModel.EDGE`` links adjacent cells with unit
                capacity edges in both directions.
            dense: Use a ``DenseFlowNetwork`` instead of a ``FlowNetwork``.
            dtype: Capacity dtype for dense networks. By default the
                narrowest of ``GRID_CONFIG.dense_dtype``, int32 and int64
                that holds the largest capacity is used.

        Returns:
            AnyFlowNetwork: The network, with ``graph["model"]`` set.

        Raises:
            ValueError: In the vertex model, if a source cell touches a sink
                cell (no finite separating set of cells exists), or if a
                dense dtype cannot hold the capacities.
        """
        model = CutModel(model)
        attrs = {"model": model.name.lower(), "size": self.size}
        network: AnyFlowNetwork
        if dense:
            node_count = self.cell_count * (2 if model == CutModel.VERTEX else 1)
            if dtype is None:
                largest = self._unbounded() if model == CutModel.VERTEX else 1
                dtype = dense_dtype_for(largest, node_count)
            network = DenseFlowNetwork(
                node_count, self.source, self.sink, dtype=dtype, **attrs
            )
        else:
            network = FlowNetwork(source=self.source, sink=self.sink, **attrs)

        if model == CutModel.VERTEX:
            self._build_vertex_network(network)
        else:
            self._build_edge_network(network)
        logger.info(
            "Built %s network for %dx%d grid: %d nodes, %d edges",
            attrs["model"],
            self.size,
            self.size,
            len(network),
            network.number_of_edges(),
        )
        return network

    def _unbounded(self) -> int:
        """Vertex-model link capacity; exceeds any cut of unit in/out edges."""
        return len(self.free_cells()) + 1

    def _build_edge_network(self, network: AnyFlowNetwork) -> None:
        free = self.free_cells()
        for cell in free:
            network.add_node(cell)

        terminal_edges = 0
        for cell in free:
            for neighbor in self.neighbors(cell):
                # Free-cell twins are added when ``neighbor`` is visited
                network.add_edge(cell, neighbor, 1, 0)
                if neighbor == self.source or neighbor == self.sink:
                    network.add_edge(neighbor, cell, 1, 0)
                    terminal_edges += 1
        logger.debug(
            "Edge model: %d free cells, %d terminal adjacencies",
            len(free),
            terminal_edges,
        )

    def _build_vertex_network(self, network: AnyFlowNetwork) -> None:
        if self.sink in self.neighbors(self.source):
            raise ValueError(
                f"A source cell touches sink cell group {self.sink}; "
                "no set of cells separates them."
            )

        free = self.free_cells()
        unbounded = self._unbounded()
        for cell in free:
            network.add_node(cell)
            network.add_node(self.out_node(cell))
            network.add_edge_pair(cell, self.out_node(cell), 1)

        for cell in free:
            for neighbor in self.neighbors(cell):
                if neighbor == self.source:
                    network.add_edge_pair(self.source, cell, unbounded)
                elif neighbor == self.sink:
                    network.add_edge_pair(self.out_node(cell), self.sink, unbounded)
                else:
                    network.add_edge_pair(self.out_node(cell), neighbor, unbounded)
        logger.debug("Vertex model: %d free cells split into in/out pairs", len(free))

    #
    # Cuts
    #
    def cut_cells(self, network: AnyFlowNetwork, cut: MinCut) -> List[int]:
        """
        Cells to wall off so that no source cell can reach a sink cell.

        Args:
            network: The solved network built by ``build_network``.
            cut: Its ``MinCut``.

        Returns:
            List[int]: Ascending cell indices.
        """
        if network.graph.get("model") == CutModel.VERTEX.name.lower():
            return [
                cell
                for cell in self.free_cells()
                if cell in cut.reachable and self.out_node(cell) not in cut.reachable
            ]
        cells = {
            node for node in cut.boundary if node != self.source and node != self.sink
        }
        if self.sink in cut.boundary:
            # Saturated cell -> sink edges: wall the reachable tail cell
            cells.update(u for u, v in cut.cut_edges if v == self.sink)
        return sorted(cells)

    def solve(
        self,
        model: CutModel = CutModel.VERTEX,
        dense: bool = False,
        dtype: Optional[Any] = None,
    ) -> GridCut:
        """Build a network, run max flow and return the cells to wall off."""
        model = CutModel(model)
        network = self.build_network(model=model, dense=dense, dtype=dtype)
        max_flow = push_relabel_max_flow(network)
        cut = min_cut(network)
        cut_cells = self.cut_cells(network, cut)

        if model == CutModel.VERTEX:
            reachable = [
                cell
                for cell in self.free_cells()
                if self.out_node(cell) in cut.reachable
            ]
        else:
            reachable = [cell for cell in self.free_cells() if cell in cut.reachable]
        logger.info(
            "Grid cut (%s): max flow %d, %d cut cells",
            model.name.lower(),
            max_flow,
            len(cut_cells),
        )
        return GridCut(
            model=model,
            max_flow=max_flow,
            cut_cells=cut_cells,
            reachable_cells=sorted(self.sources + reachable),
        )

    #
    # Distance transform
    #
    def outer_cells(self) -> List[int]:
        """
        Default boundary for distance transforms.

        The sink representative, then every free cell that touches a sink cell
        or has fewer than 8 traversable cells around it (next to a wall or the
        grid edge).
        """
        outer = [self.sink]
        for cell in self.free_cells():
            around = self.surrounding(cell)
            traversable = [c for c in around if c not in self.walls]
            if len(traversable) < 8 or any(c in self._sink_set for c in around):
                outer.append(cell)
        return outer

    def distance_transform(
        self,
        boundary: Optional[Iterable[int]] = None,
        network: Optional[AnyFlowNetwork] = None,
        adjacency: Union[Adjacency, AdjacencyFunc] = Adjacency.RAW,
    ) -> np.ndarray:
        """
        Per-cell hop distance from the nearest boundary cell.

        Args:
            boundary: Boundary cells; defaults to ``outer_cells()``.
            network: An edge-model network of this grid, possibly solved. A
                fresh one is built when omitted.
            adjacency: ``Adjacency.RAW`` for plain grid distance,
                ``Adjacency.RESIDUAL`` for distance in the residual network of
                a solved ``network``.

        Returns:
            np.ndarray: Array of length ``size * size`` with dtype
            ``GRID_CONFIG.distance_dtype``. Cells of a collapsed group share
            its distance; walls and unreached cells hold the sentinel.

        Raises:
            ValueError: If ``network`` is not an edge-model network or a
                boundary cell is a wall.
        """
        if network is None:
            network = self.build_network(model=CutModel.EDGE)
        elif network.graph.get("model") != CutModel.EDGE.name.lower():
            raise ValueError("Distance transforms need an edge-model network.")

        if boundary is None:
            boundary = self.outer_cells()
        nodes = []
        for cell in boundary:
            node = self.node_for(cell)
            if node is None:
                raise ValueError(f"Boundary cell {cell} is a wall.")
            nodes.append(node)

        unreached = GRID_CONFIG.unreached()
        distances = distance_field(
            network, nodes, adjacency=adjacency, unreached=unreached
        )

        field = np.full(self.cell_count, unreached, dtype=GRID_CONFIG.distance_dtype)
        for cell in range(self.cell_count):
            node = self.node_for(cell)
            if node is not None and node in distances:
                field[cell] = distances[node]
        return field

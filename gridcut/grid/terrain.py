"""Terrain snapshots: the boundary between terrain data and grid topologies.

A snapshot lists wall, source and sink cells of a square grid. It can be
decoded from a raw terrain buffer, from text rows, or from a YAML document
holding text rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import yaml

from gridcut.config import GRID_CONFIG
from gridcut.grid.topology import GridTopology, cells_around
from gridcut.types import CutModel

#: Bit set in a raw terrain value when the tile is a wall.
TERRAIN_MASK_WALL = 1

#: Text map symbols.
WALL = "#"
SOURCE = "S"
SINK = "T"
EXIT = "E"
FREE = "."


def exits_to_sinks(
    exits: Iterable[int],
    size: int,
    walls: Iterable[int] = (),
    sources: Iterable[int] = (),
) -> List[int]:
    """Cells within one step of an exit that are neither walls nor sources."""
    excluded = set(walls) | set(sources)
    return [cell for cell in cells_around(exits, size) if cell not in excluded]


@dataclass
class TerrainSnapshot:
    """Cell lists of one grid snapshot.

    Attributes:
        size: Side length of the square grid.
        walls: Wall cells.
        sources: Protected cells.
        sinks: Exit-side cells.
        model: Preferred cut construction for this snapshot.
    """

    size: int
    walls: List[int] = field(default_factory=list)
    sources: List[int] = field(default_factory=list)
    sinks: List[int] = field(default_factory=list)
    model: CutModel = CutModel.VERTEX

    @classmethod
    def from_raw_buffer(
        cls,
        buffer: Sequence[int],
        sources: Sequence[int],
        exits: Sequence[int],
        size: Optional[int] = None,
    ) -> TerrainSnapshot:
        """
        Decode a raw terrain buffer with one integer per cell.

        A cell is a wall when ``value & TERRAIN_MASK_WALL`` is set. Exits are
        expanded into the traversable cells around them, which become sinks.

        Raises:
            ValueError: If the buffer length is not ``size * size``.
        """
        size = GRID_CONFIG.size if size is None else size
        if len(buffer) != size * size:
            raise ValueError(
                f"Terrain buffer has {len(buffer)} cells, expected {size * size}."
            )
        walls = [i for i, value in enumerate(buffer) if value & TERRAIN_MASK_WALL]
        sinks = exits_to_sinks(exits, size, walls, sources)
        return cls(size=size, walls=walls, sources=list(sources), sinks=sinks)

    @classmethod
    def from_rows(
        cls, rows: Sequence[str], model: CutModel = CutModel.VERTEX
    ) -> TerrainSnapshot:
        """
        Parse a square text map.

        Symbols: ``#`` wall, ``S`` source, ``T`` sink, ``E`` exit (its
        traversable surroundings become sinks), ``.`` free.

        Raises:
            ValueError: If the map is not square or holds an unknown symbol.
        """
        rows = [row.strip() for row in rows if row.strip()]
        size = len(rows)
        if size == 0:
            raise ValueError("Terrain map is empty.")

        walls: List[int] = []
        sources: List[int] = []
        sinks: List[int] = []
        exits: List[int] = []
        for y, row in enumerate(rows):
            if len(row) != size:
                raise ValueError(
                    f"Terrain row {y} has {len(row)} cells; the map must be "
                    f"{size}x{size}."
                )
            for x, symbol in enumerate(row):
                cell = x + y * size
                if symbol == WALL:
                    walls.append(cell)
                elif symbol == SOURCE:
                    sources.append(cell)
                elif symbol == SINK:
                    sinks.append(cell)
                elif symbol == EXIT:
                    exits.append(cell)
                elif symbol != FREE:
                    raise ValueError(
                        f"Unknown terrain symbol '{symbol}' at ({x}, {y})."
                    )

        for cell in exits_to_sinks(exits, size, walls, sources):
            if cell not in sinks:
                sinks.append(cell)
        return cls(size=size, walls=walls, sources=sources, sinks=sinks, model=model)

    def to_topology(self) -> GridTopology:
        return GridTopology(self.sources, self.sinks, self.walls, size=self.size)


def load_terrain_yaml(yaml_str: str) -> TerrainSnapshot:
    """
    Load a terrain snapshot from YAML.

    Expected document::

        terrain: |
          #####
          #S..E
          ...
        model: vertex  # optional, "vertex" or "edge"

    ``terrain`` may also be a list of row strings.

    Raises:
        ValueError: If the document shape is wrong.
    """
    data: Any = yaml.safe_load(yaml_str)
    if not isinstance(data, dict):
        raise ValueError("The provided YAML must map to a dictionary at top-level.")
    unknown = set(data) - {"terrain", "model"}
    if unknown:
        raise ValueError(f"Unrecognized terrain keys: {sorted(unknown)}")

    terrain: Union[str, List[str], None] = data.get("terrain")
    if isinstance(terrain, str):
        rows = terrain.splitlines()
    elif isinstance(terrain, list) and all(isinstance(row, str) for row in terrain):
        rows = terrain
    else:
        raise ValueError("'terrain' must be a string or a list of row strings")

    model = CutModel.from_string(str(data.get("model", "vertex")))
    return TerrainSnapshot.from_rows(rows, model=model)


def terrain_summary(snapshot: TerrainSnapshot) -> Dict[str, int]:
    """Cell counts per role, for logs and CLI output."""
    return {
        "size": snapshot.size,
        "walls": len(snapshot.walls),
        "sources": len(snapshot.sources),
        "sinks": len(snapshot.sinks),
    }

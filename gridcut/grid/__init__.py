"""Grid topologies and terrain snapshots."""

from gridcut.grid.terrain import TerrainSnapshot, exits_to_sinks, load_terrain_yaml
from gridcut.grid.topology import GridTopology, cells_around, rectangle

__all__ = [
    "GridTopology",
    "TerrainSnapshot",
    "cells_around",
    "exits_to_sinks",
    "load_terrain_yaml",
    "rectangle",
]

"""Configuration classes for gridcut components."""

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class SolverConfig:
    """Configuration for the push-relabel solver."""

    # Hard ceiling on push/relabel operations; None disables the ceiling
    max_iterations: Optional[int] = None

    # Emit a debug progress line every N operations; 0 disables progress lines
    log_every: int = 0


@dataclass
class GridConfig:
    """Configuration for grid construction and grid-level outputs."""

    # Side length of the square grid
    size: int = 50

    # Integer dtype used for distance fields
    distance_dtype: str = "uint16"

    # Integer dtype used for capacity/flow matrices of dense networks
    dense_dtype: str = "int16"

    def unreached(self) -> int:
        """Sentinel distance for nodes that no boundary node reaches."""
        return int(np.iinfo(np.dtype(self.distance_dtype)).max)


# Global configuration instances
SOLVER_CONFIG = SolverConfig()
GRID_CONFIG = GridConfig()

"""Enums and aliases shared across gridcut modules."""

from __future__ import annotations

from enum import IntEnum
from typing import Hashable, Tuple

#: Opaque node identity: a grid index or any hashable label.
NodeID = Hashable

#: Directed node pair identifying an edge.
EdgePair = Tuple[NodeID, NodeID]


class _FromString:
    @classmethod
    def from_string(cls, value: str):
        """Parse a case-insensitive member name.

        Raises:
            ValueError: If the string doesn't match any enum member.
        """
        try:
            return cls[value.upper()]  # type: ignore[index]
        except KeyError:
            valid = ", ".join(e.name.lower() for e in cls)  # type: ignore[attr-defined]
            raise ValueError(
                f"Invalid {cls.__name__} '{value}'. Valid values are: {valid}"
            ) from None


class Adjacency(_FromString, IntEnum):
    """Edge predicate used when walking a flow network."""

    #: Every stored edge, including zero-capacity reverse placeholders.
    RAW = 1
    #: Only edges with positive residual capacity.
    RESIDUAL = 2
    USER_DEFINED = 99


class CutModel(_FromString, IntEnum):
    """How grid cells map onto a flow network."""

    #: Unit-capacity cell-to-cell edges; the cut approximates a vertex separator.
    EDGE = 1
    #: Each cell split into in/out copies joined by a unit edge; exact vertex cut.
    VERTEX = 2

from __future__ import annotations

from typing import List, Protocol, Tuple


class OpaqueGrid(Protocol):
    """
    Defines what visibility code needs from a grid.
    Any grid-like type exposing these members can be used for field of view.
    """

    width: int
    height: int

    def in_bounds(self, x: int, y: int) -> bool:
        ...

    def index_of(self, x: int, y: int) -> int:
        ...

    def is_opaque(self, index: int) -> bool:
        ...


class PathingGrid(Protocol):
    """
    Defines what distance-field code needs from a grid.
    Tiles are addressed by row-major index; exits carry their step cost.
    """

    width: int
    height: int

    def pathing_distance(self, index_a: int, index_b: int) -> float:
        ...

    def exits_of(self, index: int) -> List[Tuple[int, float]]:
        ...

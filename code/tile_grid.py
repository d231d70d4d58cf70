"""Tile grid data model and the spatial queries the algorithms rely on."""

from __future__ import annotations

import math
from enum import Enum
from typing import List, Tuple

from level_constants import DIAGONAL_COST, ORTHOGONAL_COST
from level_geometry import DIAGONAL_OFFSETS, ORTHOGONAL_OFFSETS, Rect, TilePos


class TileKind(Enum):
    """The closed set of tile kinds a level is built from."""

    WALL = 0
    FLOOR = 1
    DOWN_STAIRS = 2

    @property
    def is_walkable(self) -> bool:
        return self is not TileKind.WALL


class TileGrid:
    """One dungeon level: tiles, rooms, and the visibility bitmaps."""

    def __init__(
        self,
        width: int,
        height: int,
        depth: int = 1,
        fill: TileKind = TileKind.WALL,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("TileGrid width and height must be positive")
        self.width = width
        self.height = height
        self.depth = depth
        tile_count = width * height
        self.tiles: List[TileKind] = [fill] * tile_count
        self.rooms: List[Rect] = []
        self.visible_tiles: List[bool] = [False] * tile_count
        self.revealed_tiles: List[bool] = [False] * tile_count
        self.starting_position = TilePos(0, 0)

    def __len__(self) -> int:
        return len(self.tiles)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def index_of(self, x: int, y: int) -> int:
        """Return the row-major index of ``(x, y)``; out-of-bounds input is an error."""
        if not self.in_bounds(x, y):
            raise IndexError(f"Tile {(x, y)} is outside the {self.width}x{self.height} grid")
        return y * self.width + x

    def position_of(self, index: int) -> TilePos:
        if not (0 <= index < len(self.tiles)):
            raise IndexError(f"Tile index {index} out of range")
        return TilePos(index % self.width, index // self.width)

    def tile_at(self, x: int, y: int) -> TileKind:
        return self.tiles[self.index_of(x, y)]

    def set_tile(self, x: int, y: int, kind: TileKind) -> None:
        self.tiles[self.index_of(x, y)] = kind

    def indices_of(self, kind: TileKind) -> List[int]:
        return [idx for idx, tile in enumerate(self.tiles) if tile is kind]

    def count(self, kind: TileKind) -> int:
        return sum(1 for tile in self.tiles if tile is kind)

    def tile_bytes(self) -> bytes:
        """Return one byte per tile, suitable for exact comparisons between runs."""
        return bytes(tile.value for tile in self.tiles)

    def is_opaque(self, index: int) -> bool:
        return self.tiles[index] is TileKind.WALL

    def pathing_distance(self, index_a: int, index_b: int) -> float:
        """Straight-line distance between two tiles."""
        pos_a = self.position_of(index_a)
        pos_b = self.position_of(index_b)
        return math.hypot(pos_a.x - pos_b.x, pos_a.y - pos_b.y)

    def exits_of(self, index: int) -> List[Tuple[int, float]]:
        """Return ``(neighbour_index, cost)`` for every walkable neighbour.

        Diagonal steps are offered even when both flanking orthogonal tiles are
        walls, so paths may slip between two wall corners.
        """
        origin = self.position_of(index)
        exits: List[Tuple[int, float]] = []
        for offsets, cost in (
            (ORTHOGONAL_OFFSETS, ORTHOGONAL_COST),
            (DIAGONAL_OFFSETS, DIAGONAL_COST),
        ):
            for dx, dy in offsets:
                nx, ny = origin.x + dx, origin.y + dy
                if not self.in_bounds(nx, ny):
                    continue
                neighbour = ny * self.width + nx
                if self.tiles[neighbour] is TileKind.WALL:
                    continue
                exits.append((neighbour, cost))
        return exits

    def reset_visibility(self) -> None:
        """Clear the transient visible bitmap; revealed tiles are kept."""
        for idx in range(len(self.visible_tiles)):
            self.visible_tiles[idx] = False

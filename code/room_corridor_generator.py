"""Rectangular room placement joined by L-shaped corridors."""

from __future__ import annotations

from typing import List, Optional

from generator_base import GridGenerator, LevelGenerationError
from level_config import RoomCorridorConfig
from level_geometry import Rect
from tile_grid import TileGrid, TileKind


class RoomCorridorGenerator(GridGenerator[RoomCorridorConfig]):
    """Places non-overlapping rooms and tunnels each new room to the previous one."""

    name = "rooms_and_corridors"

    def generate(self, depth: int, width: int, height: int) -> TileGrid:
        grid = TileGrid(width, height, depth)
        self._run_phase("place_rooms", self._place_rooms, grid)
        if not grid.rooms:
            raise LevelGenerationError(
                f"No rooms could be placed on a {width}x{height} grid "
                f"(room sizes {self.config.min_size}-{self.config.max_size})"
            )

        grid.starting_position = grid.rooms[0].center()
        stairs = grid.rooms[-1].center()
        grid.set_tile(stairs.x, stairs.y, TileKind.DOWN_STAIRS)
        return grid

    def _place_rooms(self, grid: TileGrid) -> None:
        for _ in range(self.config.max_rooms):
            candidate = self._random_room(grid.width, grid.height)
            if candidate is None or any(candidate.intersects(other) for other in grid.rooms):
                self._count("rooms_rejected")
                continue

            self._apply_room(grid, candidate)
            if grid.rooms:
                self._connect_rooms(grid, grid.rooms[-1], candidate)
            grid.rooms.append(candidate)
            self._count("rooms_placed")

    def _random_room(self, width: int, height: int) -> Optional[Rect]:
        w = self.rng.randint(self.config.min_size, self.config.max_size)
        h = self.rng.randint(self.config.min_size, self.config.max_size)
        x_span = width - w - 1
        y_span = height - h - 1
        if x_span < 1 or y_span < 1:
            return None
        x = self.rng.randint(1, x_span) - 1
        y = self.rng.randint(1, y_span) - 1
        return Rect.from_size(x, y, w, h)

    @staticmethod
    def _apply_room(grid: TileGrid, room: Rect) -> None:
        for tile in room.interior():
            grid.set_tile(tile.x, tile.y, TileKind.FLOOR)

    def _connect_rooms(self, grid: TileGrid, previous: Rect, room: Rect) -> None:
        prev_x, prev_y = previous.center()
        new_x, new_y = room.center()
        if self.rng.randrange(2) == 1:
            carve_horizontal_tunnel(grid, prev_x, new_x, prev_y)
            carve_vertical_tunnel(grid, prev_y, new_y, new_x)
        else:
            carve_vertical_tunnel(grid, prev_y, new_y, prev_x)
            carve_horizontal_tunnel(grid, prev_x, new_x, new_y)


def _carve_indices(grid: TileGrid, indices: List[int]) -> None:
    tile_count = len(grid.tiles)
    for idx in indices:
        # Raw index arithmetic; anything outside the tile array is skipped.
        if 0 <= idx < tile_count:
            grid.tiles[idx] = TileKind.FLOOR


def carve_horizontal_tunnel(grid: TileGrid, x1: int, x2: int, y: int) -> None:
    _carve_indices(grid, [y * grid.width + x for x in range(min(x1, x2), max(x1, x2) + 1)])


def carve_vertical_tunnel(grid: TileGrid, y1: int, y2: int, x: int) -> None:
    _carve_indices(grid, [y * grid.width + x for y in range(min(y1, y2), max(y1, y2) + 1)])

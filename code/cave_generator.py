"""Cave levels grown with cellular automata, then pruned to one connected region."""

from __future__ import annotations

import math
from typing import List, Optional

from connectivity import compute_distances, farthest_index, is_reachable
from generator_base import GridGenerator, LevelGenerationError
from level_config import CaveConfig
from level_geometry import MOORE_OFFSETS, TilePos
from tile_grid import TileGrid, TileKind


class CellularAutomataGenerator(GridGenerator[CaveConfig]):
    """Grows organic caves and guarantees every floor tile is reachable from the start."""

    name = "cellular_automata"

    def generate(self, depth: int, width: int, height: int) -> TileGrid:
        grid = TileGrid(width, height, depth)
        self._run_phase("seed", self._randomize_interior, grid)
        for _ in range(self.config.iterations):
            self._run_phase("iterate", self._step, grid)

        start = find_starting_position(grid)
        if start is None:
            raise LevelGenerationError(
                f"No floor tile found scanning left from the centre of a {width}x{height} cave"
            )
        grid.starting_position = start

        cutoff = self.config.distance_cutoff if self.config.distance_cutoff is not None else math.inf
        pruned = self._run_phase(
            "repair", repair_connectivity, grid, grid.index_of(start.x, start.y), cutoff
        )
        self._count("tiles_pruned", pruned)
        return grid

    def _randomize_interior(self, grid: TileGrid) -> None:
        for y in range(1, grid.height - 1):
            for x in range(1, grid.width - 1):
                roll = self.rng.randint(1, 100)
                kind = TileKind.FLOOR if roll > self.config.initial_chance else TileKind.WALL
                grid.tiles[y * grid.width + x] = kind

    def _step(self, grid: TileGrid) -> None:
        previous = list(grid.tiles)
        width = grid.width
        for y in range(1, grid.height - 1):
            for x in range(1, width - 1):
                walls = 0
                for dx, dy in MOORE_OFFSETS:
                    if previous[(y + dy) * width + (x + dx)] is TileKind.WALL:
                        walls += 1
                idx = y * width + x
                if previous[idx] is TileKind.WALL:
                    survives = walls >= self.config.death_limit
                    grid.tiles[idx] = TileKind.WALL if survives else TileKind.FLOOR
                else:
                    grid.tiles[idx] = TileKind.WALL if walls > self.config.birth_limit else TileKind.FLOOR


def find_starting_position(grid: TileGrid) -> Optional[TilePos]:
    """Walk left from the grid centre and return the first floor tile."""
    x, y = grid.width // 2, grid.height // 2
    while x >= 0:
        if grid.tile_at(x, y) is TileKind.FLOOR:
            return TilePos(x, y)
        x -= 1
    return None


def repair_connectivity(grid: TileGrid, start_index: int, cutoff: float = math.inf) -> int:
    """Wall off floor the start cannot reach and put the stairs at the farthest floor.

    Returns the number of floor tiles converted to walls.
    """
    if grid.tiles[start_index] is TileKind.WALL:
        raise ValueError(f"Start tile {grid.position_of(start_index).to_tuple()} is a wall")
    for idx, tile in enumerate(grid.tiles):
        if tile is TileKind.DOWN_STAIRS:
            grid.tiles[idx] = TileKind.FLOOR

    distances = compute_distances(grid, [start_index], cutoff)
    pruned = 0
    floor_distances: List[float] = [math.inf] * len(grid.tiles)
    for idx, tile in enumerate(grid.tiles):
        if tile is not TileKind.FLOOR:
            continue
        if not is_reachable(distances[idx]):
            grid.tiles[idx] = TileKind.WALL
            pruned += 1
            continue
        floor_distances[idx] = distances[idx]

    # The start itself is floor at distance 0, so a farthest tile always exists.
    stairs_index = farthest_index(floor_distances)
    assert stairs_index is not None
    grid.tiles[stairs_index] = TileKind.DOWN_STAIRS
    return pruned

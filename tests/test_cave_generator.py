import math
import random
from typing import List

import pytest

from cave_generator import CellularAutomataGenerator, find_starting_position, repair_connectivity
from connectivity import compute_distances, is_reachable
from generator_base import LevelGenerationError
from level_config import CaveConfig
from level_geometry import TilePos
from metrics import GenerationMetrics
from tile_grid import TileGrid, TileKind


def _generate_caves(seeds, config: CaveConfig | None = None, size: int = 50) -> List[TileGrid]:
    grids = []
    for seed in seeds:
        generator = CellularAutomataGenerator(config or CaveConfig(), random.Random(seed))
        try:
            grids.append(generator.generate(1, size, size))
        except LevelGenerationError:
            continue
    return grids


@pytest.fixture(scope="module")
def caves() -> List[TileGrid]:
    grids = _generate_caves(range(8))
    assert grids, "expected at least one seed to produce a cave"
    return grids


def test_every_floor_tile_is_reachable_from_start(caves):
    for grid in caves:
        start = grid.index_of(grid.starting_position.x, grid.starting_position.y)
        distances = compute_distances(grid, [start], cutoff=math.inf)

        for idx, tile in enumerate(grid.tiles):
            if tile.is_walkable:
                assert is_reachable(distances[idx])


def test_exactly_one_stairs_tile(caves):
    for grid in caves:
        assert grid.count(TileKind.DOWN_STAIRS) == 1


def test_start_is_on_centre_row_and_walkable(caves):
    for grid in caves:
        start = grid.starting_position
        assert start.y == grid.height // 2
        assert start.x <= grid.width // 2
        assert grid.tile_at(start.x, start.y).is_walkable


def test_border_stays_solid_and_no_rooms_recorded(caves):
    for grid in caves:
        assert grid.rooms == []
        for x in range(grid.width):
            assert grid.tile_at(x, 0) is TileKind.WALL
            assert grid.tile_at(x, grid.height - 1) is TileKind.WALL
        for y in range(grid.height):
            assert grid.tile_at(0, y) is TileKind.WALL
            assert grid.tile_at(grid.width - 1, y) is TileKind.WALL


def test_same_seed_builds_identical_cave():
    # A sparse initial roll always leaves floor on the centre row.
    config = CaveConfig(initial_chance=20, iterations=3)
    first = CellularAutomataGenerator(config, random.Random(11)).generate(1, 40, 40)
    second = CellularAutomataGenerator(config, random.Random(11)).generate(1, 40, 40)
    other = CellularAutomataGenerator(config, random.Random(12)).generate(1, 40, 40)

    assert second.tile_bytes() == first.tile_bytes()
    assert second.starting_position == first.starting_position
    assert other.tile_bytes() != first.tile_bytes()


def test_solid_cave_has_no_start_and_raises():
    generator = CellularAutomataGenerator(CaveConfig(initial_chance=100, iterations=2), random.Random(3))

    with pytest.raises(LevelGenerationError):
        generator.generate(1, 30, 30)


def test_wall_biased_caves_are_repaired_into_one_region():
    grids = _generate_caves(range(20), CaveConfig(initial_chance=60), size=50)

    assert grids, "expected some wall-biased seeds to leave floor on the centre row"
    for grid in grids:
        start = grid.index_of(grid.starting_position.x, grid.starting_position.y)
        distances = compute_distances(grid, [start], cutoff=math.inf)
        assert all(is_reachable(distances[idx]) for idx in grid.indices_of(TileKind.FLOOR))
        assert grid.count(TileKind.DOWN_STAIRS) == 1
        assert is_reachable(distances[grid.indices_of(TileKind.DOWN_STAIRS)[0]])


def test_metrics_record_each_phase():
    metrics = GenerationMetrics()
    config = CaveConfig(initial_chance=20, iterations=5)
    generator = CellularAutomataGenerator(config, random.Random(4), metrics)

    generator.generate(1, 40, 40)

    assert metrics.phases["cellular_automata.seed"].invocations == 1
    assert metrics.phases["cellular_automata.iterate"].invocations == 5
    assert metrics.phases["cellular_automata.repair"].invocations == 1
    assert metrics.counter("tiles_pruned") >= 0


def test_find_starting_position_scans_left_from_centre(make_grid):
    grid = make_grid(
        [
            "#######",
            "#.....#",
            "#.##..#",
            "#.....#",
            "#######",
        ]
    )

    assert find_starting_position(grid) == TilePos(1, 2)


def test_find_starting_position_ignores_floor_right_of_centre(make_grid):
    grid = make_grid(["....", "#...", "...."])

    assert find_starting_position(grid) == TilePos(2, 1)
    assert find_starting_position(make_grid(["...", "##.", "..."])) is None


def test_repair_walls_off_pockets_and_places_stairs(make_grid):
    grid = make_grid(
        [
            "#########",
            "#...#...#",
            "#.>.#...#",
            "#...#...#",
            "#########",
        ]
    )

    pruned = repair_connectivity(grid, grid.index_of(1, 1))

    assert pruned == 9
    assert all(grid.tile_at(x, y) is TileKind.WALL for x in range(5, 8) for y in range(1, 4))
    # The previous stairs tile is reset before the farthest floor is chosen.
    assert grid.tile_at(2, 2) is TileKind.FLOOR
    assert grid.indices_of(TileKind.DOWN_STAIRS) == [grid.index_of(3, 3)]


def test_repair_respects_distance_cutoff(make_grid):
    grid = make_grid(["########", "#......#", "########"])

    pruned = repair_connectivity(grid, grid.index_of(1, 1), cutoff=2.0)

    assert pruned == 3
    assert grid.indices_of(TileKind.DOWN_STAIRS) == [grid.index_of(3, 1)]
    assert grid.indices_of(TileKind.FLOOR) == [grid.index_of(1, 1), grid.index_of(2, 1)]


def test_repair_on_lone_start_puts_stairs_on_start(make_grid):
    grid = make_grid(["###", "#.#", "###"])

    assert repair_connectivity(grid, grid.index_of(1, 1)) == 0
    assert grid.tile_at(1, 1) is TileKind.DOWN_STAIRS


def test_repair_rejects_wall_start(make_grid):
    grid = make_grid(["#.", ".."])

    with pytest.raises(ValueError):
        repair_connectivity(grid, 0)

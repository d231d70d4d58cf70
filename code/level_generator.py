"""LevelGenerator picks an algorithm and builds complete levels from one RNG."""

from __future__ import annotations

import random
from typing import Dict, Optional

from cave_generator import CellularAutomataGenerator
from generator_base import GridGenerator, LevelGenerationError
from level_config import GenerationAlgorithm, LevelConfig
from metrics import GenerationMetrics
from room_corridor_generator import RoomCorridorGenerator
from tile_grid import TileGrid

__all__ = [
    "GenerationAlgorithm",
    "LevelGenerationError",
    "LevelGenerator",
    "generate_level",
]


class LevelGenerator:
    """Manages building level grids, threading a single seedable RNG through every call."""

    def __init__(self, config: LevelConfig, rng: Optional[random.Random] = None) -> None:
        self.config = config
        self.rng = rng if rng is not None else random.Random(config.random_seed)
        self.metrics = GenerationMetrics() if config.collect_metrics else None
        self._generators: Dict[GenerationAlgorithm, GridGenerator] = {
            GenerationAlgorithm.ROOMS_AND_CORRIDORS: RoomCorridorGenerator(
                config.rooms, self.rng, self.metrics
            ),
            GenerationAlgorithm.CELLULAR_AUTOMATA: CellularAutomataGenerator(
                config.cave, self.rng, self.metrics
            ),
        }

    def choose_algorithm(self) -> GenerationAlgorithm:
        if self.config.algorithm is not None:
            return GenerationAlgorithm.from_name(self.config.algorithm)
        if self.rng.random() < self.config.cave_chance:
            return GenerationAlgorithm.CELLULAR_AUTOMATA
        return GenerationAlgorithm.ROOMS_AND_CORRIDORS

    def generate(
        self,
        depth: Optional[int] = None,
        algorithm: GenerationAlgorithm | str | None = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> TileGrid:
        """Build and return a complete level; nothing is published on failure."""
        chosen = GenerationAlgorithm.from_name(algorithm) if algorithm is not None else self.choose_algorithm()
        generator = self._generators[chosen]
        grid = generator.generate(
            depth if depth is not None else self.config.depth,
            width if width is not None else self.config.width,
            height if height is not None else self.config.height,
        )
        if self.metrics is not None:
            self.metrics.increment(f"levels.{chosen.value}")
        return grid


def generate_level(
    width: int,
    height: int,
    depth: int = 1,
    algorithm: GenerationAlgorithm | str = GenerationAlgorithm.ROOMS_AND_CORRIDORS,
    seed: int | None = None,
) -> TileGrid:
    """Convenience wrapper building one level with a fresh seeded generator."""
    config = LevelConfig(
        width=width,
        height=height,
        depth=depth,
        random_seed=seed,
        algorithm=algorithm,
    )
    return LevelGenerator(config).generate()

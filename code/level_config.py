"""Configuration containers for level generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from level_constants import (
    CAVE_BIRTH_LIMIT,
    CAVE_DEATH_LIMIT,
    CAVE_INITIAL_WALL_CHANCE,
    CAVE_ITERATIONS,
    CAVE_LEVEL_CHANCE,
    DEFAULT_LEVEL_HEIGHT,
    DEFAULT_LEVEL_WIDTH,
    DEFAULT_VIEW_RANGE,
    MAX_GENERATION_ATTEMPTS,
    MAX_ROOM_SIZE,
    MAX_ROOMS,
    MIN_ROOM_SIZE,
)


class GenerationAlgorithm(Enum):
    """Selects which generator builds a level."""

    ROOMS_AND_CORRIDORS = "rooms_and_corridors"
    CELLULAR_AUTOMATA = "cellular_automata"

    @classmethod
    def from_name(cls, value: str | GenerationAlgorithm) -> GenerationAlgorithm:
        if isinstance(value, GenerationAlgorithm):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            choices = ", ".join(algorithm.value for algorithm in cls)
            raise ValueError(f"Unsupported algorithm {value!r} (expected one of: {choices})") from exc


@dataclass(frozen=True)
class RoomCorridorConfig:
    """Tunables for rectangular room placement."""

    max_rooms: int = MAX_ROOMS
    min_size: int = MIN_ROOM_SIZE
    max_size: int = MAX_ROOM_SIZE

    def __post_init__(self) -> None:
        if self.max_rooms <= 0:
            raise ValueError("RoomCorridorConfig max_rooms must be positive")
        if self.min_size < 2:
            raise ValueError("RoomCorridorConfig min_size must be at least 2")
        if self.max_size < self.min_size:
            raise ValueError("RoomCorridorConfig max_size must be >= min_size")


@dataclass(frozen=True)
class CaveConfig:
    """Tunables for cellular automata cave growth."""

    # Percent chance that an interior tile starts as a wall.
    initial_chance: int = CAVE_INITIAL_WALL_CHANCE
    iterations: int = CAVE_ITERATIONS
    death_limit: int = CAVE_DEATH_LIMIT
    birth_limit: int = CAVE_BIRTH_LIMIT
    # None means repair floods the whole cave without a distance limit.
    distance_cutoff: Optional[float] = None

    def __post_init__(self) -> None:
        if not (0 <= self.initial_chance <= 100):
            raise ValueError("CaveConfig initial_chance must lie within [0, 100]")
        if self.iterations < 0:
            raise ValueError("CaveConfig iterations cannot be negative")
        if not (0 <= self.death_limit <= 8):
            raise ValueError("CaveConfig death_limit must lie within [0, 8]")
        if not (0 <= self.birth_limit <= 8):
            raise ValueError("CaveConfig birth_limit must lie within [0, 8]")
        if self.distance_cutoff is not None and self.distance_cutoff <= 0:
            raise ValueError("CaveConfig distance_cutoff must be positive or None")


@dataclass
class LevelConfig:
    """Aggregates all tunable parameters for building and viewing levels."""

    width: int = DEFAULT_LEVEL_WIDTH
    height: int = DEFAULT_LEVEL_HEIGHT
    depth: int = 1
    random_seed: int | None = None
    # None lets each new level pick an algorithm at random.
    algorithm: GenerationAlgorithm | str | None = None
    view_range: int = DEFAULT_VIEW_RANGE
    cave_chance: float = CAVE_LEVEL_CHANCE
    max_generation_attempts: int = MAX_GENERATION_ATTEMPTS
    collect_metrics: bool = False
    rooms: RoomCorridorConfig = field(default_factory=RoomCorridorConfig)
    cave: CaveConfig = field(default_factory=CaveConfig)

    def __post_init__(self) -> None:
        if self.width < 3 or self.height < 3:
            raise ValueError("LevelConfig width and height must be at least 3")
        if self.depth <= 0:
            raise ValueError("LevelConfig depth must be positive")
        if self.view_range < 0:
            raise ValueError("LevelConfig view_range cannot be negative")
        if not (0.0 <= self.cave_chance <= 1.0):
            raise ValueError("LevelConfig cave_chance must lie within [0, 1]")
        if self.max_generation_attempts <= 0:
            raise ValueError("LevelConfig max_generation_attempts must be positive")
        if self.algorithm is not None:
            self.algorithm = GenerationAlgorithm.from_name(self.algorithm)

"""Shared constants for level generation and visibility."""

from __future__ import annotations

import math

DEFAULT_LEVEL_WIDTH = 80
DEFAULT_LEVEL_HEIGHT = 50
RANDOM_SEED = None  # Default CLI seed; None picks a fresh one per run.

ORTHOGONAL_COST = 1.0
# Exact sqrt(2); equals pathing_distance for a single diagonal step.
DIAGONAL_COST = math.sqrt(2.0)

# Room-and-corridor placement.
MAX_ROOMS = 100
MIN_ROOM_SIZE = 10
MAX_ROOM_SIZE = 18

# Cellular automata caves.
CAVE_INITIAL_WALL_CHANCE = 45  # Percent of interior tiles rolled as wall.
CAVE_ITERATIONS = 15
CAVE_DEATH_LIMIT = 4  # A wall stays a wall with at least this many wall neighbours.
CAVE_BIRTH_LIMIT = 4  # A floor becomes a wall with more than this many wall neighbours.

DEFAULT_DISTANCE_CUTOFF = 200.0
DEFAULT_VIEW_RANGE = 8
CAVE_LEVEL_CHANCE = 1.0 / 3.0  # Chance a new level uses caves when no algorithm is configured.
MAX_GENERATION_ATTEMPTS = 3

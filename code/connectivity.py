"""Multi-source distance fields over the grid's implicit weighted graph."""

from __future__ import annotations

import math
from collections import deque
from typing import Deque, Iterable, List, Optional, Tuple

from grid_contract import PathingGrid
from level_constants import DEFAULT_DISTANCE_CUTOFF

UNREACHABLE = math.inf


def is_reachable(distance: float) -> bool:
    return distance != UNREACHABLE


def compute_distances(
    grid: PathingGrid,
    origin_indices: Iterable[int],
    cutoff: float = DEFAULT_DISTANCE_CUTOFF,
) -> List[float]:
    """Return the shortest walking distance from the nearest origin to every tile.

    Tiles that cannot be reached, or only at a distance above ``cutoff``, hold
    ``UNREACHABLE``.
    """
    tile_count = grid.width * grid.height
    distances: List[float] = [UNREACHABLE] * tile_count
    queue: Deque[int] = deque()
    for origin in origin_indices:
        if not (0 <= origin < tile_count):
            raise IndexError(f"Origin index {origin} out of range")
        if distances[origin] == 0.0:
            continue
        distances[origin] = 0.0
        queue.append(origin)

    while queue:
        current = queue.popleft()
        base = distances[current]
        for neighbour, cost in grid.exits_of(current):
            candidate = base + cost
            if candidate > cutoff or candidate >= distances[neighbour]:
                continue
            distances[neighbour] = candidate
            queue.append(neighbour)
    return distances


def reachable_indices(distances: List[float]) -> List[int]:
    return [idx for idx, distance in enumerate(distances) if is_reachable(distance)]


def farthest_index(distances: List[float]) -> Optional[int]:
    """Return the index with the largest finite distance; ties go to the lowest index."""
    best_index: Optional[int] = None
    best_distance = -1.0
    for idx, distance in enumerate(distances):
        if not is_reachable(distance):
            continue
        if distance > best_distance:
            best_distance = distance
            best_index = idx
    return best_index


def lowest_exit(grid: PathingGrid, distances: List[float], index: int) -> Optional[Tuple[int, float]]:
    """Return the neighbouring exit that moves closest to the field's origins."""
    best: Optional[Tuple[int, float]] = None
    for neighbour, _cost in grid.exits_of(index):
        distance = distances[neighbour]
        if not is_reachable(distance):
            continue
        if best is None or distance < best[1]:
            best = (neighbour, distance)
    return best

"""Field of view and per-viewer viewsheds.

Visibility uses symmetric shadow-casting: the area around the viewer is split
into four quadrants, each scanned row by row outward from the viewer. Shadow
edges are tracked as exact slopes so that whenever tile A can see tile B, B can
also see A. Tiles outside the grid are treated as opaque and never reported.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction
from typing import Iterable, List, Set, Tuple

from grid_contract import OpaqueGrid
from level_constants import DEFAULT_VIEW_RANGE
from level_geometry import TilePos
from tile_grid import TileGrid


class Quadrant(Enum):
    """Cardinal quadrants scanned outward from the viewer."""

    NORTH = (0, -1)
    EAST = (1, 0)
    SOUTH = (0, 1)
    WEST = (-1, 0)

    def transform(self, origin: TilePos, depth: int, col: int) -> Tuple[int, int]:
        """Map a quadrant-local ``(depth, col)`` to grid coordinates."""
        if self is Quadrant.NORTH:
            return origin.x + col, origin.y - depth
        if self is Quadrant.SOUTH:
            return origin.x + col, origin.y + depth
        if self is Quadrant.EAST:
            return origin.x + depth, origin.y + col
        return origin.x - depth, origin.y + col


@dataclass
class _Row:
    depth: int
    start_slope: Fraction
    end_slope: Fraction

    def columns(self) -> List[int]:
        min_col = _round_ties_up(self.depth * self.start_slope)
        max_col = _round_ties_down(self.depth * self.end_slope)
        return list(range(min_col, max_col + 1))

    def next(self) -> _Row:
        return _Row(self.depth + 1, self.start_slope, self.end_slope)

    def is_symmetric(self, col: int) -> bool:
        return self.depth * self.start_slope <= col <= self.depth * self.end_slope


def _slope(depth: int, col: int) -> Fraction:
    return Fraction(2 * col - 1, 2 * depth)


def _round_ties_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def _round_ties_down(value: Fraction) -> int:
    return math.ceil(value - Fraction(1, 2))


def compute_field_of_view(grid: OpaqueGrid, origin: TilePos, view_range: int) -> Set[TilePos]:
    """Return every in-bounds tile within ``view_range`` that the origin can see."""
    if view_range < 0:
        raise ValueError("view_range cannot be negative")
    if not grid.in_bounds(origin.x, origin.y):
        raise IndexError(f"Viewer position {origin.to_tuple()} is outside the grid")

    visible: Set[TilePos] = {origin}
    range_squared = view_range * view_range

    def is_wall(x: int, y: int) -> bool:
        if not grid.in_bounds(x, y):
            return True
        return grid.is_opaque(grid.index_of(x, y))

    def reveal(x: int, y: int) -> None:
        if not grid.in_bounds(x, y):
            return
        dx, dy = x - origin.x, y - origin.y
        if dx * dx + dy * dy <= range_squared:
            visible.add(TilePos(x, y))

    for quadrant in Quadrant:
        rows = [_Row(1, Fraction(-1), Fraction(1))]
        while rows:
            row = rows.pop()
            if row.depth > view_range:
                continue
            prev_wall = None
            for col in row.columns():
                x, y = quadrant.transform(origin, row.depth, col)
                wall = is_wall(x, y)
                if wall or row.is_symmetric(col):
                    reveal(x, y)
                if prev_wall is True and not wall:
                    row.start_slope = _slope(row.depth, col)
                if prev_wall is False and wall:
                    next_row = row.next()
                    next_row.end_slope = _slope(row.depth, col)
                    rows.append(next_row)
                prev_wall = wall
            if prev_wall is False:
                rows.append(row.next())
    return visible


def recompute_visibility(
    grid: TileGrid,
    viewer_position: TilePos,
    view_range: int,
    is_primary_viewer: bool,
) -> Set[TilePos]:
    """Compute a viewer's visible tiles; the primary viewer also updates the grid bitmaps."""
    visible = compute_field_of_view(grid, viewer_position, view_range)
    if is_primary_viewer:
        grid.reset_visibility()
        for tile in visible:
            idx = grid.index_of(tile.x, tile.y)
            grid.visible_tiles[idx] = True
            grid.revealed_tiles[idx] = True
    return visible


@dataclass
class Viewshed:
    """A viewer's visibility state: range, staleness, and the last computed set."""

    view_range: int = DEFAULT_VIEW_RANGE
    dirty: bool = True
    visible_tiles: Set[TilePos] = field(default_factory=set)

    def mark_dirty(self) -> None:
        self.dirty = True

    def refresh(self, grid: TileGrid, position: TilePos, is_primary_viewer: bool = False) -> Set[TilePos]:
        """Recompute the visible set if stale and return it."""
        if not self.dirty:
            return self.visible_tiles
        self.dirty = False
        self.visible_tiles = recompute_visibility(grid, position, self.view_range, is_primary_viewer)
        return self.visible_tiles


def run_visibility_pass(
    grid: TileGrid,
    viewers: Iterable[Tuple[TilePos, Viewshed, bool]],
) -> int:
    """Refresh every stale viewshed; returns how many were recomputed."""
    refreshed = 0
    for position, viewshed, is_primary_viewer in viewers:
        if not viewshed.dirty:
            continue
        viewshed.refresh(grid, position, is_primary_viewer)
        refreshed += 1
    return refreshed

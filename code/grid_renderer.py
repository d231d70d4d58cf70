"""Render a level to an ASCII grid, and parse one back."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from level_geometry import TilePos
from tile_grid import TileGrid, TileKind

TILE_CHARS: Dict[TileKind, str] = {
    TileKind.WALL: "#",
    TileKind.FLOOR: ".",
    TileKind.DOWN_STAIRS: ">",
}
CHAR_TILES: Dict[str, TileKind] = {char: kind for kind, char in TILE_CHARS.items()}
PLAYER_CHAR = "@"
UNSEEN_CHAR = " "


def render_grid(
    grid: TileGrid,
    player: Optional[TilePos] = None,
    reveal_all: bool = True,
) -> List[str]:
    """Return one string per grid row.

    With ``reveal_all`` off, tiles the player has never seen are left blank.
    """
    rows: List[str] = []
    for y in range(grid.height):
        row: List[str] = []
        for x in range(grid.width):
            idx = y * grid.width + x
            if not reveal_all and not grid.revealed_tiles[idx]:
                row.append(UNSEEN_CHAR)
            else:
                row.append(TILE_CHARS[grid.tiles[idx]])
        rows.append("".join(row))
    if player is not None:
        line = rows[player.y]
        rows[player.y] = line[: player.x] + PLAYER_CHAR + line[player.x + 1 :]
    return rows


def print_grid(
    grid: TileGrid,
    player: Optional[TilePos] = None,
    reveal_all: bool = True,
    horizontal_sep: str = "",
) -> None:
    """Prints the ASCII grid to the console."""
    for row in render_grid(grid, player, reveal_all):
        print(horizontal_sep.join(row))


def parse_ascii_grid(rows: Sequence[str], depth: int = 1) -> TileGrid:
    """Build a grid from ``#``/``.``/``>`` rows; an ``@`` marks the starting position."""
    if not rows:
        raise ValueError("ASCII grid needs at least one row")
    width = len(rows[0])
    grid = TileGrid(width, len(rows), depth)
    for y, line in enumerate(rows):
        if len(line) != width:
            raise ValueError(f"Row {y} has length {len(line)}, expected {width}")
        for x, char in enumerate(line):
            if char == PLAYER_CHAR:
                grid.starting_position = TilePos(x, y)
                kind = TileKind.FLOOR
            elif char in CHAR_TILES:
                kind = CHAR_TILES[char]
            else:
                raise ValueError(f"Unknown tile character {char!r} at {(x, y)}")
            grid.tiles[y * width + x] = kind
    return grid

import sys
from pathlib import Path
from typing import Callable, Sequence

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
CODE_DIR = ROOT_DIR / "code"
if str(CODE_DIR) not in sys.path:
    sys.path.insert(0, str(CODE_DIR))

from grid_renderer import parse_ascii_grid
from level_config import LevelConfig, RoomCorridorConfig
from tile_grid import TileGrid


@pytest.fixture
def make_grid() -> Callable[..., TileGrid]:
    def _make_grid(rows: Sequence[str], depth: int = 1) -> TileGrid:
        return parse_ascii_grid(rows, depth=depth)

    return _make_grid


@pytest.fixture
def open_room() -> TileGrid:
    """A 7x7 grid with no walls at all."""
    return parse_ascii_grid(["......."] * 7)


@pytest.fixture
def room_config() -> RoomCorridorConfig:
    return RoomCorridorConfig(max_rooms=30, min_size=6, max_size=10)


@pytest.fixture
def make_config() -> Callable[..., LevelConfig]:
    def _make_config(**overrides) -> LevelConfig:
        values = dict(width=80, height=50, random_seed=42)
        values.update(overrides)
        return LevelConfig(**values)

    return _make_config

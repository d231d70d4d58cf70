"""Explicit state for the current level, its viewers, and level transitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from generator_base import LevelGenerationError
from level_config import LevelConfig
from level_generator import LevelGenerator
from level_geometry import TilePos
from tile_grid import TileGrid, TileKind
from visibility import Viewshed, run_visibility_pass

Action = Union[Tuple[int, int], str]


class RunState(Enum):
    PAUSED = 0
    RUNNING = 1
    NEXT_LEVEL = 2


@dataclass
class Viewer:
    """Something that occupies a tile and sees from it."""

    position: TilePos
    viewshed: Viewshed = field(default_factory=Viewshed)
    is_player: bool = False


class LevelState:
    """Owns the current grid and everything that reads it.

    The grid reference is only ever replaced wholesale by ``install_grid``; a
    level is generated completely before it becomes current.
    """

    def __init__(self, config: LevelConfig, generator: Optional[LevelGenerator] = None) -> None:
        self.config = config
        self.generator = generator if generator is not None else LevelGenerator(config)
        self._grid: Optional[TileGrid] = None
        self.player = Viewer(
            position=TilePos(0, 0),
            viewshed=Viewshed(view_range=config.view_range),
            is_player=True,
        )
        self.viewers: List[Viewer] = []
        self.run_state = RunState.RUNNING

    @property
    def grid(self) -> TileGrid:
        if self._grid is None:
            raise RuntimeError("No level has been installed yet")
        return self._grid

    @property
    def depth(self) -> int:
        return self.grid.depth

    def all_viewers(self) -> List[Viewer]:
        return [self.player, *self.viewers]

    def start(self) -> TileGrid:
        """Generate the first level and make it current."""
        grid = self._generate(self.config.depth)
        self.install_grid(grid)
        self.run_state = RunState.RUNNING
        return grid

    def install_grid(self, grid: TileGrid) -> None:
        """Make ``grid`` current and place the player at its starting position.

        Extra viewers belong to the level they were placed on and are dropped.
        """
        self._grid = grid
        self.viewers = []
        self.player.position = grid.starting_position
        self.player.viewshed.mark_dirty()

    def try_move_player(self, delta_x: int, delta_y: int) -> bool:
        """Move the player one step unless the target is off the grid or a wall."""
        grid = self.grid
        target = self.player.position.offset(delta_x, delta_y)
        if not grid.in_bounds(target.x, target.y):
            return False
        if grid.tile_at(target.x, target.y) is TileKind.WALL:
            return False
        self.player.position = target
        self.player.viewshed.mark_dirty()
        return True

    def attempt_interact(self) -> RunState:
        position = self.player.position
        if self.grid.tile_at(position.x, position.y) is TileKind.DOWN_STAIRS:
            return RunState.NEXT_LEVEL
        return RunState.PAUSED

    def descend(self) -> TileGrid:
        """Build the next level and swap it in; the current level survives a failure."""
        grid = self._generate(self.grid.depth + 1)
        self.install_grid(grid)
        return grid

    def run_systems(self) -> int:
        return run_visibility_pass(
            self.grid,
            ((viewer.position, viewer.viewshed, viewer.is_player) for viewer in self.all_viewers()),
        )

    def tick(self, action: Optional[Action] = None) -> RunState:
        """Advance one turn: apply at most one action, then refresh stale viewsheds.

        Returns the state the turn was processed in; afterwards the level waits
        for input again.
        """
        if action is None:
            processed = RunState.PAUSED
        elif action == "interact":
            processed = self.attempt_interact()
        elif isinstance(action, tuple):
            self.try_move_player(*action)
            processed = RunState.RUNNING
        else:
            raise ValueError(f"Unsupported action {action!r}")

        self.run_state = processed
        if processed is RunState.NEXT_LEVEL:
            self.descend()
        self.run_systems()
        self.run_state = RunState.PAUSED
        return processed

    def _generate(self, depth: int) -> TileGrid:
        last_error: Optional[LevelGenerationError] = None
        for _ in range(self.config.max_generation_attempts):
            try:
                return self.generator.generate(depth=depth)
            except LevelGenerationError as exc:
                last_error = exc
        assert last_error is not None
        raise last_error

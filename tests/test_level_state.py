import pytest

from generator_base import LevelGenerationError
from level_config import GenerationAlgorithm
from level_geometry import TilePos
from level_state import LevelState, RunState, Viewer
from tile_grid import TileKind
from visibility import Viewshed

CORRIDOR = [
    "#######",
    "#@..>.#",
    "#.#####",
    "#######",
]


@pytest.fixture
def state(make_config, make_grid) -> LevelState:
    level = LevelState(make_config(view_range=4, algorithm=GenerationAlgorithm.ROOMS_AND_CORRIDORS))
    level.install_grid(make_grid(CORRIDOR))
    return level


def test_grid_is_unavailable_before_start(make_config):
    level = LevelState(make_config())

    with pytest.raises(RuntimeError):
        level.grid


def test_start_generates_first_level_and_places_player(make_config):
    level = LevelState(make_config(depth=2, algorithm="rooms_and_corridors"))

    grid = level.start()

    assert level.grid is grid
    assert level.depth == 2
    assert level.player.position == grid.starting_position
    assert level.run_state is RunState.RUNNING


def test_install_grid_marks_player_dirty_and_drops_other_viewers(state, make_grid):
    state.viewers.append(Viewer(position=TilePos(3, 1), viewshed=Viewshed(dirty=False)))
    state.player.viewshed.dirty = False

    state.install_grid(make_grid(CORRIDOR))

    assert state.player.viewshed.dirty
    assert state.viewers == []


def test_smaller_grid_after_far_viewer_still_runs_systems(state, make_grid):
    state.install_grid(make_grid(["#" * 80] * 49 + ["#@" + "." * 77 + "#"]))
    state.viewers.append(Viewer(position=TilePos(70, 49)))

    state.install_grid(make_grid(["@..", "...", "..>"]))

    assert state.run_systems() == 1
    assert state.grid.visible_tiles[state.grid.index_of(2, 2)]


def test_descend_leaves_previous_level_viewers_behind(state):
    state.viewers.append(Viewer(position=TilePos(3, 1)))

    state.descend()

    assert state.viewers == []
    assert state.all_viewers() == [state.player]


def test_moves_onto_floor_and_marks_viewshed_dirty(state):
    state.player.viewshed.dirty = False

    assert state.try_move_player(1, 0) is True
    assert state.player.position == TilePos(2, 1)
    assert state.player.viewshed.dirty


def test_walls_and_grid_edges_block_movement(state):
    assert state.try_move_player(0, -1) is False
    assert state.try_move_player(1, 1) is False
    assert state.player.position == TilePos(1, 1)

    state.player.position = TilePos(0, 0)
    assert state.try_move_player(-1, 0) is False


def test_diagonal_move_through_wall_corners(state):
    state.player.position = TilePos(1, 2)

    assert state.try_move_player(1, -1) is True
    assert state.player.position == TilePos(2, 1)


def test_interact_only_succeeds_on_stairs(state):
    assert state.attempt_interact() is RunState.PAUSED

    state.player.position = TilePos(4, 1)
    assert state.attempt_interact() is RunState.NEXT_LEVEL


def test_descend_replaces_grid_with_deeper_level(state):
    old_grid = state.grid

    new_grid = state.descend()

    assert state.grid is new_grid
    assert new_grid is not old_grid
    assert new_grid.depth == old_grid.depth + 1
    assert state.player.position == new_grid.starting_position
    assert state.player.viewshed.dirty


def test_failed_generation_keeps_current_level(state, monkeypatch):
    calls = []

    def _always_fail(depth=None, **kwargs):
        calls.append(depth)
        raise LevelGenerationError("no rooms")

    monkeypatch.setattr(state.generator, "generate", _always_fail)
    old_grid = state.grid

    with pytest.raises(LevelGenerationError):
        state.descend()

    assert state.grid is old_grid
    assert calls == [2] * state.config.max_generation_attempts


def test_generation_retries_until_success(state, monkeypatch, make_grid):
    replacement = make_grid(CORRIDOR, depth=2)
    outcomes = [LevelGenerationError("first"), replacement]

    def _flaky(depth=None, **kwargs):
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(state.generator, "generate", _flaky)

    assert state.descend() is replacement
    assert state.grid is replacement


def test_tick_moves_then_refreshes_visibility(state):
    processed = state.tick((1, 0))

    assert processed is RunState.RUNNING
    assert state.run_state is RunState.PAUSED
    assert state.player.position == TilePos(2, 1)
    assert state.grid.visible_tiles[state.grid.index_of(4, 1)]
    assert not state.player.viewshed.dirty


def test_tick_without_action_only_refreshes(state):
    assert state.tick() is RunState.PAUSED
    assert state.player.position == TilePos(1, 1)
    assert any(state.grid.visible_tiles)


def test_tick_interact_on_stairs_descends(state):
    state.player.position = TilePos(4, 1)

    processed = state.tick("interact")

    assert processed is RunState.NEXT_LEVEL
    assert state.depth == 2
    assert state.grid.tile_at(*state.player.position).is_walkable
    assert state.grid.count(TileKind.DOWN_STAIRS) == 1


def test_tick_rejects_unknown_action(state):
    with pytest.raises(ValueError):
        state.tick("dance")


def test_run_systems_counts_refreshed_viewers(state):
    state.viewers.append(Viewer(position=TilePos(3, 1)))

    assert state.run_systems() == 2
    assert state.run_systems() == 0

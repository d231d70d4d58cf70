#!/usr/bin/env python3

from __future__ import annotations

import argparse
import json
import random

from generator_base import LevelGenerationError
from grid_renderer import print_grid
from level_config import GenerationAlgorithm, LevelConfig
from level_constants import DEFAULT_LEVEL_HEIGHT, DEFAULT_LEVEL_WIDTH, DEFAULT_VIEW_RANGE, RANDOM_SEED
from level_state import LevelState
from tile_grid import TileKind


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a dungeon level and print it as ASCII.")
    parser.add_argument("--width", type=int, default=DEFAULT_LEVEL_WIDTH, help="Grid width in tiles")
    parser.add_argument("--height", type=int, default=DEFAULT_LEVEL_HEIGHT, help="Grid height in tiles")
    parser.add_argument("--depth", type=int, default=1, help="Level depth (default: 1)")
    parser.add_argument("--seed", type=int, default=RANDOM_SEED, help="Random seed; random if omitted")
    parser.add_argument(
        "--algorithm",
        choices=[algorithm.value for algorithm in GenerationAlgorithm],
        default=None,
        help="Generation algorithm; picked at random per level if omitted",
    )
    parser.add_argument(
        "--view-range",
        type=int,
        default=DEFAULT_VIEW_RANGE,
        help=f"Player view range in tiles (default: {DEFAULT_VIEW_RANGE})",
    )
    parser.add_argument(
        "--reveal-all",
        action="store_true",
        help="Draw the whole map instead of only the tiles the player has seen",
    )
    parser.add_argument("--metrics", action="store_true", help="Print generation metrics as JSON")
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    seed = args.seed
    if seed is None:
        # Pick a random seed randomly and print it, so we can reproduce bugs by passing --seed on the next run.
        seed = random.randint(0, 1000000)
    print(f"Using random seed {seed}")

    try:
        config = LevelConfig(
            width=args.width,
            height=args.height,
            depth=args.depth,
            random_seed=seed,
            algorithm=args.algorithm,
            view_range=args.view_range,
            collect_metrics=args.metrics,
        )
    except ValueError as exc:
        raise SystemExit(str(exc))

    state = LevelState(config)
    try:
        grid = state.start()
    except LevelGenerationError as exc:
        raise SystemExit(f"Level generation failed: {exc}")
    state.run_systems()

    print_grid(grid, player=state.player.position, reveal_all=args.reveal_all)
    stairs = grid.position_of(grid.indices_of(TileKind.DOWN_STAIRS)[0])
    print(
        f"Depth {grid.depth}: {grid.width}x{grid.height}, {len(grid.rooms)} rooms, "
        f"{grid.count(TileKind.FLOOR)} floor tiles, start {grid.starting_position.to_tuple()}, "
        f"stairs {stairs.to_tuple()}"
    )
    if state.generator.metrics is not None:
        print(json.dumps(state.generator.metrics.snapshot(), indent=2, sort_keys=True))


if __name__ == "__main__":
    main()

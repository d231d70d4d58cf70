#!/usr/bin/env python3

# This file performs multiple runs of level generation, collecting and reporting metrics.
# Used for testing both performance of the generators and connectivity of the resulting levels.

from __future__ import annotations

import argparse
import datetime
import json
import math
import os
import random
import statistics
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, List

import networkx as nx

from connectivity import compute_distances
from generator_base import LevelGenerationError
from level_config import GenerationAlgorithm, LevelConfig
from level_generator import LevelGenerator
from tile_grid import TileGrid, TileKind

DEFAULT_CONFIG_KWARGS = dict(
    width=100,
    height=100,
    collect_metrics=True,
)


def build_config(seed: int, algorithm: GenerationAlgorithm | None) -> LevelConfig:
    return LevelConfig(random_seed=seed, algorithm=algorithm, **DEFAULT_CONFIG_KWARGS)  # type: ignore[arg-type]


@dataclass
class GenerationRunResult:
    seed: int
    algorithm: str
    failed: bool
    duration: float
    total_rooms: int
    floor_fraction: float
    component_count: int
    largest_component_fraction: float
    stairs_distance: float
    distance_mismatch: bool
    generation_metrics: Dict[str, Dict[str, float | int]]


def build_tile_graph(grid: TileGrid) -> nx.Graph:
    """Return a weighted graph of the walkable tiles using the grid's exits."""
    graph = nx.Graph()
    for idx, tile in enumerate(grid.tiles):
        if tile is TileKind.WALL:
            continue
        graph.add_node(idx)
        for neighbour, cost in grid.exits_of(idx):
            graph.add_edge(idx, neighbour, weight=cost)
    return graph


# (key, label, format spec) for each metric summarised at the end of a benchmark.
REPORTED_METRICS = (
    ("generation_ms", "Generation time (ms)", ".1f"),
    ("floor_fraction", "Floor fraction", ".1%"),
    ("largest_component_fraction", "Largest component coverage", ".1%"),
    ("stairs_distance", "Stairs distance", ".1f"),
)


def finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def summarize(values: List[float]) -> Dict[str, float]:
    """Mean, extremes and p10/p50/p90 of one metric; no values gives an empty summary."""
    if not values:
        return {}
    summary = {"mean": statistics.fmean(values), "min": min(values), "max": max(values)}
    if len(values) > 1:
        deciles = statistics.quantiles(values, n=10, method="inclusive")
        summary.update(p10=deciles[0], p50=deciles[4], p90=deciles[8])
    return summary


def print_summary(label: str, summary: Dict[str, float], spec: str) -> None:
    if not summary:
        print(f"{label}: no data")
        return
    print(f"{label}: " + ", ".join(f"{key} {value:{spec}}" for key, value in summary.items()))


def analyze_grid(grid: TileGrid) -> Dict[str, Any]:
    """Compute connectivity statistics for one level."""
    walkable = [idx for idx, tile in enumerate(grid.tiles) if tile is not TileKind.WALL]
    graph = build_tile_graph(grid)
    components = list(nx.connected_components(graph))
    largest = max((len(component) for component in components), default=0)

    start_index = grid.index_of(grid.starting_position.x, grid.starting_position.y)
    stairs_index = grid.indices_of(TileKind.DOWN_STAIRS)[0]
    nx_lengths = nx.single_source_dijkstra_path_length(graph, start_index, weight="weight")
    distances = compute_distances(grid, [start_index], cutoff=math.inf)
    mismatch = any(
        not math.isclose(distances[idx], nx_lengths.get(idx, math.inf), rel_tol=1e-9)
        for idx in walkable
        if idx in nx_lengths
    )
    return {
        "floor_fraction": len(walkable) / len(grid.tiles),
        "component_count": len(components),
        "largest_component_fraction": largest / len(walkable) if walkable else 0.0,
        "stairs_distance": distances[stairs_index],
        "distance_mismatch": mismatch,
    }


def run_single_generation(seed: int, algorithm: GenerationAlgorithm | None) -> GenerationRunResult:
    """Run one level generation with the provided seed and collect metrics."""
    config = build_config(seed, algorithm)
    generator = LevelGenerator(config)
    chosen = generator.choose_algorithm()

    start = time.perf_counter()
    try:
        grid = generator.generate(algorithm=chosen)
    except LevelGenerationError:
        grid = None
    end = time.perf_counter()

    snapshot = generator.metrics.snapshot() if generator.metrics else {}
    if grid is None:
        return GenerationRunResult(
            seed=seed,
            algorithm=chosen.value,
            failed=True,
            duration=end - start,
            total_rooms=0,
            floor_fraction=0.0,
            component_count=0,
            largest_component_fraction=0.0,
            stairs_distance=math.inf,
            distance_mismatch=False,
            generation_metrics=snapshot,
        )

    stats = analyze_grid(grid)
    return GenerationRunResult(
        seed=seed,
        algorithm=chosen.value,
        failed=False,
        duration=end - start,
        total_rooms=len(grid.rooms),
        generation_metrics=snapshot,
        **stats,
    )


def run_benchmark(num_runs: int, seed: int | None, algorithm: GenerationAlgorithm | None) -> List[GenerationRunResult]:
    """Run the generator multiple times and collect run-level metrics."""
    rng = random.Random(seed)
    return [run_single_generation(rng.randint(0, 1_000_000), algorithm) for _ in range(num_runs)]


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run the level generators multiple times and report timing and connectivity statistics."
    )
    parser.add_argument(
        "-n",
        "--runs",
        type=int,
        default=20,
        help="Number of level generations to execute (default: 20)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Optional seed for the benchmark harness RNG; keeps run seeds reproducible",
    )
    parser.add_argument(
        "--algorithm",
        choices=[algorithm.value for algorithm in GenerationAlgorithm],
        default=None,
        help="Restrict runs to one algorithm; by default each run picks at random",
    )
    args = parser.parse_args()

    if args.runs <= 0:
        raise SystemExit("Number of runs must be a positive integer")
    algorithm = GenerationAlgorithm.from_name(args.algorithm) if args.algorithm else None

    results = run_benchmark(args.runs, args.seed, algorithm)
    completed = [result for result in results if not result.failed]

    for idx, result in enumerate(results, start=1):
        prefix = f"Run {idx:02d}: {result.duration * 1000:7.1f}ms seed {result.seed} {result.algorithm}"
        if result.failed:
            print(f"{prefix} FAILED")
            continue
        mismatch = " (distance field disagrees with networkx!)" if result.distance_mismatch else ""
        print(
            f"{prefix} | rooms {result.total_rooms} | floor {result.floor_fraction:.1%}"
            f" | components {result.component_count} | stairs distance {result.stairs_distance:.1f}{mismatch}"
        )

    connected = sum(1 for result in completed if result.component_count == 1)
    print()
    print(f"{len(completed)} of {len(results)} generations succeeded, {connected} fully connected")

    samples = {
        "generation_ms": [result.duration * 1000 for result in results],
        "floor_fraction": [result.floor_fraction for result in completed],
        "largest_component_fraction": [result.largest_component_fraction for result in completed],
        "stairs_distance": [result.stairs_distance for result in completed if math.isfinite(result.stairs_distance)],
    }
    summaries: Dict[str, Dict[str, float]] = {}
    for key, label, spec in REPORTED_METRICS:
        summaries[key] = summarize(samples[key])
        print_summary(label, summaries[key], spec)

    timestamp = datetime.datetime.now(datetime.timezone.utc)
    script_dir = os.path.dirname(os.path.abspath(__file__))
    benchmarks_dir = os.path.abspath(os.path.join(script_dir, "..", "benchmarks"))
    os.makedirs(benchmarks_dir, exist_ok=True)
    output_path = os.path.join(benchmarks_dir, f"benchmark-{timestamp.strftime('%Y%m%dT%H%M%SZ')}.json")

    runs = []
    for result in results:
        run = asdict(result)
        run["stairs_distance"] = finite_or_none(result.stairs_distance)
        runs.append(run)
    report = {
        "timestamp": timestamp.replace(microsecond=0).isoformat(),
        "parameters": {"runs": args.runs, "seed": args.seed, "algorithm": args.algorithm},
        "succeeded": len(completed),
        "connected": connected,
        "summaries": summaries,
        "results": runs,
    }
    with open(output_path, "w", encoding="utf-8") as handle:
        json.dump(report, handle, indent=2, sort_keys=True)
        handle.write("\n")

    print(f"\nSaved benchmark results to {os.path.relpath(output_path)}")


if __name__ == "__main__":
    main()

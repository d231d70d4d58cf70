from __future__ import annotations

import random
from time import perf_counter
from typing import Callable, Generic, Optional, TypeVar

from metrics import GenerationMetrics
from tile_grid import TileGrid

C = TypeVar("C")
R = TypeVar("R")


class LevelGenerationError(ValueError):
    """A generator could not produce a valid grid from the current random state."""


class GridGenerator(Generic[C]):
    """Shared plumbing for generators that build a complete TileGrid."""

    name = "grid"

    def __init__(
        self,
        config: C,
        rng: random.Random,
        metrics: Optional[GenerationMetrics] = None,
    ) -> None:
        self.config = config
        self.rng = rng
        self.metrics = metrics

    def generate(self, depth: int, width: int, height: int) -> TileGrid:
        raise NotImplementedError

    def _run_phase(self, phase: str, func: Callable[..., R], *args, **kwargs) -> R:
        if self.metrics is None:
            return func(*args, **kwargs)

        start = perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            self.metrics.record_phase_run(f"{self.name}.{phase}", perf_counter() - start)

    def _count(self, counter: str, amount: int = 1) -> None:
        if self.metrics is not None:
            self.metrics.increment(counter, amount)

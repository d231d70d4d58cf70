"""Helpers for collecting instrumentation data during level generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class PhaseMetrics:
    """Aggregated timing for a single generation phase across invocations."""

    name: str
    invocations: int = 0
    total_time: float = 0.0

    def record(self, duration: float) -> None:
        self.invocations += 1
        self.total_time += duration

    def to_dict(self) -> Dict[str, float | int]:
        average_time = self.total_time / self.invocations if self.invocations else 0.0
        return {
            "invocations": self.invocations,
            "total_time": self.total_time,
            "average_time": average_time,
        }


@dataclass
class GenerationMetrics:
    """Container for phase timings and counters recorded during generation."""

    phases: Dict[str, PhaseMetrics] = field(default_factory=dict)
    counters: Dict[str, int] = field(default_factory=dict)

    def record_phase_run(self, name: str, duration: float) -> None:
        metrics = self.phases.get(name)
        if metrics is None:
            metrics = PhaseMetrics(name=name)
            self.phases[name] = metrics
        metrics.record(duration)

    def increment(self, name: str, amount: int = 1) -> None:
        self.counters[name] = self.counters.get(name, 0) + amount

    def counter(self, name: str) -> int:
        return self.counters.get(name, 0)

    def snapshot(self) -> Dict[str, Dict[str, float | int]]:
        result: Dict[str, Dict[str, float | int]] = {
            name: metrics.to_dict() for name, metrics in self.phases.items()
        }
        result["counters"] = dict(self.counters)
        return result

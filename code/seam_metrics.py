"""Helpers for collecting instrumentation data during a bridging pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class PhaseMetrics:
    """Aggregated timing for a single pipeline phase across invocations."""

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
class BridgingMetrics:
    """Container for phase timings and counters recorded during a bridging pass."""

    phases: Dict[str, PhaseMetrics] = field(default_factory=dict)
    counters: Dict[str, int] = field(default_factory=dict)

    def record_phase(self, name: str, duration: float) -> None:
        metrics = self.phases.get(name)
        if metrics is None:
            metrics = PhaseMetrics(name=name)
            self.phases[name] = metrics
        metrics.record(duration)

    def count(self, name: str, value: int) -> None:
        self.counters[name] = self.counters.get(name, 0) + int(value)

    def snapshot(self) -> Dict[str, object]:
        return {
            "phases": {name: metrics.to_dict() for name, metrics in self.phases.items()},
            "counters": dict(self.counters),
        }

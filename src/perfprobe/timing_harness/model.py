from __future__ import annotations

import statistics
from typing import Any, Literal

import attrs

TrialOutcome = Literal["success", "failed"]


@attrs.define(frozen=True, slots=True)
class Trial:
    index: int
    started_at: float
    finished_at: float
    cpu_seconds: float
    outcome: TrialOutcome
    error: Exception | None = attrs.field(default=None, eq=False, repr=False)

    @property
    def duration(self) -> float:
        return self.finished_at - self.started_at

    @property
    def succeeded(self) -> bool:
        return self.outcome == "success"

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "duration_s": self.duration,
            "cpu_s": self.cpu_seconds,
            "outcome": self.outcome,
            "error": None if self.error is None else f"{type(self.error).__name__}: {self.error}",
        }


@attrs.define(frozen=True, slots=True)
class TimingStats:
    count: int
    min: float
    median: float
    mean: float
    max: float
    stdev: float
    total: float

    @staticmethod
    def from_durations(durations: list[float]) -> "TimingStats":
        if not durations:
            raise ValueError("TimingStats requires at least one duration")
        return TimingStats(
            count=len(durations),
            min=min(durations),
            median=statistics.median(durations),
            mean=statistics.mean(durations),
            max=max(durations),
            stdev=statistics.stdev(durations) if len(durations) > 1 else 0.0,
            total=sum(durations),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "min_s": self.min,
            "median_s": self.median,
            "mean_s": self.mean,
            "max_s": self.max,
            "stdev_s": self.stdev,
            "total_s": self.total,
        }


@attrs.define(frozen=True, slots=True)
class TimingReport:
    """Every trial of one candidate, in execution order, plus derived statistics."""

    name: str
    trials: tuple[Trial, ...]
    warmup: int = 0

    @property
    def successes(self) -> tuple[Trial, ...]:
        return tuple(t for t in self.trials if t.succeeded)

    @property
    def failures(self) -> tuple[Trial, ...]:
        return tuple(t for t in self.trials if not t.succeeded)

    @property
    def durations(self) -> list[float]:
        return [t.duration for t in self.successes]

    @property
    def stats(self) -> TimingStats:
        return TimingStats.from_durations(self.durations)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "warmup": self.warmup,
            "repetitions": len(self.trials),
            "failed": len(self.failures),
            "stats": self.stats.to_dict(),
            "trials": [t.to_dict() for t in self.trials],
        }


def relative_to_fastest(reports: dict[str, TimingReport]) -> dict[str, float]:
    """Return each candidate's median time divided by the fastest median (fastest is 1.0)."""
    medians = {name: r.stats.median for name, r in reports.items()}
    if not medians:
        return {}
    fastest = min(medians.values())
    out: dict[str, float] = {}
    for name, median in medians.items():
        if fastest == 0:
            out[name] = 1.0 if median == 0 else float("inf")
        else:
            out[name] = median / fastest
    return out

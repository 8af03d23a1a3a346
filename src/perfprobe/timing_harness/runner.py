from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

import attrs

from ..config import env_repetitions, env_warmup, validate_repetitions, validate_warmup
from ..errors import AllTrialsFailed, InvalidArgument
from .model import Trial, TimingReport

logger = logging.getLogger(__name__)

Candidate = Callable[[], Any]


def _candidate_name(candidate: Candidate) -> str:
    return getattr(candidate, "__qualname__", None) or getattr(candidate, "__name__", None) or repr(candidate)


def _run_warmup(candidate: Candidate, *, name: str, warmup: int) -> None:
    for i in range(warmup):
        try:
            candidate()
        except Exception as e:
            logger.warning("Warmup run %d of %r raised %s: %s", i, name, type(e).__name__, e)


def _run_trial(candidate: Candidate, index: int) -> Trial:
    cpu0 = time.process_time()
    t0 = time.perf_counter()
    try:
        candidate()
    except Exception as e:
        t1 = time.perf_counter()
        cpu1 = time.process_time()
        return Trial(index=index, started_at=t0, finished_at=t1, cpu_seconds=cpu1 - cpu0, outcome="failed", error=e)
    t1 = time.perf_counter()
    cpu1 = time.process_time()
    return Trial(index=index, started_at=t0, finished_at=t1, cpu_seconds=cpu1 - cpu0, outcome="success")


@attrs.define(slots=True)
class TimingHarness:
    """Runs candidates synchronously, one trial at a time.

    `repetitions` and `warmup` are defaults for `measure`/`compare` calls that do not
    pass their own.
    """

    repetitions: int | None = None
    warmup: int | None = None

    def __attrs_post_init__(self) -> None:
        # Only the defaulted fields read the environment.
        if self.repetitions is None:
            self.repetitions = env_repetitions()
        if self.warmup is None:
            self.warmup = env_warmup()
        validate_repetitions(self.repetitions)
        validate_warmup(self.warmup)

    def measure(
        self,
        candidate: Candidate,
        repetitions: int | None = None,
        warmup: int | None = None,
        *,
        name: str | None = None,
    ) -> TimingReport:
        reps = validate_repetitions(self.repetitions if repetitions is None else repetitions)
        warm = validate_warmup(self.warmup if warmup is None else warmup)
        if not callable(candidate):
            raise InvalidArgument(f"candidate must be callable, got {candidate!r}")
        label = name or _candidate_name(candidate)

        _run_warmup(candidate, name=label, warmup=warm)

        trials: list[Trial] = []
        for i in range(reps):
            trial = _run_trial(candidate, i)
            if not trial.succeeded:
                logger.warning(
                    "Trial %d/%d of %r failed: %s: %s", i, reps, label, type(trial.error).__name__, trial.error
                )
            trials.append(trial)

        failed = [t for t in trials if not t.succeeded]
        if len(failed) == len(trials):
            last = failed[-1]
            last_error: BaseException = last.error if last.error is not None else RuntimeError("trial failed")
            raise AllTrialsFailed(name=label, repetitions=reps, last_index=last.index, last_error=last_error) from last_error

        report = TimingReport(name=label, trials=tuple(trials), warmup=warm)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Measured %r: %d trial(s), %d failed, median %.6fs", label, reps, len(failed), report.stats.median
            )
        return report

    def compare(
        self,
        candidates: Mapping[str, Candidate],
        repetitions: int | None = None,
        warmup: int | None = None,
    ) -> dict[str, TimingReport]:
        if not candidates:
            raise InvalidArgument("compare requires at least one candidate")
        reps = validate_repetitions(self.repetitions if repetitions is None else repetitions)
        warm = validate_warmup(self.warmup if warmup is None else warmup)

        # Insertion order of the input mapping is the execution and result order.
        out: dict[str, TimingReport] = {}
        for name, candidate in candidates.items():
            out[name] = self.measure(candidate, reps, warm, name=name)
        return out


def measure(candidate: Candidate, repetitions: int, warmup: int = 0, *, name: str | None = None) -> TimingReport:
    """Time `repetitions` individual runs of `candidate` after `warmup` untimed runs."""
    return TimingHarness(repetitions=validate_repetitions(repetitions), warmup=validate_warmup(warmup)).measure(
        candidate, name=name
    )


def compare(candidates: Mapping[str, Candidate], repetitions: int, warmup: int = 0) -> dict[str, TimingReport]:
    """Measure each candidate in the given order; each one gets its own warmup."""
    return TimingHarness(repetitions=validate_repetitions(repetitions), warmup=validate_warmup(warmup)).compare(
        candidates
    )

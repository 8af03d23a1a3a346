from __future__ import annotations

import logging
import math
import sys
import threading
import time
from collections.abc import Callable
from types import FrameType
from typing import Any

import attrs

from ..config import env_interval, env_max_depth, validate_interval, validate_max_depth
from ..errors import InvalidArgument
from .aggregate import build_report
from .model import ProfileReport, Sample
from .stacks import current_frame_of, require_stack_sampling, walk_stack

logger = logging.getLogger(__name__)

Candidate = Callable[[], Any]

# Distinguishes an omitted `max_depth` from an explicit `None` (unlimited).
_UNSET: Any = object()


class ProfilerSession:
    """A single profiling run: owns its sample buffer and its sampler thread.

    The candidate runs on the calling thread. A daemon thread wakes on a monotonic
    schedule and reads the caller's current frame through `sys._current_frames()`,
    which takes no lock the candidate can hold. Only frames below the session's own
    call boundary are recorded, so the profiler never attributes time to itself.
    """

    def __init__(self, interval: float, max_depth: int | None = None) -> None:
        self.interval = validate_interval(interval)
        self.max_depth = validate_max_depth(max_depth)
        self._samples: list[Sample] = []
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._target_thread_id: int | None = None
        self._boundary: FrameType | None = None
        self._sampler_error: Exception | None = None
        self._elapsed: float | None = None
        self._used = False

    @property
    def samples(self) -> tuple[Sample, ...]:
        return tuple(self._samples)

    @property
    def finished(self) -> bool:
        return self._elapsed is not None

    @property
    def elapsed(self) -> float | None:
        return self._elapsed

    def run(self, candidate: Candidate) -> ProfileReport:
        """Run `candidate` under the sampler and return the aggregated report.

        If `candidate` raises, the sampler is stopped and joined first; the samples
        taken so far stay available on `samples` and the error propagates unchanged.
        """
        if self._used:
            raise RuntimeError("ProfilerSession is single-use; create a new session per run")
        if not callable(candidate):
            raise InvalidArgument(f"candidate must be callable, got {candidate!r}")
        require_stack_sampling()
        self._used = True

        self._target_thread_id = threading.get_ident()
        started_at = time.monotonic()
        self._thread = threading.Thread(
            target=self._sample_loop, args=(started_at,), name="perfprobe-sampler", daemon=True
        )
        self._thread.start()
        try:
            self._invoke(candidate)
        finally:
            self._shutdown(started_at)

        if self._sampler_error is not None:
            raise RuntimeError(f"Stack sampler failed: {self._sampler_error}") from self._sampler_error

        report = self.report()
        if report.insufficient_samples:
            logger.warning(
                "No samples recorded (candidate ran %.6fs, interval %.6fs); wrap it in an outer loop",
                report.elapsed,
                self.interval,
            )
        else:
            logger.debug("Profiled %d sample(s) over %.6fs", report.sample_count, report.elapsed)
        return report

    def report(self) -> ProfileReport:
        if self._elapsed is None:
            raise RuntimeError("ProfilerSession has not finished running")
        return build_report(self._samples, interval=self.interval, elapsed=self._elapsed, max_depth=self.max_depth)

    def _invoke(self, candidate: Candidate) -> None:
        # This frame is the boundary: everything above it belongs to the caller.
        self._boundary = sys._getframe()
        try:
            candidate()
        finally:
            self._boundary = None

    def _shutdown(self, started_at: float) -> None:
        self._elapsed = time.monotonic() - started_at
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def _sample_loop(self, started_at: float) -> None:
        next_tick = started_at + self.interval
        try:
            while True:
                delay = next_tick - time.monotonic()
                if delay > 0 and self._stop.wait(delay):
                    return
                if self._stop.is_set():
                    return
                self._take_sample()
                next_tick += self.interval
                now = time.monotonic()
                if next_tick <= now:
                    # Fell behind: skip to the next tick on the original grid instead of bursting.
                    missed = math.floor((now - next_tick) / self.interval) + 1
                    next_tick += missed * self.interval
        except Exception as e:
            logger.error("Stack sampler stopped: %s: %s", type(e).__name__, e)
            self._sampler_error = e

    def _take_sample(self) -> None:
        boundary = self._boundary
        if boundary is None or self._target_thread_id is None:
            return
        frame = current_frame_of(self._target_thread_id)
        try:
            frames = walk_stack(frame, boundary=boundary, max_depth=self.max_depth)
        finally:
            del frame
        if frames:
            self._samples.append(Sample(timestamp=time.monotonic(), frames=frames))


@attrs.define(slots=True)
class SamplingProfiler:
    """Profiler configuration; each `profile` call runs a fresh `ProfilerSession`."""

    interval: float = attrs.field(converter=validate_interval)
    max_depth: int | None = attrs.field(default=None, converter=validate_max_depth)
    last_session: ProfilerSession | None = attrs.field(default=None, init=False)

    def profile(self, candidate: Candidate) -> ProfileReport:
        session = ProfilerSession(self.interval, self.max_depth)
        self.last_session = session
        return session.run(candidate)


def profile(candidate: Candidate, interval: float | None = None, *, max_depth: int | None = _UNSET) -> ProfileReport:
    """Sample `candidate`'s call stack every `interval` seconds while it runs.

    An omitted `interval` or `max_depth` falls back to its `PERFPROBE_*` variable;
    `max_depth=None` means unlimited.
    """
    if interval is None:
        interval = env_interval()
    if max_depth is _UNSET:
        max_depth = env_max_depth()
    return SamplingProfiler(interval=interval, max_depth=max_depth).profile(candidate)


def repeat(candidate: Candidate, times: int) -> Candidate:
    """Wrap `candidate` in an outer loop so a fast computation lives long enough to sample."""
    if isinstance(times, bool) or not isinstance(times, int) or times <= 0:
        raise InvalidArgument(f"times must be a positive integer, got {times!r}")

    def repeated() -> None:
        for _ in range(times):
            candidate()

    return repeated

from __future__ import annotations


class PerfProbeError(Exception):
    """Base class for errors raised by the harness and the profiler."""


class InvalidArgument(PerfProbeError, ValueError):
    """A repetition count, warmup count, interval or depth is out of range."""


class AllTrialsFailed(PerfProbeError):
    """Every timed repetition of a candidate raised."""

    def __init__(self, *, name: str, repetitions: int, last_index: int, last_error: BaseException) -> None:
        self.name = name
        self.repetitions = repetitions
        self.last_index = last_index
        self.last_error = last_error
        super().__init__(
            f"All {repetitions} trial(s) of {name!r} failed; "
            f"last failure at repetition {last_index}: {type(last_error).__name__}: {last_error}"
        )


class InsufficientSamples(PerfProbeError):
    """The profiled candidate finished before any sampling tick fired."""

    def __init__(self, *, interval: float, elapsed: float) -> None:
        self.interval = interval
        self.elapsed = elapsed
        super().__init__(
            f"No samples recorded: candidate ran for {elapsed:.6f}s with a sampling interval of {interval:.6f}s. "
            "Increase the repetition count or wrap the candidate in an outer loop (see perfprobe.repeat)."
        )


class StackSamplingUnsupported(PerfProbeError):
    """The running interpreter cannot snapshot another thread's call stack."""

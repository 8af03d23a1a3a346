"""Measurement utilities for comparing alternative implementations of one computation.

Two independent components live here:

- `perfprobe.timing_harness`: repeated, individually timed runs of zero-argument
  callables with summary statistics and side-by-side comparison.
- `perfprobe.sampling_profiler`: a background-timer stack sampler that attributes
  wall-clock time to call frames as "self" and "total" time.
"""

from __future__ import annotations

import logging

from .errors import AllTrialsFailed, InsufficientSamples, InvalidArgument, PerfProbeError, StackSamplingUnsupported
from .sampling_profiler.session import SamplingProfiler, profile, repeat
from .timing_harness.runner import TimingHarness, compare, measure

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AllTrialsFailed",
    "InsufficientSamples",
    "InvalidArgument",
    "PerfProbeError",
    "SamplingProfiler",
    "StackSamplingUnsupported",
    "TimingHarness",
    "compare",
    "measure",
    "profile",
    "repeat",
]

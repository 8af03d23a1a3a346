"""Statistical stack-sampling profiler.

A background timer snapshots the call stack of the thread running a candidate at a
fixed interval. Samples are aggregated once, after the candidate finishes, into
per-frame "self" time (frame was innermost) and "total" time (frame was anywhere on
the stack).
"""

from __future__ import annotations

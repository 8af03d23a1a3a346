"""Timing harness for interchangeable implementations of one task.

Each candidate is a zero-argument callable. Every repetition is timed on its own so
the full run-to-run distribution is available, not only a mean; failed repetitions
are recorded and excluded from the statistics.
"""

from __future__ import annotations

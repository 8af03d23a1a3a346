from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from .model import FrameId, FrameStat, ProfileReport, Sample


def count_frames(samples: Sequence[Sample]) -> tuple[Counter[FrameId], Counter[FrameId]]:
    """Return (self_counts, total_counts) over all samples.

    A frame that appears several times in one sample (recursion) counts once toward
    its total for that sample.
    """
    self_counts: Counter[FrameId] = Counter()
    total_counts: Counter[FrameId] = Counter()
    for s in samples:
        if not s.frames:
            continue
        self_counts[s.innermost] += 1
        total_counts.update(set(s.frames))
    return self_counts, total_counts


def build_report(
    samples: Sequence[Sample], *, interval: float, elapsed: float, max_depth: int | None = None
) -> ProfileReport:
    """Aggregate the complete sample sequence into a ProfileReport."""
    kept = [s for s in samples if s.frames]
    self_counts, total_counts = count_frames(kept)
    sample_count = len(kept)
    stats = tuple(
        FrameStat(
            frame=frame,
            self_count=self_counts.get(frame, 0),
            total_count=total,
            interval=interval,
            sample_count=sample_count,
        )
        for frame, total in total_counts.items()
    )
    return ProfileReport(frames=stats, interval=interval, sample_count=sample_count, elapsed=elapsed, max_depth=max_depth)

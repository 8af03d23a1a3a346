from __future__ import annotations

from typing import Any, Literal

import attrs

from ..errors import InsufficientSamples

SortKey = Literal["self", "total"]


@attrs.define(frozen=True, slots=True)
class FrameId:
    function: str
    filename: str
    lineno: int

    def label(self) -> str:
        return f"{self.function} ({self.filename}:{self.lineno})"

    def to_dict(self) -> dict[str, Any]:
        return {"function": self.function, "filename": self.filename, "lineno": self.lineno}


@attrs.define(frozen=True, slots=True)
class Sample:
    """One stack snapshot; `frames[0]` is the innermost (executing) frame."""

    timestamp: float
    frames: tuple[FrameId, ...]

    @property
    def innermost(self) -> FrameId:
        return self.frames[0]


@attrs.define(frozen=True, slots=True)
class FrameStat:
    frame: FrameId
    self_count: int
    total_count: int
    interval: float
    sample_count: int

    @property
    def self_time(self) -> float:
        return self.self_count * self.interval

    @property
    def total_time(self) -> float:
        return self.total_count * self.interval

    @property
    def self_pct(self) -> float:
        return 100.0 * self.self_count / self.sample_count if self.sample_count else 0.0

    @property
    def total_pct(self) -> float:
        return 100.0 * self.total_count / self.sample_count if self.sample_count else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "frame": self.frame.to_dict(),
            "self_count": self.self_count,
            "total_count": self.total_count,
            "self_time_s": self.self_time,
            "total_time_s": self.total_time,
            "self_pct": self.self_pct,
            "total_pct": self.total_pct,
        }


@attrs.define(frozen=True, slots=True)
class ProfileReport:
    frames: tuple[FrameStat, ...]
    interval: float
    sample_count: int
    elapsed: float
    max_depth: int | None = None

    @property
    def sampling_duration(self) -> float:
        return self.sample_count * self.interval

    @property
    def insufficient_samples(self) -> bool:
        return self.sample_count == 0

    def require_samples(self) -> "ProfileReport":
        """Return self, or raise `InsufficientSamples` if nothing was sampled."""
        if self.insufficient_samples:
            raise InsufficientSamples(interval=self.interval, elapsed=self.elapsed)
        return self

    def by_self(self) -> list[FrameStat]:
        return sorted(self.frames, key=lambda s: (-s.self_count, -s.total_count, s.frame.label()))

    def by_total(self) -> list[FrameStat]:
        return sorted(self.frames, key=lambda s: (-s.total_count, -s.self_count, s.frame.label()))

    def sorted_frames(self, by: SortKey = "self") -> list[FrameStat]:
        if by == "self":
            return self.by_self()
        if by == "total":
            return self.by_total()
        raise ValueError(f"Unknown sort key: {by!r} (expected 'self' or 'total')")

    def stat_for(self, function: str) -> FrameStat | None:
        """First frame whose function name (or its last dotted part) equals `function`."""
        for s in self.by_self():
            if s.frame.function == function or s.frame.function.rsplit(".", 1)[-1] == function:
                return s
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "interval_s": self.interval,
            "sample_count": self.sample_count,
            "sampling_duration_s": self.sampling_duration,
            "elapsed_s": self.elapsed,
            "max_depth": self.max_depth,
            "insufficient_samples": self.insufficient_samples,
            "frames": [s.to_dict() for s in self.by_self()],
        }

from __future__ import annotations

import math

import pytest

from perfprobe.errors import InsufficientSamples
from perfprobe.sampling_profiler.aggregate import build_report, count_frames
from perfprobe.sampling_profiler.model import FrameId, Sample

MAIN = FrameId(function="main", filename="prog.py", lineno=1)
LOOP = FrameId(function="loop_sum", filename="prog.py", lineno=10)
VEC = FrameId(function="vec_sum", filename="prog.py", lineno=20)
REC = FrameId(function="fib", filename="prog.py", lineno=30)


def _samples() -> list[Sample]:
    return [
        Sample(timestamp=0.01, frames=(LOOP, MAIN)),
        Sample(timestamp=0.02, frames=(LOOP, MAIN)),
        Sample(timestamp=0.03, frames=(LOOP, MAIN)),
        Sample(timestamp=0.04, frames=(VEC, MAIN)),
        Sample(timestamp=0.05, frames=(MAIN,)),
    ]


def test_self_and_total_counts() -> None:
    self_counts, total_counts = count_frames(_samples())
    assert self_counts == {LOOP: 3, VEC: 1, MAIN: 1}
    assert total_counts == {LOOP: 3, VEC: 1, MAIN: 5}


def test_recursion_counts_once_per_sample_toward_total() -> None:
    samples = [Sample(timestamp=0.0, frames=(REC, REC, REC, MAIN))]
    self_counts, total_counts = count_frames(samples)
    assert self_counts[REC] == 1
    assert total_counts[REC] == 1


def test_report_invariants() -> None:
    interval = 0.02
    report = build_report(_samples(), interval=interval, elapsed=0.11)
    assert report.sample_count == 5
    assert math.isclose(report.sampling_duration, 5 * interval)
    assert math.isclose(sum(s.self_time for s in report.frames), report.sample_count * interval)
    assert math.isclose(sum(s.self_pct for s in report.frames), 100.0)
    for s in report.frames:
        assert s.total_time >= s.self_time
        assert s.total_pct >= s.self_pct


def test_by_self_and_by_total_ordering() -> None:
    report = build_report(_samples(), interval=0.02, elapsed=0.1)
    assert [s.frame for s in report.by_self()] == [LOOP, MAIN, VEC]
    assert [s.frame for s in report.by_total()] == [MAIN, LOOP, VEC]
    main = report.stat_for("main")
    assert main is not None
    assert main.total_pct == 100.0
    assert main.self_pct == 20.0


def test_self_tie_broken_by_total() -> None:
    samples = [
        Sample(timestamp=0.0, frames=(VEC, LOOP)),
        Sample(timestamp=0.0, frames=(LOOP,)),
        Sample(timestamp=0.0, frames=(MAIN,)),
    ]
    report = build_report(samples, interval=0.01, elapsed=0.03)
    ordered = [s.frame for s in report.by_self()]
    assert ordered[0] == LOOP


def test_empty_samples_flag_insufficient() -> None:
    report = build_report([], interval=0.05, elapsed=0.001)
    assert report.sample_count == 0
    assert report.frames == ()
    assert report.insufficient_samples
    with pytest.raises(InsufficientSamples) as ei:
        report.require_samples()
    assert ei.value.interval == 0.05


def test_sorted_frames_rejects_unknown_key() -> None:
    report = build_report(_samples(), interval=0.02, elapsed=0.1)
    with pytest.raises(ValueError):
        report.sorted_frames("calls")  # type: ignore[arg-type]

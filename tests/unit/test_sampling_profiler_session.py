from __future__ import annotations

import math
import threading
import time

import pytest

from perfprobe.errors import InvalidArgument
from perfprobe.sampling_profiler import session as session_module
from perfprobe.sampling_profiler.session import ProfilerSession, SamplingProfiler, profile, repeat


def _sleepy_leaf() -> None:
    time.sleep(0.3)


def _sleepy_parent() -> None:
    _sleepy_leaf()


def _sampler_threads() -> list[threading.Thread]:
    return [t for t in threading.enumerate() if t.name == "perfprobe-sampler"]


@pytest.mark.parametrize("interval", [0, -0.01, float("nan"), float("inf"), "0.1", None, True])
def test_profile_rejects_bad_interval(interval: object) -> None:
    with pytest.raises(InvalidArgument):
        SamplingProfiler(interval=interval)  # type: ignore[arg-type]


def test_profile_rejects_bad_max_depth() -> None:
    with pytest.raises(InvalidArgument):
        SamplingProfiler(interval=0.01, max_depth=0)


def test_fast_candidate_yields_insufficient_samples() -> None:
    report = profile(lambda: None, 1.0)
    assert report.sample_count == 0
    assert report.insufficient_samples
    assert report.frames == ()
    assert not _sampler_threads()


def test_samples_attribute_time_to_callee() -> None:
    report = profile(_sleepy_parent, 0.01)
    assert report.sample_count > 5
    leaf = report.stat_for("_sleepy_leaf")
    parent = report.stat_for("_sleepy_parent")
    assert leaf is not None and parent is not None
    assert report.by_self()[0].frame == leaf.frame
    assert parent.total_count == report.sample_count
    # A tick can land in the instant between the two calls.
    assert parent.self_count <= 1
    assert math.isclose(sum(s.self_time for s in report.frames), report.sample_count * report.interval)
    for s in report.frames:
        assert s.total_time >= s.self_time


def test_profiler_frames_are_not_recorded() -> None:
    report = profile(_sleepy_parent, 0.01)
    for s in report.frames:
        assert s.frame.filename == __file__


def test_max_depth_limits_recorded_frames() -> None:
    profiler = SamplingProfiler(interval=0.01, max_depth=1)
    report = profiler.profile(_sleepy_parent)
    assert report.max_depth == 1
    assert report.by_self()[0].frame.function == "_sleepy_leaf"
    assert profiler.last_session is not None
    assert all(len(s.frames) == 1 for s in profiler.last_session.samples)


def test_candidate_error_propagates_after_cleanup() -> None:
    def failing() -> None:
        time.sleep(0.15)
        raise ValueError("boom")

    profiler = SamplingProfiler(interval=0.01)
    with pytest.raises(ValueError, match="boom"):
        profiler.profile(failing)

    assert not _sampler_threads()
    session = profiler.last_session
    assert session is not None
    assert session.finished
    assert len(session.samples) > 0
    partial = session.report()
    assert partial.sample_count == len(session.samples)


def test_session_is_single_use() -> None:
    session = ProfilerSession(0.5)
    session.run(lambda: None)
    with pytest.raises(RuntimeError):
        session.run(lambda: None)


def test_session_report_requires_completed_run() -> None:
    with pytest.raises(RuntimeError):
        ProfilerSession(0.5).report()


def test_sample_timestamps_are_monotonic() -> None:
    profiler = SamplingProfiler(interval=0.01)
    profiler.profile(_sleepy_parent)
    assert profiler.last_session is not None
    stamps = [s.timestamp for s in profiler.last_session.samples]
    assert stamps == sorted(stamps)


def test_repeat_wraps_candidate_in_outer_loop() -> None:
    calls: list[int] = []
    wrapped = repeat(lambda: calls.append(1), 5)
    wrapped()
    assert len(calls) == 5
    with pytest.raises(InvalidArgument):
        repeat(lambda: None, 0)


def test_profile_uses_env_interval(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PERFPROBE_INTERVAL_S", "0.25")
    report = profile(lambda: None)
    assert report.interval == 0.25


def test_profile_ignores_unrelated_malformed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PERFPROBE_REPETITIONS", "lots")
    monkeypatch.setenv("PERFPROBE_WARMUP", "-1")
    report = profile(_sleepy_parent, 0.01)
    assert report.sample_count > 0


def test_explicit_none_max_depth_is_unlimited(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PERFPROBE_MAX_DEPTH", "1")
    report = profile(_sleepy_parent, 0.01, max_depth=None)
    assert report.max_depth is None
    assert report.stat_for("_sleepy_parent") is not None


def test_omitted_max_depth_uses_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PERFPROBE_MAX_DEPTH", "1")
    report = profile(_sleepy_parent, 0.01)
    assert report.max_depth == 1


def test_sampler_error_surfaces_after_candidate(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_walk(*args: object, **kwargs: object) -> tuple[()]:
        raise LookupError("stack walk failed")

    monkeypatch.setattr(session_module, "walk_stack", broken_walk)
    completed: list[bool] = []

    def candidate() -> None:
        time.sleep(0.1)
        completed.append(True)

    with pytest.raises(RuntimeError, match="Stack sampler failed") as excinfo:
        profile(candidate, 0.01)

    assert isinstance(excinfo.value.__cause__, LookupError)
    assert completed == [True]
    assert not _sampler_threads()

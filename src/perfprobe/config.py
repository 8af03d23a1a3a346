from __future__ import annotations

import os
from collections.abc import Mapping

import attrs

from .errors import InvalidArgument

ENV_INTERVAL = "PERFPROBE_INTERVAL_S"
ENV_MAX_DEPTH = "PERFPROBE_MAX_DEPTH"
ENV_REPETITIONS = "PERFPROBE_REPETITIONS"
ENV_WARMUP = "PERFPROBE_WARMUP"


@attrs.define(frozen=True, slots=True)
class Settings:
    interval_s: float = 0.02
    max_depth: int | None = None
    repetitions: int = 10
    warmup: int = 0


DEFAULT_SETTINGS = Settings()


def validate_repetitions(repetitions: object) -> int:
    if isinstance(repetitions, bool) or not isinstance(repetitions, int) or repetitions <= 0:
        raise InvalidArgument(f"repetitions must be a positive integer, got {repetitions!r}")
    return repetitions


def validate_warmup(warmup: object) -> int:
    if isinstance(warmup, bool) or not isinstance(warmup, int) or warmup < 0:
        raise InvalidArgument(f"warmup must be a non-negative integer, got {warmup!r}")
    return warmup


def validate_interval(interval: object) -> float:
    if isinstance(interval, bool) or not isinstance(interval, (int, float)):
        raise InvalidArgument(f"interval must be a number of seconds, got {interval!r}")
    value = float(interval)
    # NaN fails the comparison as well.
    if not value > 0.0 or value == float("inf"):
        raise InvalidArgument(f"interval must be strictly positive and finite, got {interval!r}")
    return value


def validate_max_depth(max_depth: object) -> int | None:
    if max_depth is None:
        return None
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth <= 0:
        raise InvalidArgument(f"max_depth must be a positive integer or None, got {max_depth!r}")
    return max_depth


def _env_value(env: Mapping[str, str], name: str) -> str | None:
    v = env.get(name)
    if v is None or not v.strip():
        return None
    return v.strip()


def _parse_env_int(env: Mapping[str, str], name: str) -> int | None:
    raw = _env_value(env, name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        raise InvalidArgument(f"{name} must be an integer, got {raw!r}") from None


def env_interval(env: Mapping[str, str] | None = None) -> float:
    """Sampling interval from `PERFPROBE_INTERVAL_S`, or the default."""
    env = os.environ if env is None else env
    raw = _env_value(env, ENV_INTERVAL)
    if raw is None:
        return DEFAULT_SETTINGS.interval_s
    try:
        interval = float(raw)
    except ValueError:
        raise InvalidArgument(f"{ENV_INTERVAL} must be a number of seconds, got {raw!r}") from None
    return validate_interval(interval)


def env_max_depth(env: Mapping[str, str] | None = None) -> int | None:
    """Stack depth limit from `PERFPROBE_MAX_DEPTH` (0 means unlimited), or the default."""
    env = os.environ if env is None else env
    max_depth = _parse_env_int(env, ENV_MAX_DEPTH)
    if max_depth is None:
        return DEFAULT_SETTINGS.max_depth
    return None if max_depth == 0 else validate_max_depth(max_depth)


def env_repetitions(env: Mapping[str, str] | None = None) -> int:
    env = os.environ if env is None else env
    repetitions = _parse_env_int(env, ENV_REPETITIONS)
    if repetitions is None:
        return DEFAULT_SETTINGS.repetitions
    return validate_repetitions(repetitions)


def env_warmup(env: Mapping[str, str] | None = None) -> int:
    env = os.environ if env is None else env
    warmup = _parse_env_int(env, ENV_WARMUP)
    if warmup is None:
        return DEFAULT_SETTINGS.warmup
    return validate_warmup(warmup)


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Return the default settings with all `PERFPROBE_*` environment overrides applied."""
    env = os.environ if env is None else env
    return Settings(
        interval_s=env_interval(env),
        max_depth=env_max_depth(env),
        repetitions=env_repetitions(env),
        warmup=env_warmup(env),
    )

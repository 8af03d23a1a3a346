from __future__ import annotations

import sys
from types import CodeType, FrameType

from ..errors import StackSamplingUnsupported
from .model import FrameId


def stack_sampling_supported() -> bool:
    return callable(getattr(sys, "_current_frames", None))


def require_stack_sampling() -> None:
    if not stack_sampling_supported():
        raise StackSamplingUnsupported(
            f"{sys.implementation.name} does not expose sys._current_frames(); cannot sample another thread's stack."
        )


def frame_id_for_code(code: CodeType) -> FrameId:
    # co_qualname exists from Python 3.11 on.
    function = getattr(code, "co_qualname", None) or code.co_name
    return FrameId(function=function, filename=code.co_filename, lineno=code.co_firstlineno)


def current_frame_of(thread_id: int) -> FrameType | None:
    """Return the frame a thread is currently executing, or None if the thread is gone."""
    return sys._current_frames().get(thread_id)


def walk_stack(frame: FrameType | None, *, boundary: FrameType | None, max_depth: int | None) -> tuple[FrameId, ...]:
    """Frame ids from `frame` outward, stopping before `boundary` or after `max_depth` frames.

    When `boundary` is given but never reached, the thread is not inside the boundary's
    callees and an empty tuple is returned.
    """
    out: list[FrameId] = []
    f = frame
    while f is not None:
        if f is boundary:
            return tuple(out)
        if max_depth is None or len(out) < max_depth:
            out.append(frame_id_for_code(f.f_code))
        f = f.f_back
    if boundary is not None:
        return ()
    return tuple(out)

"""Trace capture for failed attempts.

A trace is a list of human-readable frame strings describing where a
failure happened and how control got there. Frames are captured
innermost-first, each labelled with its index:

    #0 /app/client.py(88): fetch()
    #1 /app/riskycall/retry/executor.py(301): _invoke()
    #2 /app/riskycall/retry/executor.py(212): attempt()
    #3 /app/main.py(12): <module>()

format_trace() applies a TraceFormat policy before the frames are logged.
"""

from __future__ import annotations

import re
import traceback
from typing import Optional, Sequence

from riskycall.core.models import TraceFormat

_INDEX_PREFIX = re.compile(r"^#\d+\s+")


def capture_trace(exc: Optional[BaseException] = None) -> list[str]:
    """Capture frames for ``exc``, or for the current call stack.

    When ``exc`` carries a traceback, the frames between the handler and
    the raise point are joined to the stack that led to the handler, so
    the result covers the full path from the entry point to the fault.

    Never raises; a capture error produces a single placeholder frame.
    """
    try:
        tb = exc.__traceback__ if exc is not None else None
        if tb is not None:
            outer = traceback.extract_stack(tb.tb_frame.f_back)
            inner = traceback.extract_tb(tb)
            summaries = list(outer) + list(inner)
        else:
            # drop capture_trace's own frame
            summaries = list(traceback.extract_stack())[:-1]

        summaries.reverse()
        return [
            f"#{index} {frame.filename}({frame.lineno}): {frame.name}()"
            for index, frame in enumerate(summaries)
        ]
    except Exception as e:  # pragma: no cover
        return [f"<trace unavailable: {e}>"]


def strip_index(frame: str) -> str:
    """Remove a leading ``#N `` label from a frame string."""
    return _INDEX_PREFIX.sub("", frame, count=1)


def format_trace(
    frames: Sequence[str],
    trace_format: TraceFormat = TraceFormat.INNERMOST_FIRST,
) -> list[str]:
    """Apply a formatting policy to innermost-first frames.

    Args:
        frames: Frames as produced by capture_trace().
        trace_format: Ordering/labelling policy.

    Returns:
        A new list of frame strings.
    """
    trace_format = TraceFormat(trace_format)
    if trace_format is TraceFormat.RAW:
        return list(frames)

    stripped = [strip_index(frame) for frame in frames]
    if trace_format is TraceFormat.OUTERMOST_FIRST:
        stripped.reverse()
    return stripped

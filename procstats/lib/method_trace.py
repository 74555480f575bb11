"""Call-stack helpers used to decorate log lines with the calling frame."""

from __future__ import annotations

import logging
import os
import sys
from types import FrameType

logger = logging.getLogger(__name__)


def _frame_at(depth: int) -> FrameType | None:
    # +2 skips this helper and the public function that called it
    try:
        return sys._getframe(depth + 2)
    except ValueError:
        logger.error("Unable to obtain stack frame", extra={"depth": depth})
        return None


def method_name(depth: int = 0) -> str | None:
    """Return the function name ``depth`` frames above the caller.

    ``method_name(0)`` called from ``foo()`` returns ``"foo"``.
    """

    if depth < 0:
        raise ValueError("depth must be non-negative")
    frame = _frame_at(depth)
    if frame is None:
        return None
    return frame.f_code.co_name


def caller_frame_descriptor(depth: int = 0) -> str | None:
    """Return ``module.qualname(file.py:line)`` for the frame ``depth`` above the caller."""

    if depth < 0:
        raise ValueError("depth must be non-negative")
    frame = _frame_at(depth)
    if frame is None:
        return None
    code = frame.f_code
    module = frame.f_globals.get("__name__", "?")
    qualname = getattr(code, "co_qualname", code.co_name)
    filename = os.path.basename(code.co_filename)
    return f"{module}.{qualname}({filename}:{frame.f_lineno})"

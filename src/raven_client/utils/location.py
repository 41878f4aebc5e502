"""
Module: location.py
Description: Origin strings for captured events.

Sentry groups events by their culprit, a short description of where
the event was raised from.
"""

import inspect
import os


def location_info(file: str, func: str, line: int) -> str:
    """Format an origin as ``<file> in <func> at <line>``."""
    return f"{file} in {func} at {line}"


def here(depth: int = 1) -> str:
    """
    Describe the caller's source location.

    Args:
        depth: Frames to walk up from the caller (1 is the direct caller)

    Returns:
        Origin string for the selected frame, or ``"<unknown>"``
    """
    frame = inspect.currentframe()
    try:
        for _ in range(depth):
            if frame is None:
                break
            frame = frame.f_back
        if frame is None:
            return "<unknown>"
        code = frame.f_code
        return location_info(os.path.basename(code.co_filename), code.co_name, frame.f_lineno)
    finally:
        del frame

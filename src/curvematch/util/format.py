# curvematch/util/format.py
"""
Display formatting helpers for sizes, distances and coordinates.
"""

from __future__ import annotations


def number_text(value: float) -> str:
    """
    Render a float the way it is written in GPX/WKT output.

    Integral values lose their trailing ".0" (100.0 -> "100"), everything
    else uses the shortest round-tripping repr.
    """
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_file_size(n_bytes: int) -> str:
    if n_bytes < 1024:
        return f"{n_bytes} B"
    if n_bytes < 1024 * 1024:
        return f"{n_bytes / 1024:.1f} KB"
    return f"{n_bytes / (1024 * 1024):.2f} MB"


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{round(meters)} m"
    return f"{meters / 1000:.1f} km"


def format_elevation(meters: float) -> str:
    return f"{round(meters)} m"

"""
Debug logging helpers.

All modules log under the ``view_cone`` logger namespace. These helpers
switch DEBUG output on and off and format geometry compactly for log
messages.
"""

import logging
import math
from typing import Iterable, Optional, TextIO

from view_cone.boundary import VisibilityBoundary
from view_cone.geometry import Point

LOGGER_NAME = "view_cone"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_handler: Optional[logging.Handler] = None


def setup_debug_logging(level: int = logging.DEBUG, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Send view_cone log records to a stream.

    Calling this again replaces the previous handler rather than adding a
    second one.

    Parameters:
        level: Logging level for the view_cone logger
        stream: Target stream (defaults to stderr)

    Returns:
        The view_cone logger
    """
    global _handler

    package_logger = logging.getLogger(LOGGER_NAME)
    if _handler is not None:
        package_logger.removeHandler(_handler)

    _handler = logging.StreamHandler(stream)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(_handler)
    package_logger.setLevel(level)
    return package_logger


def disable_debug_logging() -> None:
    """Remove the handler added by setup_debug_logging and go back to WARNING."""
    global _handler

    package_logger = logging.getLogger(LOGGER_NAME)
    if _handler is not None:
        package_logger.removeHandler(_handler)
        _handler = None
    package_logger.setLevel(logging.WARNING)


def format_angle(angle: float) -> str:
    """Format a radian angle as degrees, e.g. '45.0°'."""
    return f"{math.degrees(angle):.1f}°"


def format_point(point: Point, precision: int = 2) -> str:
    return f"({point.x:.{precision}f}, {point.y:.{precision}f})"


def format_polygon(points: Iterable[Point], precision: int = 2, max_points: int = 8) -> str:
    """Format a point list, eliding the middle when it is long."""
    points = list(points)
    if len(points) <= max_points:
        shown = [format_point(p, precision) for p in points]
    else:
        head = max_points // 2
        tail = max_points - head
        shown = [format_point(p, precision) for p in points[:head]]
        shown.append(f"... {len(points) - max_points} more ...")
        shown.extend(format_point(p, precision) for p in points[-tail:])
    return "[" + ", ".join(shown) + "]"


def log_boundary(boundary: VisibilityBoundary, logger: Optional[logging.Logger] = None) -> None:
    """Log a one-line summary of a boundary at DEBUG level."""
    logger = logger or logging.getLogger(LOGGER_NAME)
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(
        "Boundary from %s: %d commands, %d arcs, %d rays, %d hits, vertices %s",
        format_point(boundary.origin),
        len(boundary),
        len(boundary.arcs),
        len(boundary.rays),
        len(boundary.hits),
        format_polygon(boundary.vertices()),
    )

"""
Visibility boundary: the path handed to rendering and the rays behind it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Optional, Union

import numpy as np
from numpy.typing import NDArray

from view_cone.geometry import LineSegment, Point

DEFAULT_ARC_STEP = math.radians(5.0)


@dataclass(frozen=True)
class MoveTo:
    """Start a new subpath at point."""

    point: Point


@dataclass(frozen=True)
class LineTo:
    """Straight edge from the current point to point."""

    point: Point


@dataclass(frozen=True)
class Arc:
    """
    Circular arc around center, swept with increasing angle.

    As with the canvas ``arc`` call, drawing an arc first draws a straight
    line from the current point to the arc's start point.

    Attributes:
        center: Arc center (the observer position)
        radius: Arc radius (the observer's max distance)
        start_angle: Angle in radians where the arc starts
        end_angle: Angle in radians where the arc ends, >= start_angle
    """

    center: Point
    radius: float
    start_angle: float
    end_angle: float

    @property
    def start_point(self) -> Point:
        return Point(
            self.center.x + self.radius * math.cos(self.start_angle),
            self.center.y + self.radius * math.sin(self.start_angle),
        )

    @property
    def end_point(self) -> Point:
        return Point(
            self.center.x + self.radius * math.cos(self.end_angle),
            self.center.y + self.radius * math.sin(self.end_angle),
        )

    @property
    def sweep(self) -> float:
        return self.end_angle - self.start_angle


@dataclass(frozen=True)
class ClosePath:
    """Straight edge back to the subpath start."""

    pass


PathCommand = Union[MoveTo, LineTo, Arc, ClosePath]


@dataclass(frozen=True)
class CastRay:
    """
    One ray of the sweep and what it ran into.

    Attributes:
        ray: Full-length ray from the observer (length = max distance)
        hit: Nearest obstacle intersection along the ray, or None
    """

    ray: LineSegment
    hit: Optional[Point] = None

    @property
    def end(self) -> Point:
        """Where the ray stops: its hit if any, otherwise its far end."""
        return self.hit if self.hit is not None else self.ray.end

    @property
    def length(self) -> float:
        return self.ray.start.distance_to(self.end)


@dataclass(frozen=True)
class VisibilityBoundary:
    """
    Closed region an observer can see.

    Attributes:
        origin: Observer position the boundary was computed from
        commands: Path commands, starting with MoveTo(origin) and ending
                  with ClosePath()
        rays: Rays cast during the sweep, in angular order, for diagnostic
              overlays
    """

    origin: Point
    commands: tuple[PathCommand, ...]
    rays: tuple[CastRay, ...] = ()

    def __iter__(self) -> Iterator[PathCommand]:
        return iter(self.commands)

    def __len__(self) -> int:
        return len(self.commands)

    @property
    def arcs(self) -> list[Arc]:
        return [c for c in self.commands if isinstance(c, Arc)]

    @property
    def hits(self) -> list[Point]:
        """Obstacle intersections found by the cast rays."""
        return [r.hit for r in self.rays if r.hit is not None]

    def vertices(self) -> list[Point]:
        """
        Explicit points of the path in drawing order.

        Arcs contribute their start and end points. The origin appears once,
        from the leading MoveTo.
        """
        points: list[Point] = []
        for command in self.commands:
            if isinstance(command, (MoveTo, LineTo)):
                points.append(command.point)
            elif isinstance(command, Arc):
                points.append(command.start_point)
                points.append(command.end_point)
        return points

    def to_polygon(self, arc_step: float = DEFAULT_ARC_STEP) -> NDArray[np.float64]:
        """
        Flatten the path into polygon vertices for fill-based renderers.

        Parameters:
            arc_step: Maximum angular step in radians between points sampled
                      along an arc

        Returns:
            Array of shape (N, 2)

        Raises:
            ValueError: If arc_step is not positive
        """
        if arc_step <= 0:
            raise ValueError(f"arc_step must be positive, got {arc_step}")

        rows: list[tuple[float, float]] = []
        for command in self.commands:
            if isinstance(command, (MoveTo, LineTo)):
                rows.append((command.point.x, command.point.y))
            elif isinstance(command, Arc):
                n_steps = max(1, int(math.ceil(command.sweep / arc_step)))
                angles = np.linspace(command.start_angle, command.end_angle, n_steps + 1)
                xs = command.center.x + command.radius * np.cos(angles)
                ys = command.center.y + command.radius * np.sin(angles)
                rows.extend(zip(xs.tolist(), ys.tolist()))

        if not rows:
            return np.empty((0, 2), dtype=np.float64)
        return np.array(rows, dtype=np.float64)

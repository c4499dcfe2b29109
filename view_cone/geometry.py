"""
Geometry primitives: points, segments, segment intersection and angular ordering.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np
from numpy.typing import NDArray


class ValidationError(Exception):
    """Raised when input validation fails."""

    pass


@dataclass(frozen=True)
class Point:
    """
    Immutable 2D coordinate.

    Also used as a displacement vector (see ``Vector``), so it supports
    addition, subtraction and scaling.

    Attributes:
        x: Horizontal coordinate
        y: Vertical coordinate

    Raises:
        ValidationError: If either coordinate is not a finite number
    """

    x: float
    y: float

    def __post_init__(self) -> None:
        try:
            x = float(self.x)
            y = float(self.y)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Point coordinates must be numbers, got ({self.x!r}, {self.y!r})") from e
        if not (math.isfinite(x) and math.isfinite(y)):
            raise ValidationError(f"Point coordinates must be finite, got ({x}, {y})")
        # Use object.__setattr__ because the dataclass is frozen
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    @classmethod
    def of(cls, value: Any) -> Point:
        """
        Coerce a Point, an (x, y) sequence or a (2,) array into a Point.

        Raises:
            ValidationError: If value cannot be read as a 2D coordinate
        """
        if isinstance(value, Point):
            return value
        if isinstance(value, np.ndarray):
            if value.shape != (2,):
                raise ValidationError(f"Point array must have shape (2,), got {value.shape}")
            return cls(float(value[0]), float(value[1]))
        try:
            x, y = value
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Cannot interpret {value!r} as a 2D point") from e
        return cls(x, y)

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def dot(self, other: Point) -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: Point) -> float:
        """Z component of the 3D cross product (signed parallelogram area)."""
        return self.x * other.y - self.y * other.x

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def distance_to(self, other: Point) -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def translated(self, dx: float, dy: float) -> Point:
        return Point(self.x + dx, self.y + dy)

    def as_array(self) -> NDArray[np.float64]:
        """Return the point as a numpy array of shape (2,)."""
        return np.array([self.x, self.y], dtype=np.float64)


# Displacements share the representation of positions.
Vector = Point


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle anchored at its minimum corner.

    Attributes:
        x: Minimum x coordinate
        y: Minimum y coordinate
        w: Width (x extent)
        h: Height (y extent)
    """

    x: float
    y: float
    w: float
    h: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def contains(self, p: Point) -> bool:
        """Inclusive containment: points on the border count as inside."""
        return self.left <= p.x <= self.right and self.top <= p.y <= self.bottom


@dataclass(frozen=True)
class LineSegment:
    """
    Directed segment from start to end.

    The same type stands for a bounded segment (obstacle edge, occlusion
    test) and for a ray of fixed length (cast from an observer). Rays are
    built through ``LineSegment.ray`` so the intent is visible at the call
    site.
    """

    start: Point
    end: Point

    @classmethod
    def ray(cls, origin: Point, angle: float, length: float) -> LineSegment:
        """Build a ray of the given length leaving origin at angle (radians)."""
        return cls(origin, Point(origin.x + math.cos(angle) * length, origin.y + math.sin(angle) * length))

    @property
    def direction(self) -> Vector:
        return self.end - self.start

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def angle(self) -> float:
        """True angle of the direction vector in (-pi, pi]."""
        return math.atan2(self.end.y - self.start.y, self.end.x - self.start.x)

    @property
    def midpoint(self) -> Point:
        return Point((self.start.x + self.end.x) / 2.0, (self.start.y + self.end.y) / 2.0)


def intersect(a: LineSegment, b: LineSegment) -> Optional[Point]:
    """
    Intersection of two finite segments.

    Uses the parametric form a.start + t * (a.end - a.start) and
    b.start + u * (b.end - b.start). Both parameters must lie in [0, 1]
    with no tolerance, so segments that merely touch at an endpoint do
    intersect.

    Parameters:
        a: First segment
        b: Second segment

    Returns:
        Intersection point, or None if either segment has zero length,
        the segments are parallel, or the crossing lies outside either one
    """
    r = a.direction
    s = b.direction
    if (r.x == 0.0 and r.y == 0.0) or (s.x == 0.0 and s.y == 0.0):
        return None

    denominator = r.cross(s)
    if denominator == 0.0:
        return None

    offset = b.start - a.start
    t = offset.cross(s) / denominator
    u = offset.cross(r) / denominator
    if t < 0.0 or t > 1.0 or u < 0.0 or u > 1.0:
        return None

    return Point(a.start.x + t * r.x, a.start.y + t * r.y)


def bounding_rect(seg: LineSegment) -> Rect:
    """Smallest axis-aligned rectangle containing both endpoints."""
    min_x = min(seg.start.x, seg.end.x)
    min_y = min(seg.start.y, seg.end.y)
    return Rect(min_x, min_y, max(seg.start.x, seg.end.x) - min_x, max(seg.start.y, seg.end.y) - min_y)


def pseudo_angle(seg: LineSegment) -> float:
    """
    Trig-free ordering key for the direction of a segment.

    Maps the direction onto [-2, 2] so that the key increases strictly with
    the true angle over (-pi, pi]: -pi maps towards -2, -pi/2 to -1, 0 to 0,
    pi/2 to 1 and pi to 2. The ±pi discontinuity falls at the ends of the
    range exactly where atan2 puts it.

    A zero-length segment has no direction and maps to 0.
    """
    dx = seg.end.x - seg.start.x
    dy = seg.end.y - seg.start.y
    manhattan = abs(dx) + abs(dy)
    if manhattan == 0.0:
        return 0.0

    p = dx / manhattan
    if dy < 0.0:
        return p - 1.0
    return 1.0 - p


def unit_vector(from_point: Point, to_point: Point) -> Optional[Vector]:
    """Normalized direction from one point to another, or None if they coincide."""
    dx = to_point.x - from_point.x
    dy = to_point.y - from_point.y
    length = math.hypot(dx, dy)
    if length == 0.0:
        return None
    return Point(dx / length, dy / length)


def normalize_angle(angle: float) -> float:
    """
    Wrap angle to the (-pi, pi] range.

    Parameters:
        angle: Angle in radians

    Returns:
        Equivalent angle in (-pi, pi]
    """
    wrapped = math.fmod(angle, 2.0 * math.pi)
    if wrapped <= -math.pi:
        wrapped += 2.0 * math.pi
    elif wrapped > math.pi:
        wrapped -= 2.0 * math.pi
    return wrapped


def angle_to(origin: Point, target: Point) -> float:
    """Angle of the direction from origin to target, in (-pi, pi]."""
    return math.atan2(target.y - origin.y, target.x - origin.x)

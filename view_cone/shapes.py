"""
Obstacle shapes.

The obstacle set is a closed union of three variants, each a frozen
dataclass exposing the same capability set:

- contains(p): point containment
- corners_visible_from(viewpoint): corners that can cast a visibility
  discontinuity as seen from the viewpoint
- intersect(ray): nearest crossing of the shape boundary along a ray

Shapes never change in place. Moving or editing an obstacle means
replacing it (see ``translated``), which is what lets an obstacle
collection detect geometry changes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Union

import numpy as np
from numpy.typing import NDArray

from view_cone.geometry import (
    LineSegment,
    Point,
    Rect,
    ValidationError,
    intersect,
)

# Intersections closer than this to an edge endpoint are ignored, so a ray
# grazing a shared corner is not counted against either edge. Circle hits
# whose chord is shorter than this are treated as tangent grazes.
EDGE_EPSILON = 1e-4


def _nearest_edge_hit(edges: Iterable[LineSegment], ray: LineSegment) -> Optional[Point]:
    """Nearest ray/edge crossing, skipping crossings at edge endpoints."""
    nearest: Optional[Point] = None
    nearest_distance = math.inf

    for edge in edges:
        hit = intersect(ray, edge)
        if hit is None:
            continue
        if hit.distance_to(edge.start) < EDGE_EPSILON or hit.distance_to(edge.end) < EDGE_EPSILON:
            continue
        distance = ray.start.distance_to(hit)
        if distance < nearest_distance:
            nearest = hit
            nearest_distance = distance

    return nearest


@dataclass(frozen=True)
class Polygon:
    """
    Closed polygon given by its corners in order.

    The last corner connects back to the first. Fewer than 2 corners is a
    degenerate polygon: it has no edges, no visible corners and never blocks
    a ray.

    Attributes:
        corners: Corner points, accepted as Points, (x, y) pairs or an
                 (N, 2) numpy array
    """

    corners: tuple[Point, ...]

    def __post_init__(self) -> None:
        corners: Any = self.corners
        if isinstance(corners, np.ndarray):
            if corners.size == 0:
                corners = []
            elif corners.ndim != 2 or corners.shape[1] != 2:
                raise ValidationError(f"Polygon corners must have shape (N, 2), got {corners.shape}")
        # Use object.__setattr__ because the dataclass is frozen
        object.__setattr__(self, "corners", tuple(Point.of(c) for c in corners))

    @property
    def num_corners(self) -> int:
        return len(self.corners)

    @property
    def corners_array(self) -> NDArray[np.float64]:
        """Return corners as a numpy array of shape (N, 2)."""
        if not self.corners:
            return np.empty((0, 2), dtype=np.float64)
        return np.array([[c.x, c.y] for c in self.corners], dtype=np.float64)

    def edges(self) -> list[LineSegment]:
        """Edges in corner order, including the closing edge."""
        n = len(self.corners)
        if n < 2:
            return []
        return [LineSegment(self.corners[i], self.corners[(i + 1) % n]) for i in range(n)]

    def bounding_rect(self) -> Optional[Rect]:
        if not self.corners:
            return None
        array = self.corners_array
        min_x, min_y = array.min(axis=0)
        max_x, max_y = array.max(axis=0)
        return Rect(float(min_x), float(min_y), float(max_x - min_x), float(max_y - min_y))

    def contains(self, p: Point) -> bool:
        """
        Even-odd containment test.

        A horizontal ray is cast from p towards +x and crossings are counted.
        Points exactly on an edge or a corner get whatever answer the scan
        produces. For an axis-aligned rectangle that means the min-x and
        min-y sides (and the corner where they meet) count as inside, while
        the max-x and max-y sides and the other three corners count as
        outside.
        """
        n = len(self.corners)
        inside = False
        j = n - 1
        for i in range(n):
            ci = self.corners[i]
            cj = self.corners[j]
            if (ci.y > p.y) != (cj.y > p.y):
                crossing_x = (cj.x - ci.x) * (p.y - ci.y) / (cj.y - ci.y) + ci.x
                if p.x < crossing_x:
                    inside = not inside
            j = i
        return inside

    def corners_visible_from(self, viewpoint: Point) -> list[Point]:
        """
        Corners whose sight line from viewpoint is not blocked by the polygon.

        A corner is kept when the segment from viewpoint to it crosses no
        edge other than the two edges meeting at that corner. A viewpoint
        inside the polygon sees nothing of it.
        """
        n = len(self.corners)
        if n < 2 or self.contains(viewpoint):
            return []

        edges = self.edges()
        visible = []
        for i, corner in enumerate(self.corners):
            sight_line = LineSegment(viewpoint, corner)
            # Edge i leaves the corner, edge i - 1 arrives at it
            adjacent = {i, (i - 1) % n}
            blocked = any(
                intersect(sight_line, edge) is not None
                for k, edge in enumerate(edges)
                if k not in adjacent
            )
            if not blocked:
                visible.append(corner)
        return visible

    def intersect(self, ray: LineSegment) -> Optional[Point]:
        """Nearest edge crossing along ray, ignoring crossings at corners."""
        return _nearest_edge_hit(self.edges(), ray)

    def translated(self, dx: float, dy: float) -> Polygon:
        return Polygon(tuple(c.translated(dx, dy) for c in self.corners))


@dataclass(frozen=True)
class Circle:
    """
    Disc obstacle.

    Attributes:
        center: Center point
        radius: Positive radius

    Raises:
        ValidationError: If radius is not a positive finite number
    """

    center: Point
    radius: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", Point.of(self.center))
        try:
            radius = float(self.radius)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Circle radius must be a number, got {self.radius!r}") from e
        if not math.isfinite(radius) or radius <= 0:
            raise ValidationError(f"Circle radius must be positive, got {self.radius}")
        object.__setattr__(self, "radius", radius)

    def bounding_rect(self) -> Rect:
        return Rect(self.center.x - self.radius, self.center.y - self.radius, 2 * self.radius, 2 * self.radius)

    def contains(self, p: Point) -> bool:
        """Points on the circle count as inside."""
        return self.center.distance_to(p) <= self.radius

    def corners_visible_from(self, viewpoint: Point) -> list[Point]:
        """
        The two tangent points of the circle as seen from viewpoint.

        The tangent points sit at +/- acos(radius / distance) around the
        direction from the center towards the viewpoint. A viewpoint inside
        or on the circle has no tangents.
        """
        distance = self.center.distance_to(viewpoint)
        if distance <= self.radius:
            return []

        toward_viewer = math.atan2(viewpoint.y - self.center.y, viewpoint.x - self.center.x)
        offset = math.acos(self.radius / distance)
        return [
            Point(
                self.center.x + self.radius * math.cos(toward_viewer + sign * offset),
                self.center.y + self.radius * math.sin(toward_viewer + sign * offset),
            )
            for sign in (-1.0, 1.0)
        ]

    def intersect(self, ray: LineSegment) -> Optional[Point]:
        """
        Nearest crossing of the circle along ray.

        Solves |start + t * d - center|^2 = r^2 for t in [0, 1]. A ray
        starting inside the circle reports its exit point. Tangent rays
        (chord shorter than EDGE_EPSILON) do not count as crossings.
        """
        d = ray.direction
        f = ray.start - self.center

        a = d.dot(d)
        if a == 0.0:
            return None
        b = 2.0 * f.dot(d)
        c = f.dot(f) - self.radius * self.radius

        discriminant = b * b - 4.0 * a * c
        if discriminant < 0:
            return None

        sqrt_disc = math.sqrt(discriminant)
        # Chord length in world units is (t2 - t1) * |d|
        if sqrt_disc / math.sqrt(a) < EDGE_EPSILON:
            return None

        for t in ((-b - sqrt_disc) / (2.0 * a), (-b + sqrt_disc) / (2.0 * a)):
            if 0.0 <= t <= 1.0:
                return Point(ray.start.x + t * d.x, ray.start.y + t * d.y)
        return None

    def translated(self, dx: float, dy: float) -> Circle:
        return Circle(self.center.translated(dx, dy), self.radius)


@dataclass(frozen=True)
class Box:
    """
    Axis-aligned rectangular obstacle.

    Attributes:
        x: Minimum x coordinate
        y: Minimum y coordinate
        w: Non-negative width
        h: Non-negative height

    Raises:
        ValidationError: If a field is not finite or w/h is negative
    """

    x: float
    y: float
    w: float
    h: float

    def __post_init__(self) -> None:
        for name in ("x", "y", "w", "h"):
            try:
                value = float(getattr(self, name))
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Box {name} must be a number, got {getattr(self, name)!r}") from e
            if not math.isfinite(value):
                raise ValidationError(f"Box {name} must be finite, got {value}")
            object.__setattr__(self, name, value)
        if self.w < 0 or self.h < 0:
            raise ValidationError(f"Box size must be non-negative, got w={self.w}, h={self.h}")

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.w, self.h)

    @property
    def corners(self) -> tuple[Point, Point, Point, Point]:
        """Corners in order: (x, y), (x + w, y), (x + w, y + h), (x, y + h)."""
        return (
            Point(self.x, self.y),
            Point(self.x + self.w, self.y),
            Point(self.x + self.w, self.y + self.h),
            Point(self.x, self.y + self.h),
        )

    def bounding_rect(self) -> Rect:
        return self.rect

    def as_polygon(self) -> Polygon:
        return Polygon(self.corners)

    def contains(self, p: Point) -> bool:
        """Points on the border count as inside."""
        return self.rect.contains(p)

    def corners_visible_from(self, viewpoint: Point) -> list[Point]:
        """
        Silhouette corners of the box as seen from viewpoint.

        The viewpoint is classified against the four half-planes extending
        the box sides. Straight across from a side, the two corners of that
        side are returned; from a diagonal region, the two corners forming
        the tangent lines. A viewpoint inside or on the box sees none.
        """
        left = viewpoint.x < self.x
        right = viewpoint.x > self.x + self.w
        low = viewpoint.y < self.y
        high = viewpoint.y > self.y + self.h

        min_min, max_min, max_max, min_max = self.corners
        if left:
            if low:
                silhouette = [max_min, min_max]
            elif high:
                silhouette = [min_min, max_max]
            else:
                silhouette = [min_min, min_max]
        elif right:
            if low:
                silhouette = [min_min, max_max]
            elif high:
                silhouette = [max_min, min_max]
            else:
                silhouette = [max_min, max_max]
        elif low:
            silhouette = [min_min, max_min]
        elif high:
            silhouette = [min_max, max_max]
        else:
            return []

        # Zero-width or zero-height boxes collapse corners
        if silhouette[0] == silhouette[1]:
            return silhouette[:1]
        return silhouette

    def intersect(self, ray: LineSegment) -> Optional[Point]:
        """
        Nearest side crossing along ray.

        The ray's line is clipped against the x and y slabs of the box. It
        counts as crossing when the clipped chord is at least EDGE_EPSILON
        long and its midpoint lies strictly inside the box, so a ray that
        only touches a corner or slides along a side passes, while a ray
        running corner to corner through the interior is stopped. A ray
        starting inside the box reports its exit point.

        Zero-width or zero-height boxes are walls and use the polygon edge
        rule instead.
        """
        if self.w == 0 and self.h == 0:
            return None
        if self.w == 0 or self.h == 0:
            return _nearest_edge_hit(self.as_polygon().edges(), ray)

        d = ray.direction
        if d.x == 0.0 and d.y == 0.0:
            return None

        t_enter = -math.inf
        t_exit = math.inf
        for start, delta, low, high in (
            (ray.start.x, d.x, self.x, self.x + self.w),
            (ray.start.y, d.y, self.y, self.y + self.h),
        ):
            if delta == 0.0:
                if not low <= start <= high:
                    return None
                continue
            t1 = (low - start) / delta
            t2 = (high - start) / delta
            t_enter = max(t_enter, min(t1, t2))
            t_exit = min(t_exit, max(t1, t2))

        if t_enter > t_exit or (t_exit - t_enter) * d.length() < EDGE_EPSILON:
            return None

        t_mid = (t_enter + t_exit) / 2.0
        mid_x = ray.start.x + t_mid * d.x
        mid_y = ray.start.y + t_mid * d.y
        if not (self.x < mid_x < self.x + self.w and self.y < mid_y < self.y + self.h):
            return None

        # From inside the box the first boundary crossing is the exit
        t = t_enter if t_enter >= 0.0 else t_exit
        if not 0.0 <= t <= 1.0:
            return None
        return Point(ray.start.x + t * d.x, ray.start.y + t * d.y)

    def translated(self, dx: float, dy: float) -> Box:
        return Box(self.x + dx, self.y + dy, self.w, self.h)


Shape = Union[Polygon, Circle, Box]
SHAPE_TYPES = (Polygon, Circle, Box)


def ensure_shape(value: Any) -> Shape:
    """
    Check that value is one of the supported shape variants.

    Raises:
        ValidationError: If value is not a Polygon, Circle or Box
    """
    if not isinstance(value, SHAPE_TYPES):
        raise ValidationError(
            f"Obstacles must be Polygon, Circle or Box, got {type(value).__name__}"
        )
    return value


def nearest_intersection(shapes: Iterable[Shape], ray: LineSegment) -> Optional[Point]:
    """Nearest hit of ray against any of the shapes, measured from ray.start."""
    nearest: Optional[Point] = None
    nearest_distance = math.inf

    for shape in shapes:
        hit = shape.intersect(ray)
        if hit is None:
            continue
        distance = ray.start.distance_to(hit)
        if distance < nearest_distance:
            nearest = hit
            nearest_distance = distance

    return nearest

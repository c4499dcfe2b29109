"""
Angular sweep that turns obstacle corners into a visibility boundary.

The sweep runs in five stages, each a separate function so it can be
tested on its own:

1. collect_critical_corners: visible obstacle corners inside the view cone
2. order_entries: sort them around the observer by pseudo-angle
3. insert_fov_boundaries: add both cone edges and rotate the order so it
   starts at the first cone edge
4. resolve_entries: cast a full-length ray through every entry
5. build_path: walk consecutive entries and emit lines and arcs

compute_visibility chains them together.
"""

from __future__ import annotations

import logging
import math
from bisect import bisect_right
from dataclasses import dataclass, field, replace
from typing import List, Literal, Optional, Sequence, Tuple

from view_cone.boundary import Arc, CastRay, ClosePath, LineTo, MoveTo, PathCommand, VisibilityBoundary
from view_cone.geometry import LineSegment, Point, angle_to, normalize_angle, pseudo_angle, unit_vector
from view_cone.shapes import Shape, nearest_intersection

logger = logging.getLogger(__name__)

# Consecutive path points closer than this are merged
POINT_MERGE_TOLERANCE = 1e-9

EntryKind = Literal['corner', 'fov_start', 'fov_end']


@dataclass(order=True)
class SweepEntry:
    """
    A direction the sweep has to look at.

    Attributes:
        sort_key: Pseudo-angle of the ray from the observer to corner
        distance: Distance from the observer to corner
        corner: Obstacle corner, or the far end of a cone edge ray
        angle: Angle of the entry in radians, unwrapped so that it lies
               within [facing - fov/2, facing + fov/2]
        kind: 'corner' for obstacle corners, 'fov_start'/'fov_end' for the
              cone edges
        hit: Nearest obstacle intersection along the full-length ray,
             filled in by resolve_entries
        hit_distance: Distance from the observer to hit (inf without a hit)

    Ordering: entries sort by (sort_key, distance), so corners on the same
    ray are visited nearest first.
    """
    sort_key: float
    distance: float
    corner: Point = field(compare=False)
    angle: float = field(compare=False)
    kind: EntryKind = field(default='corner', compare=False)
    hit: Optional[Point] = field(default=None, compare=False)
    hit_distance: float = field(default=math.inf, compare=False)

    @property
    def boundary_point(self) -> Point:
        """The corner, or the hit if the hit is strictly nearer to the observer."""
        if self.hit is not None and self.hit_distance < self.distance:
            return self.hit
        return self.corner


def collect_critical_corners(
    origin: Point,
    facing: float,
    field_of_view: float,
    max_distance: float,
    shapes: Sequence[Shape]
) -> List[SweepEntry]:
    """
    Gather obstacle corners that can bend the visibility boundary.

    Parameters:
        origin: Observer position
        facing: Facing angle in radians
        field_of_view: Full cone angle in radians
        max_distance: Sight distance
        shapes: Obstacles

    Returns:
        Unordered entries for corners with 0 < distance <= max_distance
        whose angle from the facing direction lies strictly inside
        (-fov/2, fov/2)
    """
    half_fov = field_of_view / 2.0
    entries: List[SweepEntry] = []

    for shape in shapes:
        for corner in shape.corners_visible_from(origin):
            distance = origin.distance_to(corner)
            if distance == 0.0 or distance > max_distance:
                continue

            offset = normalize_angle(angle_to(origin, corner) - facing)
            if not -half_fov < offset < half_fov:
                continue

            entries.append(SweepEntry(
                sort_key=pseudo_angle(LineSegment(origin, corner)),
                distance=distance,
                corner=corner,
                angle=facing + offset,
            ))

    return entries


def order_entries(entries: Sequence[SweepEntry]) -> List[SweepEntry]:
    """Sort entries around the observer by pseudo-angle, nearest first on ties."""
    return sorted(entries)


def insert_fov_boundaries(
    ordered: Sequence[SweepEntry],
    origin: Point,
    facing: float,
    field_of_view: float,
    max_distance: float
) -> List[SweepEntry]:
    """
    Bracket the sorted corners with the two cone edges.

    Pseudo-angle order starts at -pi, not at the cone's first edge. Entries
    whose key is at or below the start edge's key come after the ±pi
    wraparound within the cone, so they are rotated to the end.

    Returns:
        [fov_start, corners in sweep order..., fov_end]
    """
    half_fov = field_of_view / 2.0
    start_angle = facing - half_fov
    end_angle = facing + half_fov

    start_ray = LineSegment.ray(origin, start_angle, max_distance)
    end_ray = LineSegment.ray(origin, end_angle, max_distance)
    start = SweepEntry(pseudo_angle(start_ray), max_distance, start_ray.end, start_angle, 'fov_start')
    end = SweepEntry(pseudo_angle(end_ray), max_distance, end_ray.end, end_angle, 'fov_end')

    offset = bisect_right([entry.sort_key for entry in ordered], start.sort_key)
    rotated = list(ordered[offset:]) + list(ordered[:offset])

    return [start] + rotated + [end]


def _entry_ray(entry: SweepEntry, origin: Point, max_distance: float) -> LineSegment:
    """Full-length ray through an entry."""
    if entry.kind != 'corner':
        return LineSegment(origin, entry.corner)
    direction = unit_vector(origin, entry.corner)
    if direction is None:
        # Corners at the origin are dropped during collection
        raise ValueError(f"corner {entry.corner} coincides with the observer")
    return LineSegment(origin, origin + direction * max_distance)


def resolve_entries(
    entries: Sequence[SweepEntry],
    origin: Point,
    max_distance: float,
    shapes: Sequence[Shape]
) -> Tuple[List[SweepEntry], List[CastRay]]:
    """
    Cast a full-length ray through every entry and record the nearest hit.

    Returns:
        Tuple of (entries with hit filled in, cast rays in the same order)
    """
    resolved: List[SweepEntry] = []
    rays: List[CastRay] = []

    for entry in entries:
        ray = _entry_ray(entry, origin, max_distance)
        hit = nearest_intersection(shapes, ray)
        hit_distance = origin.distance_to(hit) if hit is not None else math.inf
        resolved.append(replace(entry, hit=hit, hit_distance=hit_distance))
        rays.append(CastRay(ray=ray, hit=hit))

    return resolved, rays


def _is_open_between(
    current: SweepEntry,
    following: SweepEntry,
    origin: Point,
    max_distance: float,
    shapes: Sequence[Shape]
) -> bool:
    """True when nothing stops sight between two entries out to max distance."""
    if current.hit is not None:
        return False
    mid_ray = LineSegment.ray(origin, (current.angle + following.angle) / 2.0, max_distance)
    return nearest_intersection(shapes, mid_ray) is None


def build_path(
    entries: Sequence[SweepEntry],
    origin: Point,
    max_distance: float,
    shapes: Sequence[Shape]
) -> Tuple[PathCommand, ...]:
    """
    Walk resolved entries pairwise and emit the boundary path.

    For each consecutive pair the current entry's boundary point is emitted.
    When the current entry has no hit and the ray halfway between the pair
    hits nothing either, the gap is open sky and is closed with an arc at
    max distance. Otherwise a straight edge runs to the next entry's
    boundary point.

    Parameters:
        entries: Output of resolve_entries, in sweep order
        origin: Observer position
        max_distance: Sight distance (arc radius)
        shapes: Obstacles, for the halfway ray test

    Returns:
        Path commands from MoveTo(origin) to ClosePath()
    """
    commands: List[PathCommand] = [MoveTo(origin)]
    cursor = origin

    def line_to(point: Point) -> None:
        nonlocal cursor
        if math.isclose(point.x, cursor.x, abs_tol=POINT_MERGE_TOLERANCE) and \
                math.isclose(point.y, cursor.y, abs_tol=POINT_MERGE_TOLERANCE):
            return
        commands.append(LineTo(point))
        cursor = point

    for current, following in zip(entries, entries[1:]):
        line_to(current.boundary_point)

        if following.angle > current.angle and _is_open_between(current, following, origin, max_distance, shapes):
            arc = Arc(origin, max_distance, current.angle, following.angle)
            commands.append(arc)
            cursor = arc.end_point
        else:
            line_to(following.boundary_point)

    if entries:
        line_to(entries[-1].boundary_point)
    commands.append(ClosePath())

    return tuple(commands)


def compute_visibility(
    origin: Point,
    facing: float,
    field_of_view: float,
    max_distance: float,
    shapes: Sequence[Shape]
) -> VisibilityBoundary:
    """
    Compute the region visible from origin inside the view cone.

    Parameters:
        origin: Observer position
        facing: Facing angle in radians
        field_of_view: Full cone angle in radians, in (0, 2*pi]
        max_distance: Sight distance, > 0
        shapes: Obstacles; treated as an unordered set

    Returns:
        VisibilityBoundary with the path and the rays cast to build it
    """
    corners = collect_critical_corners(origin, facing, field_of_view, max_distance, shapes)
    ordered = insert_fov_boundaries(order_entries(corners), origin, facing, field_of_view, max_distance)
    resolved, rays = resolve_entries(ordered, origin, max_distance, shapes)
    commands = build_path(resolved, origin, max_distance, shapes)

    logger.debug(
        "Visibility from (%.2f, %.2f): %d shapes, %d critical corners, %d rays, %d commands",
        origin.x, origin.y, len(shapes), len(corners), len(rays), len(commands),
    )

    return VisibilityBoundary(origin=origin, commands=commands, rays=tuple(rays))

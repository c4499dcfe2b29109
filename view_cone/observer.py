"""
Observer pose and the cached visibility boundary computed from it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from view_cone.boundary import CastRay, PathCommand, VisibilityBoundary
from view_cone.geometry import Point, ValidationError
from view_cone.shapes import Shape, ensure_shape
from view_cone.sweep import compute_visibility

logger = logging.getLogger(__name__)

DEFAULT_FIELD_OF_VIEW = math.pi / 2
DEFAULT_MAX_DISTANCE = 200.0


@dataclass(frozen=True)
class ObserverPose:
    """
    Immutable observer configuration.

    Attributes:
        position: Observer position; accepts a Point, an (x, y) pair or a
                  (2,) array
        facing: Facing angle in radians (any finite value)
        field_of_view: Full cone angle in radians, in (0, 2*pi]
        max_distance: Sight distance, positive and finite

    Raises:
        ValidationError: If any field is out of range
    """

    position: Point
    facing: float = 0.0
    field_of_view: float = DEFAULT_FIELD_OF_VIEW
    max_distance: float = DEFAULT_MAX_DISTANCE

    def __post_init__(self) -> None:
        """Validate and normalize pose fields."""
        # Use object.__setattr__ because the dataclass is frozen
        object.__setattr__(self, "position", Point.of(self.position))

        facing = float(self.facing)
        if not math.isfinite(facing):
            raise ValidationError(f"facing must be finite, got {self.facing}")
        object.__setattr__(self, "facing", facing)

        field_of_view = float(self.field_of_view)
        if not (0.0 < field_of_view <= 2.0 * math.pi):
            raise ValidationError(f"field_of_view must be in (0, 2*pi], got {self.field_of_view}")
        object.__setattr__(self, "field_of_view", field_of_view)

        max_distance = float(self.max_distance)
        if not math.isfinite(max_distance) or max_distance <= 0.0:
            raise ValidationError(f"max_distance must be positive, got {self.max_distance}")
        object.__setattr__(self, "max_distance", max_distance)

    @property
    def start_angle(self) -> float:
        """Angle of the first cone edge (facing - fov/2)."""
        return self.facing - self.field_of_view / 2.0

    @property
    def end_angle(self) -> float:
        """Angle of the second cone edge (facing + fov/2)."""
        return self.facing + self.field_of_view / 2.0


class CacheState(Enum):
    """Whether the cached boundary matches the current pose and obstacles."""

    STALE = "stale"
    FRESH = "fresh"


class Observer:
    """
    A viewpoint with a field-of-view cone and a lazily computed boundary.

    The boundary cache has two states. It becomes FRESH only inside
    ``cast_rays`` and goes STALE on every pose mutation and on
    ``invalidate()``, which is the hook scene-editing code calls when the
    obstacle set changes. ``visibility_boundary`` additionally compares the
    obstacles it is given with the snapshot the cache was computed from, so
    passing a different obstacle set never returns an outdated boundary.

    Not thread-safe: mutate, then read, from one owner.

    Example:
        >>> from view_cone import Box, Observer
        >>> observer = Observer((0.0, 0.0), facing=0.0, max_distance=100.0)
        >>> boundary = observer.visibility_boundary([Box(50, -5, 10, 10)])
        >>> observer.visibility_boundary([Box(50, -5, 10, 10)]) is boundary
        True
    """

    def __init__(
        self,
        position: Any,
        facing: float = 0.0,
        field_of_view: float = DEFAULT_FIELD_OF_VIEW,
        max_distance: float = DEFAULT_MAX_DISTANCE,
    ) -> None:
        self._pose = ObserverPose(position, facing, field_of_view, max_distance)
        self._state = CacheState.STALE
        self._boundary: Optional[VisibilityBoundary] = None
        self._snapshot: Optional[tuple[Shape, ...]] = None

    def __repr__(self) -> str:
        pose = self._pose
        return (
            f"Observer(position=({pose.position.x}, {pose.position.y}), facing={pose.facing}, "
            f"field_of_view={pose.field_of_view}, max_distance={pose.max_distance}, "
            f"state={self._state.value})"
        )

    # ------------------------------------------------------------------
    # Pose
    # ------------------------------------------------------------------

    @property
    def pose(self) -> ObserverPose:
        return self._pose

    @property
    def position(self) -> Point:
        return self._pose.position

    @position.setter
    def position(self, value: Any) -> None:
        self.set_pose(value, self._pose.facing)

    @property
    def facing(self) -> float:
        return self._pose.facing

    @facing.setter
    def facing(self, value: float) -> None:
        self.set_pose(self._pose.position, value)

    @property
    def field_of_view(self) -> float:
        return self._pose.field_of_view

    @field_of_view.setter
    def field_of_view(self, value: float) -> None:
        self.set_pose(self._pose.position, self._pose.facing, field_of_view=value)

    @property
    def max_distance(self) -> float:
        return self._pose.max_distance

    @max_distance.setter
    def max_distance(self, value: float) -> None:
        self.set_pose(self._pose.position, self._pose.facing, max_distance=value)

    def set_pose(
        self,
        position: Any,
        facing: float,
        field_of_view: Optional[float] = None,
        max_distance: Optional[float] = None,
    ) -> None:
        """
        Replace the pose and invalidate the cached boundary.

        Parameters:
            position: New observer position
            facing: New facing angle in radians
            field_of_view: New cone angle, or None to keep the current one
            max_distance: New sight distance, or None to keep the current one

        Raises:
            ValidationError: If the new pose is invalid; the old pose and
                             cache are left untouched
        """
        self._pose = ObserverPose(
            position,
            facing,
            self._pose.field_of_view if field_of_view is None else field_of_view,
            self._pose.max_distance if max_distance is None else max_distance,
        )
        self.invalidate()

    def look_at(self, target: Any) -> None:
        """Turn to face target without moving. A target at the observer position is ignored."""
        target = Point.of(target)
        position = self._pose.position
        if target == position:
            return
        self.set_pose(position, math.atan2(target.y - position.y, target.x - position.x))

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def is_stale(self) -> bool:
        return self._state is CacheState.STALE

    def invalidate(self) -> None:
        """Mark the cached boundary stale; the next read recomputes it."""
        if self._state is CacheState.FRESH:
            logger.debug("Observer at (%.2f, %.2f) invalidated", self.position.x, self.position.y)
        self._state = CacheState.STALE
        self._boundary = None
        self._snapshot = None

    @property
    def rays(self) -> Optional[tuple[CastRay, ...]]:
        """Rays of the cached boundary, or None while stale."""
        if self._boundary is None:
            return None
        return self._boundary.rays

    @property
    def path(self) -> Optional[tuple[PathCommand, ...]]:
        """Path of the cached boundary, or None while stale."""
        if self._boundary is None:
            return None
        return self._boundary.commands

    # ------------------------------------------------------------------
    # Visibility
    # ------------------------------------------------------------------

    def cast_rays(self, obstacles: Iterable[Any]) -> VisibilityBoundary:
        """
        Recompute the boundary for the current pose and obstacles.

        Parameters:
            obstacles: Polygon, Circle and Box instances (an ObstacleSet or
                       any iterable of shapes)

        Returns:
            The new boundary, which is also cached

        Raises:
            ValidationError: If an obstacle is not a supported shape
        """
        snapshot = tuple(ensure_shape(shape) for shape in obstacles)
        pose = self._pose
        boundary = compute_visibility(
            pose.position,
            pose.facing,
            pose.field_of_view,
            pose.max_distance,
            snapshot,
        )
        self._boundary = boundary
        self._snapshot = snapshot
        self._state = CacheState.FRESH
        return boundary

    def visibility_boundary(self, obstacles: Iterable[Any]) -> VisibilityBoundary:
        """
        Return the boundary for the current pose, recomputing only if needed.

        Calling this twice with equal obstacles and no mutation in between
        returns the same object.
        """
        snapshot = tuple(obstacles)
        if self._state is CacheState.FRESH and self._boundary is not None and snapshot == self._snapshot:
            logger.debug("Observer at (%.2f, %.2f) served cached boundary", self.position.x, self.position.y)
            return self._boundary
        return self.cast_rays(snapshot)

    def obstacles_containing(self, obstacles: Iterable[Any]) -> list[Shape]:
        """Obstacles whose interior holds the observer position."""
        return [shape for shape in map(ensure_shape, obstacles) if shape.contains(self._pose.position)]

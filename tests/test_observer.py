"""
Tests for ObserverPose validation and the Observer boundary cache.
"""

import math

import numpy as np
import pytest

from view_cone import (
    DEFAULT_FIELD_OF_VIEW,
    DEFAULT_MAX_DISTANCE,
    Box,
    CacheState,
    Circle,
    Observer,
    ObserverPose,
    ObstacleSet,
    Point,
    Polygon,
    ValidationError,
)
from view_cone.boundary import Arc, ClosePath, MoveTo


@pytest.fixture
def observer() -> Observer:
    return Observer((0.0, 0.0), facing=0.0, max_distance=100.0)


@pytest.fixture
def obstacles() -> list:
    return [Box(50, -5, 10, 10)]


# =============================================================================
# ObserverPose
# =============================================================================

class TestObserverPose:
    """Tests for ObserverPose validation."""

    def test_defaults(self):
        """A pose needs only a position."""
        pose = ObserverPose(Point(1, 2))
        assert pose.facing == 0.0
        assert pose.field_of_view == DEFAULT_FIELD_OF_VIEW == math.pi / 2
        assert pose.max_distance == DEFAULT_MAX_DISTANCE

    def test_position_coercion(self):
        """Positions can be tuples or arrays."""
        assert ObserverPose((3, 4)).position == Point(3, 4)
        assert ObserverPose(np.array([3.0, 4.0])).position == Point(3, 4)

    def test_cone_edges(self):
        """start_angle and end_angle bracket the facing direction."""
        pose = ObserverPose(Point(0, 0), facing=1.0, field_of_view=0.5)
        assert pose.start_angle == pytest.approx(0.75)
        assert pose.end_angle == pytest.approx(1.25)

    def test_full_circle_is_allowed(self):
        """A field of view of exactly 2*pi is valid."""
        assert ObserverPose(Point(0, 0), field_of_view=2 * math.pi).field_of_view == 2 * math.pi

    @pytest.mark.parametrize("kwargs", [
        {"field_of_view": 0.0},
        {"field_of_view": -1.0},
        {"field_of_view": 2 * math.pi + 0.01},
        {"field_of_view": float('nan')},
        {"max_distance": 0.0},
        {"max_distance": -5.0},
        {"max_distance": float('inf')},
        {"facing": float('nan')},
        {"facing": float('inf')},
    ])
    def test_invalid_values(self, kwargs):
        """Out-of-range pose fields raise ValidationError."""
        with pytest.raises(ValidationError):
            ObserverPose(Point(0, 0), **kwargs)

    def test_invalid_position(self):
        """Non-finite or malformed positions raise ValidationError."""
        with pytest.raises(ValidationError):
            ObserverPose((float('nan'), 0.0))
        with pytest.raises(ValidationError):
            ObserverPose((1.0, 2.0, 3.0))

    def test_any_finite_facing_is_kept(self):
        """Facing is stored as given, not wrapped."""
        assert ObserverPose(Point(0, 0), facing=7.0).facing == 7.0


# =============================================================================
# Observer
# =============================================================================

class TestObserverState:
    """Tests for Observer construction and pose mutation."""

    def test_starts_stale(self, observer):
        """A new observer has no boundary."""
        assert observer.state is CacheState.STALE
        assert observer.is_stale
        assert observer.rays is None
        assert observer.path is None

    def test_pose_accessors(self):
        """Accessors read the current pose."""
        obs = Observer((1, 2), facing=0.5, field_of_view=1.0, max_distance=30.0)
        assert obs.position == Point(1, 2)
        assert obs.facing == 0.5
        assert obs.field_of_view == 1.0
        assert obs.max_distance == 30.0
        assert obs.pose == ObserverPose(Point(1, 2), 0.5, 1.0, 30.0)
        assert "stale" in repr(obs)

    def test_invalid_construction(self):
        """Invalid constructor arguments raise ValidationError."""
        with pytest.raises(ValidationError):
            Observer((0, 0), field_of_view=0.0)

    @pytest.mark.parametrize("attribute, value", [
        ("position", (10.0, 0.0)),
        ("facing", 1.0),
        ("field_of_view", 1.0),
        ("max_distance", 50.0),
    ])
    def test_setters_invalidate(self, observer, obstacles, attribute, value):
        """Every pose setter marks the cache stale."""
        observer.visibility_boundary(obstacles)
        assert observer.state is CacheState.FRESH

        setattr(observer, attribute, value)
        assert observer.is_stale
        assert observer.path is None

    def test_setting_same_value_still_invalidates(self, observer, obstacles):
        """Mutation invalidates even when the value does not change."""
        observer.visibility_boundary(obstacles)
        observer.facing = observer.facing
        assert observer.is_stale

    def test_set_pose_keeps_unspecified_fields(self, observer):
        """set_pose leaves field_of_view and max_distance alone unless given."""
        observer.set_pose((5, 5), 2.0)
        assert observer.position == Point(5, 5)
        assert observer.facing == 2.0
        assert observer.field_of_view == DEFAULT_FIELD_OF_VIEW
        assert observer.max_distance == 100.0

    def test_invalid_mutation_keeps_state(self, observer, obstacles):
        """A rejected mutation leaves pose and cache untouched."""
        boundary = observer.visibility_boundary(obstacles)
        with pytest.raises(ValidationError):
            observer.max_distance = -1.0
        assert observer.max_distance == 100.0
        assert observer.state is CacheState.FRESH
        assert observer.visibility_boundary(obstacles) is boundary

    def test_look_at(self, observer):
        """look_at turns toward the target without moving."""
        observer.look_at((0, 10))
        assert observer.facing == pytest.approx(math.pi / 2)
        assert observer.position == Point(0, 0)

    def test_look_at_own_position_is_ignored(self, observer, obstacles):
        """Looking at the observer's own position changes nothing."""
        observer.visibility_boundary(obstacles)
        observer.look_at((0, 0))
        assert observer.facing == 0.0
        assert observer.state is CacheState.FRESH


class TestObserverCache:
    """Tests for cast_rays() and visibility_boundary()."""

    def test_cast_rays_marks_fresh(self, observer, obstacles):
        """cast_rays caches its result."""
        boundary = observer.cast_rays(obstacles)
        assert observer.state is CacheState.FRESH
        assert observer.path == boundary.commands
        assert observer.rays == boundary.rays

    def test_visibility_boundary_is_idempotent(self, observer, obstacles):
        """Reading twice without mutation returns the same object."""
        first = observer.visibility_boundary(obstacles)
        second = observer.visibility_boundary(obstacles)
        assert first is second

    def test_equal_obstacles_reuse_cache(self, observer):
        """Obstacles are compared by value."""
        first = observer.visibility_boundary([Box(50, -5, 10, 10)])
        assert observer.visibility_boundary([Box(50, -5, 10, 10)]) is first

    def test_different_obstacles_recompute(self, observer, obstacles):
        """A different obstacle set never gets the stale boundary."""
        first = observer.visibility_boundary(obstacles)
        second = observer.visibility_boundary([])
        assert second is not first
        assert len(second.arcs) == 1

    def test_invalidate_forces_recompute(self, observer, obstacles):
        """invalidate() makes the next read recompute."""
        first = observer.visibility_boundary(obstacles)
        observer.invalidate()
        assert observer.is_stale
        second = observer.visibility_boundary(obstacles)
        assert second is not first
        assert second == first

    def test_cast_rays_always_recomputes(self, observer, obstacles):
        """cast_rays ignores the cache."""
        first = observer.cast_rays(obstacles)
        assert observer.cast_rays(obstacles) is not first

    def test_boundary_follows_pose(self, observer, obstacles):
        """Turning away from the box removes the notch."""
        blocked = observer.visibility_boundary(obstacles)
        assert len(blocked.arcs) == 2

        observer.facing = math.pi
        clear = observer.visibility_boundary(obstacles)
        assert [type(c) for c in clear.commands][:1] == [MoveTo]
        assert len(clear.arcs) == 1
        assert isinstance(clear.commands[-1], ClosePath)

    def test_boundary_starts_at_position(self, obstacles):
        """The path starts at the observer position."""
        obs = Observer((5, 3), max_distance=100.0)
        boundary = obs.visibility_boundary(obstacles)
        assert boundary.commands[0] == MoveTo(Point(5, 3))
        assert boundary.origin == Point(5, 3)

    def test_open_sky_arc_radius(self):
        """Open-sky arcs sit at max distance."""
        obs = Observer((0, 0), facing=1.0, field_of_view=0.8, max_distance=42.0)
        arc = obs.visibility_boundary([]).commands[2]
        assert isinstance(arc, Arc)
        assert arc.radius == 42.0
        assert arc.start_angle == pytest.approx(0.6)
        assert arc.end_angle == pytest.approx(1.4)

    def test_non_shape_obstacle_rejected(self, observer):
        """Unsupported obstacles raise ValidationError and leave the cache alone."""
        with pytest.raises(ValidationError):
            observer.visibility_boundary([Box(50, -5, 10, 10), "wall"])
        assert observer.is_stale


class TestObserverWithObstacleSet:
    """Tests for wiring an Observer to an ObstacleSet."""

    def test_obstacle_edits_invalidate(self, observer):
        """Subscribing invalidate() keeps the observer in step with edits."""
        scene = ObstacleSet([Box(50, -5, 10, 10)])
        scene.subscribe(observer.invalidate)

        before = observer.visibility_boundary(scene)
        scene.move(0, 0, 100)
        assert observer.is_stale

        after = observer.visibility_boundary(scene)
        assert after is not before
        assert len(after.arcs) == 1

    def test_unchanged_set_reuses_cache(self, observer):
        """Reading again from an unedited set hits the cache."""
        scene = ObstacleSet([Box(50, -5, 10, 10)])
        first = observer.visibility_boundary(scene)
        assert observer.visibility_boundary(scene) is first

    def test_edit_detected_without_subscription(self, observer):
        """Even without a subscription, changed contents force a recompute."""
        scene = ObstacleSet([Box(50, -5, 10, 10)])
        first = observer.visibility_boundary(scene)
        scene.clear()
        assert observer.visibility_boundary(scene) is not first


class TestObstaclesContaining:
    """Tests for Observer.obstacles_containing()."""

    def test_reports_enclosing_shapes(self):
        """Only shapes around the observer are returned."""
        obs = Observer((5, 5))
        box = Box(0, 0, 10, 10)
        circle = Circle(Point(5, 6), 2.0)
        far = Polygon([(20, 20), (30, 20), (25, 30)])
        assert obs.obstacles_containing([box, circle, far]) == [box, circle]

    def test_nothing_around(self, observer, obstacles):
        """An observer in the open is inside nothing."""
        assert observer.obstacles_containing(obstacles) == []

    def test_rejects_non_shapes(self, observer):
        """Unsupported obstacles raise ValidationError."""
        with pytest.raises(ValidationError):
            observer.obstacles_containing([42])

"""
View Cone Visibility
====================

Public API for computing the region an observer can see in a 2D plane
among opaque obstacles, bounded by a field-of-view cone and a maximum
sight distance.
"""

from view_cone.geometry import (
    LineSegment,
    Point,
    Rect,
    ValidationError,
    Vector,
    bounding_rect,
    intersect,
    normalize_angle,
    pseudo_angle,
    unit_vector,
)
from view_cone.shapes import Box, Circle, EDGE_EPSILON, Polygon, Shape
from view_cone.boundary import Arc, CastRay, ClosePath, LineTo, MoveTo, PathCommand, VisibilityBoundary
from view_cone.sweep import compute_visibility
from view_cone.observer import (
    DEFAULT_FIELD_OF_VIEW,
    DEFAULT_MAX_DISTANCE,
    CacheState,
    Observer,
    ObserverPose,
)
from view_cone.scene import ObstacleSet
from view_cone.debug import (
    disable_debug_logging,
    format_angle,
    format_point,
    format_polygon,
    log_boundary,
    setup_debug_logging,
)

__all__ = [
    # Geometry
    'Point',
    'Vector',
    'Rect',
    'LineSegment',
    'ValidationError',
    'intersect',
    'bounding_rect',
    'pseudo_angle',
    'unit_vector',
    'normalize_angle',
    # Shapes
    'Shape',
    'Polygon',
    'Circle',
    'Box',
    'EDGE_EPSILON',
    # Boundary
    'VisibilityBoundary',
    'CastRay',
    'PathCommand',
    'MoveTo',
    'LineTo',
    'Arc',
    'ClosePath',
    # Observer
    'Observer',
    'ObserverPose',
    'CacheState',
    'DEFAULT_FIELD_OF_VIEW',
    'DEFAULT_MAX_DISTANCE',
    'compute_visibility',
    # Scene
    'ObstacleSet',
    # Debug utilities
    'setup_debug_logging',
    'disable_debug_logging',
    'format_angle',
    'format_point',
    'format_polygon',
    'log_boundary',
]
__version__ = '0.1.0'

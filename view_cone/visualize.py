"""
Visualization utilities for debugging and validation.

Draws obstacles, the visibility region, the cast rays and the observer onto
BGR images with OpenCV. World coordinates are used as pixel coordinates.
"""

from typing import Iterable, Optional

import numpy as np
from numpy.typing import NDArray

from view_cone.boundary import DEFAULT_ARC_STEP, VisibilityBoundary
from view_cone.geometry import Point
from view_cone.observer import ObserverPose
from view_cone.shapes import Box, Circle, Polygon, Shape

# Try to import cv2, set flag if not available
try:
    import cv2

    HAS_CV2 = True
except ImportError:
    HAS_CV2 = False


def _ensure_cv2() -> None:
    """Raise an error if cv2 is not available."""
    if not HAS_CV2:
        raise ImportError(
            "OpenCV (cv2) is required for visualization functions. "
            "Install with: pip install opencv-python"
        )


def _pixel(point: Point) -> tuple[int, int]:
    return int(round(point.x)), int(round(point.y))


def draw_obstacles(
    image: NDArray[np.uint8],
    shapes: Iterable[Shape],
    color: tuple[int, int, int] = (55, 119, 51),
    fill_color: Optional[tuple[int, int, int]] = (204, 255, 204),
    thickness: int = 2,
) -> NDArray[np.uint8]:
    """
    Draw obstacle shapes.

    Parameters:
        image: Input image (H, W, 3) BGR format
        shapes: Obstacles to draw
        color: BGR outline color
        fill_color: BGR fill color, or None for outlines only
        thickness: Outline thickness

    Returns:
        Image with obstacles drawn (modified copy)
    """
    _ensure_cv2()

    output = image.copy()
    for shape in shapes:
        if isinstance(shape, Circle):
            center = _pixel(shape.center)
            radius = int(round(shape.radius))
            if fill_color is not None:
                cv2.circle(output, center, radius, fill_color, thickness=-1)
            cv2.circle(output, center, radius, color, thickness=thickness)
        elif isinstance(shape, Box):
            top_left = _pixel(Point(shape.x, shape.y))
            bottom_right = _pixel(Point(shape.x + shape.w, shape.y + shape.h))
            if fill_color is not None:
                cv2.rectangle(output, top_left, bottom_right, fill_color, thickness=-1)
            cv2.rectangle(output, top_left, bottom_right, color, thickness=thickness)
        elif isinstance(shape, Polygon):
            if shape.num_corners < 2:
                continue
            pts = np.round(shape.corners_array).astype(np.int32).reshape((-1, 1, 2))
            if fill_color is not None and shape.num_corners >= 3:
                cv2.fillPoly(output, [pts], fill_color)
            cv2.polylines(output, [pts], isClosed=True, color=color, thickness=thickness)

    return output


def draw_visibility_boundary(
    image: NDArray[np.uint8],
    boundary: VisibilityBoundary,
    fill_color: tuple[int, int, int] = (0, 255, 255),
    fill_alpha: float = 0.4,
    outline_color: Optional[tuple[int, int, int]] = (0, 160, 160),
    thickness: int = 1,
    arc_step: float = DEFAULT_ARC_STEP,
) -> NDArray[np.uint8]:
    """
    Fill the visible region.

    Parameters:
        image: Input image (H, W, 3) BGR format
        boundary: Boundary to draw
        fill_color: BGR fill color
        fill_alpha: Alpha transparency for the fill (0.0 = transparent, 1.0 = opaque)
        outline_color: BGR outline color, or None to skip the outline
        thickness: Outline thickness
        arc_step: Angular step in radians used to flatten arcs

    Returns:
        Image with the region blended in (modified copy)
    """
    _ensure_cv2()

    output = image.copy()
    polygon = boundary.to_polygon(arc_step)
    if polygon.shape[0] < 3:
        return output

    pts = np.round(polygon).astype(np.int32).reshape((-1, 1, 2))

    overlay = output.copy()
    cv2.fillPoly(overlay, [pts], fill_color)
    cv2.addWeighted(overlay, fill_alpha, output, 1 - fill_alpha, 0, output)

    if outline_color is not None:
        cv2.polylines(output, [pts], isClosed=True, color=outline_color, thickness=thickness)

    return output


def draw_rays(
    image: NDArray[np.uint8],
    boundary: VisibilityBoundary,
    color: tuple[int, int, int] = (200, 200, 200),
    hit_color: tuple[int, int, int] = (0, 0, 255),
    thickness: int = 1,
    hit_radius: int = 3,
) -> NDArray[np.uint8]:
    """
    Draw the rays cast for a boundary, stopping each at its hit.

    Returns:
        Image with rays drawn (modified copy)
    """
    _ensure_cv2()

    output = image.copy()
    for cast in boundary.rays:
        cv2.line(output, _pixel(cast.ray.start), _pixel(cast.end), color, thickness)
        if cast.hit is not None:
            cv2.circle(output, _pixel(cast.hit), hit_radius, hit_color, thickness=-1)

    return output


def draw_observer(
    image: NDArray[np.uint8],
    pose: ObserverPose,
    color: tuple[int, int, int] = (255, 0, 0),
    radius: int = 5,
    direction_length: float = 20.0,
) -> NDArray[np.uint8]:
    """
    Draw the observer as a dot with an arrow along its facing direction.

    Returns:
        Image with the observer drawn (modified copy)
    """
    _ensure_cv2()

    output = image.copy()
    center = _pixel(pose.position)
    tip = Point(
        pose.position.x + direction_length * np.cos(pose.facing),
        pose.position.y + direction_length * np.sin(pose.facing),
    )
    cv2.circle(output, center, radius, color, thickness=-1)
    cv2.arrowedLine(output, center, _pixel(tip), color, thickness=2)

    return output

"""
Observer Walkthrough - Complete Example

Demonstrates computing and caching the visible region of an observer in a
small room while the obstacles are edited.

Key features demonstrated:
1. Building an obstacle set from boxes, circles and polygons
2. Reading the visibility boundary and its path commands
3. Cache reuse and invalidation on pose changes and obstacle edits
4. Picking the obstacle under a point
5. Rendering the result with OpenCV (if installed)

Run with: python examples/observer_walkthrough.py
"""

import logging
import math
from pathlib import Path

import numpy as np

from view_cone import (
    Arc,
    Box,
    Circle,
    LineTo,
    Observer,
    ObstacleSet,
    Point,
    Polygon,
    format_angle,
    format_point,
    setup_debug_logging,
)
from view_cone.visualize import (
    HAS_CV2,
    draw_obstacles,
    draw_observer,
    draw_rays,
    draw_visibility_boundary,
)

EXAMPLES_DIR = Path(__file__).resolve().parent
OUTPUT_DIR = EXAMPLES_DIR / "output"


def create_room() -> ObstacleSet:
    """Create a room with a pillar, a crate and a counter."""
    return ObstacleSet([
        Box(320, 140, 60, 40),
        Circle(Point(260, 320), 30.0),
        Polygon([(420, 260), (520, 240), (540, 330), (450, 350)]),
    ])


def describe_boundary(observer: Observer, obstacles: ObstacleSet) -> None:
    boundary = observer.visibility_boundary(obstacles)
    print(f"  Observer at {format_point(observer.position)} facing {format_angle(observer.facing)}")
    print(f"  {len(boundary)} path commands, {len(boundary.rays)} rays, {len(boundary.hits)} hits")
    for command in boundary:
        if isinstance(command, LineTo):
            print(f"    line to {format_point(command.point)}")
        elif isinstance(command, Arc):
            print(f"    arc {format_angle(command.start_angle)} -> {format_angle(command.end_angle)}")


def example_1_basic_boundary(obstacles: ObstacleSet) -> Observer:
    """Example 1: compute a boundary."""
    print("\n" + "=" * 70)
    print("EXAMPLE 1: Visibility Boundary")
    print("=" * 70)

    observer = Observer((150, 240), facing=0.0, field_of_view=math.radians(110), max_distance=400.0)
    describe_boundary(observer, obstacles)
    return observer


def example_2_caching(observer: Observer, obstacles: ObstacleSet) -> None:
    """Example 2: cached reads, pose changes and obstacle edits."""
    print("\n" + "=" * 70)
    print("EXAMPLE 2: Caching and Invalidation")
    print("=" * 70)

    unsubscribe = obstacles.subscribe(observer.invalidate)

    first = observer.visibility_boundary(obstacles)
    print(f"  Second read reuses cache: {observer.visibility_boundary(obstacles) is first}")

    observer.look_at((450, 300))
    print(f"  After look_at, stale: {observer.is_stale}")
    describe_boundary(observer, obstacles)

    obstacles.move(0, 0, 60)
    print(f"  After moving the crate, stale: {observer.is_stale} (revision {obstacles.revision})")
    describe_boundary(observer, obstacles)

    unsubscribe()


def example_3_picking(observer: Observer, obstacles: ObstacleSet) -> None:
    """Example 3: pick the obstacle under a point."""
    print("\n" + "=" * 70)
    print("EXAMPLE 3: Picking")
    print("=" * 70)

    for point in [(260, 320), (480, 300), (50, 50)]:
        hit = obstacles.shape_at(point)
        label = "nothing" if hit is None else f"#{hit[0]} {type(hit[1]).__name__}"
        print(f"  {point}: {label}")

    print(f"  Observer inside an obstacle: {bool(observer.obstacles_containing(obstacles))}")


def example_4_render(observer: Observer, obstacles: ObstacleSet) -> None:
    """Example 4: render the scene to a PNG."""
    print("\n" + "=" * 70)
    print("EXAMPLE 4: Rendering")
    print("=" * 70)

    if not HAS_CV2:
        print("  OpenCV not installed, skipping (pip install opencv-python)")
        return

    import cv2

    boundary = observer.visibility_boundary(obstacles)
    image = np.full((480, 640, 3), 255, dtype=np.uint8)
    image = draw_visibility_boundary(image, boundary)
    image = draw_obstacles(image, obstacles)
    image = draw_rays(image, boundary)
    image = draw_observer(image, observer.pose)

    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    output_path = OUTPUT_DIR / "observer_walkthrough.png"
    cv2.imwrite(str(output_path), image)
    print(f"  Saved: {output_path}")


def main() -> None:
    setup_debug_logging(level=logging.INFO)

    obstacles = create_room()
    observer = example_1_basic_boundary(obstacles)
    example_2_caching(observer, obstacles)
    example_3_picking(observer, obstacles)
    example_4_render(observer, obstacles)


if __name__ == "__main__":
    main()

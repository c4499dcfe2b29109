#!/usr/bin/env python3
"""
Profile script for view_cone to identify performance bottlenecks.
"""

import cProfile
import io
import math
import pstats
import time
from typing import List

import numpy as np

from view_cone import Box, Circle, Observer, Point, Polygon, Shape


def generate_random_polygon(center: Point, radius: float, n_vertices: int = 5) -> Polygon:
    """Generate a random star-shaped polygon roughly centered at center."""
    angles = np.sort(np.random.uniform(0, 2 * np.pi, n_vertices))
    radii = np.random.uniform(0.5 * radius, 1.5 * radius, n_vertices)
    x = center.x + radii * np.cos(angles)
    y = center.y + radii * np.sin(angles)
    return Polygon(np.column_stack([x, y]))


def generate_typical_workload(n_obstacles: int = 5, vertices_per_obstacle: int = 5) -> List[Shape]:
    """
    Generate obstacles for profiling.
    Mixes polygons, circles and boxes spread in front of an observer at (500, 500).
    """
    viewer = Point(500.0, 500.0)
    obstacles: List[Shape] = []
    for i in range(n_obstacles):
        angle = np.random.uniform(math.pi / 2 - 0.6, math.pi / 2 + 0.6)
        dist = np.random.uniform(50, 250)
        center = Point(viewer.x + dist * np.cos(angle), viewer.y + dist * np.sin(angle))
        if i % 3 == 0:
            obstacles.append(generate_random_polygon(center, 20.0, vertices_per_obstacle))
        elif i % 3 == 1:
            obstacles.append(Circle(center, np.random.uniform(5, 20)))
        else:
            obstacles.append(Box(center.x, center.y, np.random.uniform(5, 30), np.random.uniform(5, 30)))
    return obstacles


def run_workload(n_obstacles: int, vertices_per_obstacle: int, n_iterations: int) -> None:
    """Recompute the boundary of a turning observer over fresh scenes."""
    np.random.seed(42)  # For reproducibility

    observer = Observer((500.0, 500.0), facing=math.pi / 2, field_of_view=math.radians(90), max_distance=300.0)
    for i in range(n_iterations):
        obstacles = generate_typical_workload(n_obstacles, vertices_per_obstacle)
        observer.facing = math.pi / 2 + 0.3 * math.sin(i)
        observer.visibility_boundary(obstacles)


def profile_function(func, description: str) -> None:
    """Profile a function and print statistics."""
    print(f"\n{'=' * 60}")
    print(f"Profiling: {description}")
    print('=' * 60)

    start = time.perf_counter()

    profiler = cProfile.Profile()
    profiler.enable()
    func()
    profiler.disable()

    elapsed = time.perf_counter() - start

    s = io.StringIO()
    ps = pstats.Stats(profiler, stream=s).sort_stats('cumulative')
    ps.print_stats(30)
    print(s.getvalue())

    print(f"\nTotal time: {elapsed:.3f}s")


if __name__ == "__main__":
    print("View Cone Performance Profiling")
    print("=" * 60)

    profile_function(
        lambda: run_workload(5, 5, 200),
        "Typical workload (5 obstacles, 200 iterations)"
    )

    # Corner collection is quadratic in polygon size, so this is the slow path
    profile_function(
        lambda: run_workload(50, 8, 20),
        "Many obstacles (50 obstacles x 8 vertices, 20 iterations)"
    )

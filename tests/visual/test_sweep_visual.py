"""
Visual validation tests for the visibility sweep.

These tests create matplotlib figures showing:
- Obstacles (polygons, circles, boxes)
- The cast rays and their hits
- The flattened visibility region

Run with: pytest tests/visual/test_sweep_visual.py -v

Output figures are saved to: tests/visual/output/
"""

import math
from pathlib import Path

import numpy as np
import pytest

# Try to import matplotlib, skip tests if not available
try:
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    import matplotlib.patches as mpatches
    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False

from view_cone import Box, Circle, Point, Polygon, compute_visibility


# Output directory for visual test results
OUTPUT_DIR = Path(__file__).parent / "output"


@pytest.fixture(scope="module", autouse=True)
def setup_output_dir():
    """Create output directory if it doesn't exist."""
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)


def save_figure(fig, name: str):
    """Save figure to output directory."""
    filepath = OUTPUT_DIR / f"{name}.png"
    fig.savefig(filepath, dpi=150, bbox_inches='tight')
    plt.close(fig)
    print(f"Saved: {filepath}")
    return filepath


@pytest.mark.skipif(not HAS_MATPLOTLIB, reason="matplotlib not installed")
class TestSweepVisual:
    """Visual validation tests for the sweep."""

    def _draw_shapes(self, ax, shapes):
        """Draw obstacles on the axes."""
        for shape in shapes:
            if isinstance(shape, Circle):
                patch = mpatches.Circle((shape.center.x, shape.center.y), shape.radius,
                                        facecolor='gray', alpha=0.6, edgecolor='black')
            elif isinstance(shape, Box):
                patch = mpatches.Rectangle((shape.x, shape.y), shape.w, shape.h,
                                           facecolor='gray', alpha=0.6, edgecolor='black')
            else:
                patch = mpatches.Polygon(shape.corners_array, closed=True,
                                         facecolor='gray', alpha=0.6, edgecolor='black')
            ax.add_patch(patch)

    def _draw_boundary(self, ax, boundary):
        """Draw the region, its rays and its hits."""
        polygon = boundary.to_polygon()
        ax.add_patch(mpatches.Polygon(polygon, closed=True, facecolor='gold',
                                      alpha=0.4, edgecolor='orange', linewidth=1.5))
        for cast in boundary.rays:
            end = cast.end
            ax.plot([cast.ray.start.x, end.x], [cast.ray.start.y, end.y],
                    color='lightblue', linewidth=0.8)
        hits = boundary.hits
        if hits:
            ax.scatter([h.x for h in hits], [h.y for h in hits], color='red', s=15, zorder=5)
        ax.scatter([boundary.origin.x], [boundary.origin.y], color='blue', s=40, zorder=6)

    def _setup_axes(self, ax, title, extent=120):
        ax.set_xlim(-extent, extent)
        ax.set_ylim(-extent, extent)
        ax.set_aspect('equal')
        ax.grid(True, alpha=0.3)
        ax.set_title(title)

    def test_open_sky(self):
        """Pie slice with no obstacles."""
        fig, ax = plt.subplots(figsize=(6, 6))
        boundary = compute_visibility(Point(0, 0), 0.5, math.pi / 2, 100.0, [])
        self._draw_boundary(ax, boundary)
        self._setup_axes(ax, "Open sky, 90 degree cone")
        assert save_figure(fig, "sweep_open_sky").exists()

    def test_mixed_obstacles(self):
        """Box, circle and polygon casting shadows."""
        shapes = [
            Box(40, -10, 15, 20),
            Circle(Point(30, 50), 10.0),
            Polygon([(60, -60), (80, -40), (50, -30)]),
        ]
        boundary = compute_visibility(Point(0, 0), 0.0, math.radians(150), 100.0, shapes)

        fig, ax = plt.subplots(figsize=(6, 6))
        self._draw_shapes(ax, shapes)
        self._draw_boundary(ax, boundary)
        self._setup_axes(ax, "Mixed obstacles, 150 degree cone")
        assert save_figure(fig, "sweep_mixed_obstacles").exists()

        polygon = boundary.to_polygon()
        assert np.all(np.hypot(polygon[:, 0], polygon[:, 1]) <= 100.0 + 1e-6)

    def test_full_circle_wraparound(self):
        """360 degree view looking along -x, across the +/-pi seam."""
        shapes = [Box(-70, -8, 12, 16), Circle(Point(0, 60), 12.0), Box(40, 30, 20, 10)]
        boundary = compute_visibility(Point(0, 0), math.pi, 2 * math.pi, 100.0, shapes)

        fig, ax = plt.subplots(figsize=(6, 6))
        self._draw_shapes(ax, shapes)
        self._draw_boundary(ax, boundary)
        self._setup_axes(ax, "Full circle facing -x")
        assert save_figure(fig, "sweep_full_circle").exists()

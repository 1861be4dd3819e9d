"""Motion path evaluation.

Paths are stored in normalized units; ``to_pixels`` is the only place the
timeline resolution takes part in evaluation.
"""
from __future__ import annotations

from typing import List, Tuple

from motion_engines.motion_graphics.models import MotionPath, PathPoint, Resolution

Vec2 = Tuple[float, float]


def _lerp(a: Vec2, b: Vec2, t: float) -> Vec2:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def _de_casteljau(points: List[Vec2], t: float) -> Vec2:
    pts = list(points)
    n = len(pts)
    for r in range(1, n):
        for i in range(n - r):
            pts[i] = _lerp(pts[i], pts[i + 1], t)
    return pts[0]


def _segment_controls(start: PathPoint, end: PathPoint) -> List[Vec2]:
    p0 = (start.x, start.y)
    p3 = (end.x, end.y)
    # Handles are offsets from their anchor; a missing handle sits on the anchor
    p1 = (start.x + start.handle_out.x, start.y + start.handle_out.y) if start.handle_out else p0
    p2 = (end.x + end.handle_in.x, end.y + end.handle_in.y) if end.handle_in else p3
    return [p0, p1, p2, p3]


def point_at(path: MotionPath, progress: float) -> Vec2:
    """Point on the path at ``progress`` in [0, 1], uniform per segment."""
    points = path.points
    if not points:
        return (0.0, 0.0)
    if len(points) == 1:
        return (points[0].x, points[0].y)

    t = max(0.0, min(1.0, progress))
    pairs = list(zip(points, points[1:]))
    if path.closed:
        pairs.append((points[-1], points[0]))

    segs = len(pairs)
    scaled_t = t * segs
    idx = int(scaled_t)
    if idx >= segs:
        # Clamped to end
        idx = segs - 1
    sub_t = scaled_t - idx

    start, end = pairs[idx]
    return _de_casteljau(_segment_controls(start, end), sub_t)


def to_pixels(point: Vec2, resolution: Resolution) -> Vec2:
    return (point[0] * resolution.width, point[1] * resolution.height)

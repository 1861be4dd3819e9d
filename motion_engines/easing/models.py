"""Easing kinds and Bezier control points."""
from __future__ import annotations

from enum import Enum
from typing import Tuple


class EasingKind(str, Enum):
    """Remapping of linear progress applied between two keyframes."""
    LINEAR = "linear"
    EASE_IN = "ease-in"
    EASE_OUT = "ease-out"
    EASE_IN_OUT = "ease-in-out"
    BEZIER = "bezier"


# (x1, y1, x2, y2); endpoints are fixed at (0, 0) and (1, 1)
BezierPoints = Tuple[float, float, float, float]

KNOWN_EASINGS = frozenset(kind.value for kind in EasingKind)

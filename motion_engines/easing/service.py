"""Easing functions.

Pure mappings from normalized progress (0..1) to eased progress. Input
progress is clamped before easing; callers must not rely on
extrapolation.
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Sequence, Union

from motion_engines.common.errors import InvalidParameterError, UnsupportedEasingError
from motion_engines.config import runtime_config
from motion_engines.easing.models import KNOWN_EASINGS, BezierPoints, EasingKind

logger = logging.getLogger(__name__)

_EPSILON = 1e-7
_NEWTON_ITERATIONS = 8


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _kind_value(kind: Union[EasingKind, str]) -> str:
    return kind.value if isinstance(kind, EasingKind) else str(kind)


def _resolve_lenient(lenient: Optional[bool]) -> bool:
    return runtime_config.is_lenient_easing() if lenient is None else lenient


def validate_bezier_points(control_points: Optional[Sequence[float]]) -> BezierPoints:
    if control_points is None:
        raise InvalidParameterError("bezier easing requires control points (x1, y1, x2, y2)")
    points = tuple(control_points)
    if len(points) != 4:
        raise InvalidParameterError(
            f"bezier easing requires 4 control values, got {len(points)}",
            details={"control_points": list(points)},
        )
    result = []
    for value in points:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidParameterError(f"bezier control value {value!r} is not a finite number")
        if value < 0.0 or value > 1.0:
            raise InvalidParameterError(
                f"bezier control value {value} must be within [0, 1]",
                details={"control_points": list(points)},
            )
        result.append(float(value))
    return tuple(result)  # type: ignore[return-value]


def validate_easing(
    kind: Union[EasingKind, str],
    control_points: Optional[Sequence[float]] = None,
    lenient: Optional[bool] = None,
) -> str:
    """Check an easing configuration without evaluating it.

    Returns the canonical kind string. Unknown kinds are accepted only in
    lenient mode.
    """
    value = _kind_value(kind)
    if value not in KNOWN_EASINGS:
        if _resolve_lenient(lenient):
            logger.warning("Unknown easing kind %r accepted as linear (lenient mode)", value)
            return value
        raise UnsupportedEasingError(f"Unsupported easing kind: {value}", details={"easing": value})
    if value == EasingKind.BEZIER.value:
        validate_bezier_points(control_points)
    return value


# --- Cubic Bezier ---

def _bezier_coord(t: float, p1: float, p2: float) -> float:
    # B(t) for endpoints 0 and 1: 3(1-t)^2 t p1 + 3(1-t) t^2 p2 + t^3
    u = 1.0 - t
    return 3.0 * u * u * t * p1 + 3.0 * u * t * t * p2 + t * t * t


def _bezier_slope(t: float, p1: float, p2: float) -> float:
    u = 1.0 - t
    return 3.0 * u * u * p1 + 6.0 * u * t * (p2 - p1) + 3.0 * t * t * (1.0 - p2)


def _solve_bezier_t(x: float, x1: float, x2: float) -> float:
    """Find the curve parameter whose x coordinate equals ``x``."""
    t = x
    for _ in range(_NEWTON_ITERATIONS):
        error = _bezier_coord(t, x1, x2) - x
        if abs(error) < _EPSILON:
            return t
        slope = _bezier_slope(t, x1, x2)
        if abs(slope) < 1e-6:
            break
        t -= error / slope

    # Newton failed to converge (flat slope); x(t) is monotonic on [0, 1]
    low, high = 0.0, 1.0
    t = x
    while high - low > _EPSILON:
        current = _bezier_coord(t, x1, x2)
        if abs(current - x) < _EPSILON:
            return t
        if current < x:
            low = t
        else:
            high = t
        t = (low + high) / 2.0
    return t


def cubic_bezier(progress: float, control_points: Sequence[float]) -> float:
    x1, y1, x2, y2 = validate_bezier_points(control_points)
    p = _clamp01(progress)
    if p == 0.0 or p == 1.0:
        return p
    t = _solve_bezier_t(p, x1, x2)
    return _clamp01(_bezier_coord(t, y1, y2))


# --- Entry point ---

def ease(
    kind: Union[EasingKind, str],
    progress: float,
    control_points: Optional[Sequence[float]] = None,
    lenient: Optional[bool] = None,
) -> float:
    """Map linear progress to eased progress for ``kind``."""
    p = _clamp01(progress)
    value = _kind_value(kind)

    if value == EasingKind.LINEAR.value:
        return p
    if value == EasingKind.EASE_IN.value:
        return p * p
    if value == EasingKind.EASE_OUT.value:
        return 1.0 - (1.0 - p) ** 2
    if value == EasingKind.EASE_IN_OUT.value:
        if p < 0.5:
            return 2.0 * p * p
        return 1.0 - ((-2.0 * p + 2.0) ** 2) / 2.0
    if value == EasingKind.BEZIER.value:
        return cubic_bezier(p, control_points)  # type: ignore[arg-type]

    if _resolve_lenient(lenient):
        return p
    raise UnsupportedEasingError(f"Unsupported easing kind: {value}", details={"easing": value})

"""Runtime configuration helpers for the motion engines."""
from __future__ import annotations

import os
from typing import Optional, Tuple

EASING_MODE_STRICT = "strict"
EASING_MODE_LENIENT = "lenient"

_DEFAULT_FPS = 30.0
_DEFAULT_DURATION = 300.0
_DEFAULT_RESOLUTION = (1920, 1080)
_DEFAULT_ELEMENT_DURATION = 10.0
_DEFAULT_MAX_HIERARCHY_DEPTH = 64


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(name, default)


def _get_float(name: str, default: float) -> float:
    raw = _get_env(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def get_easing_mode() -> str:
    mode = (_get_env("MOTION_EASING_MODE") or EASING_MODE_STRICT).lower()
    if mode not in {EASING_MODE_STRICT, EASING_MODE_LENIENT}:
        return EASING_MODE_STRICT
    return mode


def is_lenient_easing() -> bool:
    """Unknown easing kinds evaluate as linear instead of failing."""
    return get_easing_mode() == EASING_MODE_LENIENT


def get_max_hierarchy_depth() -> int:
    raw = _get_env("MOTION_MAX_HIERARCHY_DEPTH")
    try:
        depth = int(raw) if raw else _DEFAULT_MAX_HIERARCHY_DEPTH
    except ValueError:
        return _DEFAULT_MAX_HIERARCHY_DEPTH
    return depth if depth > 0 else _DEFAULT_MAX_HIERARCHY_DEPTH


def get_default_fps() -> float:
    return _get_float("MOTION_DEFAULT_FPS", _DEFAULT_FPS)


def get_default_duration() -> float:
    return _get_float("MOTION_DEFAULT_DURATION", _DEFAULT_DURATION)


def get_default_element_duration() -> float:
    return _get_float("MOTION_DEFAULT_ELEMENT_DURATION", _DEFAULT_ELEMENT_DURATION)


def get_default_resolution() -> Tuple[int, int]:
    """Resolution as (width, height), parsed from ``WxH``."""
    raw = (_get_env("MOTION_DEFAULT_RESOLUTION") or "").lower()
    if "x" not in raw:
        return _DEFAULT_RESOLUTION
    width, _, height = raw.partition("x")
    try:
        w, h = int(width), int(height)
    except ValueError:
        return _DEFAULT_RESOLUTION
    if w <= 0 or h <= 0:
        return _DEFAULT_RESOLUTION
    return w, h

"""Error kinds raised by the motion engines.

Every error is a local, synchronous failure raised at the point of the
offending operation. Each carries a machine-readable ``code`` and the HTTP
status the routers report it with.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class MotionEngineError(Exception):
    """Base class for all motion engine failures."""

    code = "motion.error"
    http_status = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidParameterError(MotionEngineError, ValueError):
    """Raised for malformed easing config, values or edit arguments."""

    code = "motion.invalid_parameter"


class UnsupportedEasingError(MotionEngineError, ValueError):
    """Raised when an easing kind is unknown and lenient mode is off."""

    code = "motion.unsupported_easing"


class IndexOutOfRangeError(MotionEngineError, IndexError):
    """Raised when a keyframe index does not exist on a track."""

    code = "motion.index_out_of_range"


class PresetNotFoundError(MotionEngineError, LookupError):
    """Raised when a preset category/name pair is unknown."""

    code = "motion.preset_not_found"
    http_status = 404


class CyclicHierarchyError(MotionEngineError):
    """Raised when a parent chain loops back on itself or is too deep."""

    code = "motion.cyclic_hierarchy"
    http_status = 409


class InvalidSplitTimeError(MotionEngineError, ValueError):
    """Raised when a split point is not strictly inside the clip."""

    code = "clips.invalid_split_time"


class NonContiguousClipsError(MotionEngineError, ValueError):
    """Raised when two clips cannot be merged back into one."""

    code = "clips.non_contiguous"
    http_status = 409


class TimelineNotFoundError(MotionEngineError, LookupError):
    code = "motion.timeline_not_found"
    http_status = 404


class ElementNotFoundError(MotionEngineError, LookupError):
    code = "motion.element_not_found"
    http_status = 404


class ClipNotFoundError(MotionEngineError, LookupError):
    code = "clips.not_found"
    http_status = 404

"""Canonical error envelope for motion engine responses.

Standardized structure:
{
  "error": {
    "code": "string",
    "message": "string",
    "http_status": 400,
    "resource_kind": "timeline | element | clip | preset | null",
    "details": {}
  }
}
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Literal, Optional

from fastapi import HTTPException
from pydantic import BaseModel, Field

from motion_engines.common.errors import MotionEngineError


logger = logging.getLogger(__name__)

ResourceKind = Literal["timeline", "element", "keyframe", "preset", "clip", "track", None]


class ErrorDetail(BaseModel):
    """Canonical error detail structure."""
    code: str
    message: str
    http_status: int
    resource_kind: Optional[ResourceKind] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class ErrorEnvelope(BaseModel):
    """Top-level error envelope returned by all motion endpoints."""
    error: ErrorDetail


def build_error_envelope(
    code: str,
    message: str,
    status_code: int = 400,
    resource_kind: Optional[ResourceKind] = None,
    details: Optional[Dict[str, Any]] = None,
) -> ErrorEnvelope:
    """Construct an ErrorEnvelope (without raising).

    Args mirror error_response; http_status mirrors status_code.
    """
    error_detail = ErrorDetail(
        code=code,
        message=message,
        http_status=status_code,
        resource_kind=resource_kind,
        details=details or {},
    )
    return ErrorEnvelope(error=error_detail)


def error_response(
    code: str,
    message: str,
    status_code: int = 400,
    resource_kind: Optional[ResourceKind] = None,
    details: Optional[Dict[str, Any]] = None,
) -> HTTPException:
    """Construct and raise a standardized error response.

    Args:
        code: Machine-readable error code (e.g., "clips.invalid_split_time")
        message: Human-readable error message
        status_code: HTTP status code (default 400)
        resource_kind: The resource type (timeline, element, clip, etc.)
        details: Additional context dict

    Returns:
        HTTPException with canonical error envelope body
    """
    envelope = build_error_envelope(
        code=code,
        message=message,
        status_code=status_code,
        resource_kind=resource_kind,
        details=details,
    )
    raise HTTPException(status_code=status_code, detail=envelope.model_dump())


def raise_engine_error(exc: MotionEngineError, resource_kind: Optional[ResourceKind] = None) -> HTTPException:
    """Translate an engine error into the canonical envelope."""
    return error_response(
        code=exc.code,
        message=exc.message,
        status_code=exc.http_status,
        resource_kind=resource_kind,
        details=exc.details,
    )


@contextmanager
def engine_errors(resource_kind: Optional[ResourceKind] = None) -> Iterator[None]:
    """Route-level guard: engine errors leave as canonical envelopes."""
    try:
        yield
    except MotionEngineError as exc:
        logger.warning("Rejected %s request: %s (%s)", resource_kind or "motion", exc.message, exc.code)
        raise_engine_error(exc, resource_kind)

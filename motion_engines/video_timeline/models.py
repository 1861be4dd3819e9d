from __future__ import annotations

import math
import uuid
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

TRIM_TOLERANCE = 1e-9


class TrackKind(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"
    TEXT = "text"
    EFFECTS = "effects"


class Clip(BaseModel):
    """
    A time-bounded reference into a media source.
    ``trim_in``/``trim_out`` are source times; ``start_time`` is timeline time.
    """
    id: str = Field(default_factory=lambda: f"clip-{uuid.uuid4().hex[:12]}")
    track_id: str
    name: str = "Clip"
    source_id: Optional[str] = None
    start_time: float = Field(default=0.0, ge=0.0)
    duration: float = Field(ge=0.0)
    trim_in: float = Field(default=0.0, ge=0.0)
    trim_out: float

    @model_validator(mode="after")
    def validate_trims(self):
        if not math.isclose(self.trim_out - self.trim_in, self.duration, rel_tol=0.0, abs_tol=TRIM_TOLERANCE):
            raise ValueError("trim_out - trim_in must equal duration")
        return self

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration


class ClipTrack(BaseModel):
    id: str = Field(default_factory=lambda: f"track-{uuid.uuid4().hex[:12]}")
    kind: TrackKind = TrackKind.VIDEO
    name: str = "Track"
    visible: bool = True
    locked: bool = False
    clip_ids: List[str] = Field(default_factory=list)

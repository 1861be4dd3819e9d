from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field, ValidationError

from motion_engines.common.error_envelope import engine_errors
from motion_engines.common.errors import InvalidParameterError
from motion_engines.video_timeline.models import Clip, ClipTrack
from motion_engines.video_timeline.service import get_clip_service

router = APIRouter(prefix="/clips", tags=["video_timeline"])


class ClipCreateRequest(BaseModel):
    id: Optional[str] = None
    name: str = "Clip"
    source_id: Optional[str] = None
    start_time: float = 0.0
    duration: float
    trim_in: float = 0.0
    trim_out: Optional[float] = None  # defaults to trim_in + duration


class SplitRequest(BaseModel):
    at_time: float


class MergeRequest(BaseModel):
    first_id: str
    second_id: str


def _build_clip(track_id: str, req: ClipCreateRequest) -> Clip:
    data = req.model_dump(exclude_none=True)
    data["track_id"] = track_id
    data.setdefault("trim_out", req.trim_in + req.duration)
    try:
        return Clip.model_validate(data)
    except ValidationError as exc:
        raise InvalidParameterError(
            f"Invalid clip: {exc.errors()[0]['msg']}",
            details={"errors": exc.errors(include_url=False, include_context=False, include_input=False)},
        ) from exc


@router.post("/tracks", response_model=ClipTrack)
def create_track(track: ClipTrack):
    with engine_errors("track"):
        return get_clip_service().create_track(track)


@router.get("/tracks/{track_id}", response_model=ClipTrack)
def get_track(track_id: str):
    with engine_errors("track"):
        return get_clip_service().get_track(track_id)


@router.get("/tracks/{track_id}/clips", response_model=List[Clip])
def list_clips(track_id: str):
    with engine_errors("track"):
        return get_clip_service().list_clips(track_id)


@router.post("/tracks/{track_id}/clips", response_model=Clip)
def add_clip(track_id: str, req: ClipCreateRequest):
    with engine_errors("clip"):
        return get_clip_service().add_clip(_build_clip(track_id, req))


@router.post("/merge", response_model=Clip)
def merge_clips(req: MergeRequest):
    with engine_errors("clip"):
        return get_clip_service().merge(req.first_id, req.second_id)


@router.get("/{clip_id}", response_model=Clip)
def get_clip(clip_id: str):
    with engine_errors("clip"):
        return get_clip_service().get_clip(clip_id)


@router.delete("/{clip_id}")
def delete_clip(clip_id: str):
    with engine_errors("clip"):
        get_clip_service().delete_clip(clip_id)
    return {"status": "deleted", "id": clip_id}


@router.post("/{clip_id}/split", response_model=List[Clip])
def split_clip(clip_id: str, req: SplitRequest):
    with engine_errors("clip"):
        first, second = get_clip_service().split(clip_id, req.at_time)
    return [first, second]

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body
from pydantic import BaseModel, Field

from motion_engines.common.error_envelope import engine_errors
from motion_engines.keyframes.models import Keyframe
from motion_engines.motion_graphics.models import Element, ElementFrame, ElementType, MotionPath, Timeline
from motion_engines.motion_graphics.presets import list_presets
from motion_engines.motion_graphics.service import get_timeline_service

router = APIRouter(prefix="/motion", tags=["motion_graphics"])


class TimelineCreateRequest(BaseModel):
    name: str = "Untitled"
    duration: Optional[float] = None
    fps: Optional[float] = None
    width: Optional[int] = None
    height: Optional[int] = None


class ElementCreateRequest(BaseModel):
    type: ElementType
    name: Optional[str] = None
    start_time: Optional[float] = None
    duration: Optional[float] = None
    layer: Optional[int] = None


class ElementUpdateRequest(BaseModel):
    name: Optional[str] = None
    visible: Optional[bool] = None
    locked: Optional[bool] = None
    layer: Optional[int] = None
    start_time: Optional[float] = None
    duration: Optional[float] = None
    parent_id: Optional[str] = None
    motion_path_id: Optional[str] = None


class KeyframeRequest(BaseModel):
    property: str
    time: float
    value: Any
    easing: str = "linear"
    bezier_points: Optional[List[float]] = None


class PresetRequest(BaseModel):
    category: str
    name: str


class SeekRequest(BaseModel):
    time: float = Field(ge=0.0)


@router.post("/timelines", response_model=Timeline)
def create_timeline(req: TimelineCreateRequest):
    fields: Dict[str, Any] = {"name": req.name}
    if req.duration is not None:
        fields["duration"] = req.duration
    if req.fps is not None:
        fields["fps"] = req.fps
    if req.width is not None and req.height is not None:
        fields["resolution"] = {"width": req.width, "height": req.height}
    with engine_errors("timeline"):
        return get_timeline_service().create_timeline(**fields)


@router.post("/timelines/import", response_model=Timeline)
def import_timeline(state: Dict[str, Any] = Body(...), replace: bool = False):
    with engine_errors("timeline"):
        return get_timeline_service().import_state(state, replace=replace)


@router.get("/timelines/{timeline_id}", response_model=Timeline)
def get_timeline(timeline_id: str):
    with engine_errors("timeline"):
        return get_timeline_service().require_timeline(timeline_id)


@router.get("/timelines/{timeline_id}/export")
def export_timeline(timeline_id: str):
    with engine_errors("timeline"):
        return get_timeline_service().export_state(timeline_id)


@router.delete("/timelines/{timeline_id}")
def delete_timeline(timeline_id: str):
    with engine_errors("timeline"):
        get_timeline_service().delete_timeline(timeline_id)
    return {"status": "deleted", "id": timeline_id}


@router.post("/timelines/{timeline_id}/seek")
def seek(timeline_id: str, req: SeekRequest):
    with engine_errors("timeline"):
        current = get_timeline_service().seek(timeline_id, req.time)
    return {"current_time": current}


@router.get("/timelines/{timeline_id}/frame", response_model=List[ElementFrame])
def evaluate_frame(timeline_id: str, time: Optional[float] = None, hold: bool = False):
    with engine_errors("timeline"):
        return get_timeline_service().evaluate(timeline_id, time, hold=hold)


@router.post("/timelines/{timeline_id}/elements", response_model=Element)
def create_element(timeline_id: str, req: ElementCreateRequest):
    with engine_errors("element"):
        return get_timeline_service().create_element(
            timeline_id,
            req.type,
            name=req.name,
            start_time=req.start_time,
            duration=req.duration,
            layer=req.layer,
        )


@router.patch("/timelines/{timeline_id}/elements/{element_id}", response_model=Element)
def update_element(timeline_id: str, element_id: str, req: ElementUpdateRequest):
    with engine_errors("element"):
        return get_timeline_service().update_element(timeline_id, element_id, **req.model_dump(exclude_unset=True))


@router.delete("/timelines/{timeline_id}/elements/{element_id}")
def delete_element(timeline_id: str, element_id: str):
    with engine_errors("element"):
        get_timeline_service().remove_element(timeline_id, element_id)
    return {"status": "deleted", "id": element_id}


@router.post("/timelines/{timeline_id}/elements/{element_id}/keyframes", response_model=Keyframe)
def add_keyframe(timeline_id: str, element_id: str, req: KeyframeRequest):
    with engine_errors("keyframe"):
        return get_timeline_service().add_keyframe(
            timeline_id,
            element_id,
            req.property,
            req.time,
            req.value,
            req.easing,
            req.bezier_points,
        )


@router.delete("/timelines/{timeline_id}/elements/{element_id}/keyframes/{property_path}/{index}", response_model=Keyframe)
def remove_keyframe(timeline_id: str, element_id: str, property_path: str, index: int):
    with engine_errors("keyframe"):
        return get_timeline_service().remove_keyframe(timeline_id, element_id, property_path, index)


@router.post("/timelines/{timeline_id}/elements/{element_id}/presets", response_model=Element)
def apply_preset(timeline_id: str, element_id: str, req: PresetRequest):
    with engine_errors("preset"):
        return get_timeline_service().apply_preset(timeline_id, element_id, req.category, req.name)


@router.post("/timelines/{timeline_id}/paths", response_model=MotionPath)
def add_motion_path(timeline_id: str, path: MotionPath):
    with engine_errors("timeline"):
        return get_timeline_service().add_motion_path(timeline_id, path)


@router.get("/presets")
def get_presets():
    return list_presets(get_timeline_service().presets)

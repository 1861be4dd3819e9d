"""Element (layer) operations."""
from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

from motion_engines.config import runtime_config
from motion_engines.keyframes.models import KeyframeTrack, TypedValue
from motion_engines.keyframes.service import evaluate_track, make_track, replace_keyframes
from motion_engines.motion_graphics.models import (
    PROPERTY_SPECS,
    STYLE_PATHS,
    TEXT_PATHS,
    TRANSFORM_PATHS,
    Element,
    ElementType,
    PropertyPath,
    Resolution,
)
from motion_engines.motion_graphics.presets import PresetLibrary, get_preset_library, resolve_property


def is_active(element: Element, time: float) -> bool:
    return element.start_time <= time < element.end_time


def local_time(element: Element, time: float, hold: bool = False) -> Optional[float]:
    """
    Element-relative time, or None when outside the active interval.
    In hold mode an element that has ended keeps its end time; before its
    start it still has no value.
    """
    if is_active(element, time):
        return time - element.start_time
    if not hold or time < element.start_time:
        return None
    return element.duration


def evaluate_element(
    element: Element,
    time: float,
    hold: bool = False,
    lenient: Optional[bool] = None,
) -> Dict[PropertyPath, TypedValue]:
    """
    Evaluate every owned track at absolute ``time``.
    Returns an empty mapping when the element has no value at ``time``.
    """
    rel = local_time(element, time, hold)
    if rel is None:
        return {}
    return {path: evaluate_track(track, rel, lenient) for path, track in element.properties.items()}


def property_value(
    values: Dict[PropertyPath, TypedValue], path: PropertyPath
) -> TypedValue:
    """Evaluated value, falling back to the property's default."""
    if path in values:
        return values[path]
    return PROPERTY_SPECS[path].default


def new_track(path: PropertyPath, initial: Optional[TypedValue] = None) -> KeyframeTrack:
    spec = PROPERTY_SPECS[path]
    frames = [] if initial is None else [{"time": 0.0, "value": initial, "easing": "linear"}]
    return make_track(path.value, spec.value_type, spec.default, frames)


def _paths_for(element_type: ElementType) -> Tuple[PropertyPath, ...]:
    paths: Tuple[PropertyPath, ...] = TRANSFORM_PATHS
    if element_type in (ElementType.SHAPE, ElementType.PATH):
        paths += STYLE_PATHS
    if element_type == ElementType.TEXT:
        paths += TEXT_PATHS
    return paths


def create_default_element(
    element_type: ElementType,
    name: Optional[str] = None,
    start_time: float = 0.0,
    duration: Optional[float] = None,
    layer: int = 0,
    resolution: Optional[Resolution] = None,
    element_id: Optional[str] = None,
) -> Element:
    """
    New element with one keyframe at 0 on each of its standard tracks.
    Position starts at the centre of ``resolution``.
    """
    element_type = ElementType(element_type)
    if resolution is None:
        width, height = runtime_config.get_default_resolution()
    else:
        width, height = resolution.width, resolution.height

    initial = {PropertyPath.POSITION: (width / 2.0, height / 2.0)}
    properties = {}
    for path in _paths_for(element_type):
        properties[path] = new_track(path, initial.get(path, PROPERTY_SPECS[path].default))

    data = dict(
        name=name or element_type.value.capitalize(),
        type=element_type,
        layer=layer,
        start_time=start_time,
        duration=runtime_config.get_default_element_duration() if duration is None else duration,
        properties=properties,
    )
    if element_id:
        data["id"] = element_id
    return Element(**data)


def apply_preset(
    element: Element,
    category: str,
    name: str,
    library: Optional[PresetLibrary] = None,
    lenient: Optional[bool] = None,
) -> Iterable[PropertyPath]:
    """
    Replace the keyframes of every track the preset names.

    Preset times are relative to the element start, so a preset keyframe
    at ``t`` plays at absolute ``element.start_time + t``. Either every
    track is replaced or none is.
    """
    preset = (library or get_preset_library()).find(category, name)

    staged: Dict[PropertyPath, KeyframeTrack] = {}
    for prop_name, frames in preset.properties.items():
        path = resolve_property(prop_name)
        current = element.properties.get(path) or new_track(path)
        track = current.model_copy(deep=True)
        replace_keyframes(track, [frame.model_dump() for frame in frames], lenient=lenient)
        staged[path] = track

    element.properties.update(staged)
    return list(staged)

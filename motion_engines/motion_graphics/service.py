"""
Motion Graphics Service.

Timeline evaluation plus the editing operations behind the motion routes.
Evaluation is a pure function of (timeline state, time). Edits are not
synchronised here; callers serialise them (see the editor session).
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from motion_engines.common.errors import (
    CyclicHierarchyError,
    ElementNotFoundError,
    IndexOutOfRangeError,
    InvalidParameterError,
    TimelineNotFoundError,
)
from motion_engines.easing.models import EasingKind
from motion_engines.keyframes.models import Keyframe
from motion_engines.keyframes.service import add_keyframe, remove_keyframe
from motion_engines.motion_graphics.elements import (
    apply_preset,
    create_default_element,
    evaluate_element,
    local_time,
    new_track,
)
from motion_engines.motion_graphics.hierarchy import compose_world_transform, would_create_cycle
from motion_engines.motion_graphics.models import (
    Element,
    ElementFrame,
    ElementType,
    MotionPath,
    PropertyPath,
    Timeline,
)
from motion_engines.motion_graphics.presets import PresetLibrary

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"name", "visible", "locked", "layer", "start_time", "duration", "parent_id", "motion_path_id"}
# Fields that may still change on a locked element
LOCK_EXEMPT_FIELDS = {"locked", "visible"}


# --- Evaluation ---

def evaluate_frame(
    timeline: Timeline,
    time: float,
    hold: bool = False,
    lenient: Optional[bool] = None,
) -> List[ElementFrame]:
    """
    Evaluate every visible element at ``time``, lowest layer first.

    ``time`` is clamped to [0, duration]. Elements outside their active
    interval are skipped. With ``hold`` an element that has ended keeps its
    last values; one that has not started yet is still skipped.
    ``locked`` does not affect evaluation.
    """
    t = min(max(time, 0.0), timeline.duration)
    # sorted() is stable, so equal layers keep insertion order
    ordered = sorted(timeline.elements.values(), key=lambda e: e.layer)

    frames: List[ElementFrame] = []
    for element in ordered:
        if not element.visible:
            continue
        if local_time(element, t, hold) is None:
            continue
        values = evaluate_element(element, t, hold=hold, lenient=lenient)
        if values.get(PropertyPath.ENABLED) is False:
            continue
        world = compose_world_transform(
            element,
            values,
            t,
            timeline.elements,
            timeline.motion_paths,
            timeline.resolution,
            lenient=lenient,
        )
        frames.append(
            ElementFrame(
                element_id=element.id,
                name=element.name,
                type=element.type,
                layer=element.layer,
                properties={path.value: value for path, value in values.items()},
                world=world,
            )
        )
    return frames


def frame_times(timeline: Timeline) -> List[float]:
    """Sample times 1/fps apart from 0 to duration inclusive."""
    count = int(math.floor(timeline.duration * timeline.fps + 1e-9))
    return [index / timeline.fps for index in range(count + 1)]


def iter_frames(
    timeline: Timeline,
    hold: bool = False,
    lenient: Optional[bool] = None,
) -> Iterator[Tuple[int, float, List[ElementFrame]]]:
    """Deterministic frame sequence for export: (index, time, frames)."""
    for index, t in enumerate(frame_times(timeline)):
        yield index, t, evaluate_frame(timeline, t, hold=hold, lenient=lenient)


# --- Storage ---

class TimelineRepository:
    def save(self, timeline: Timeline) -> Timeline:
        raise NotImplementedError

    def get(self, timeline_id: str) -> Optional[Timeline]:
        raise NotImplementedError

    def list(self) -> List[Timeline]:
        raise NotImplementedError

    def delete(self, timeline_id: str) -> None:
        raise NotImplementedError


class InMemoryTimelineRepository(TimelineRepository):
    def __init__(self) -> None:
        self.timelines: Dict[str, Timeline] = {}

    def save(self, timeline: Timeline) -> Timeline:
        self.timelines[timeline.id] = timeline
        return timeline

    def get(self, timeline_id: str) -> Optional[Timeline]:
        return self.timelines.get(timeline_id)

    def list(self) -> List[Timeline]:
        return list(self.timelines.values())

    def delete(self, timeline_id: str) -> None:
        self.timelines.pop(timeline_id, None)


def parse_property_path(path: Union[PropertyPath, str]) -> PropertyPath:
    try:
        return PropertyPath(path)
    except ValueError:
        raise InvalidParameterError(f"Unknown property path {path!r}") from None


def _validated(model_cls, data: Dict[str, Any]):
    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        raise InvalidParameterError(
            f"Invalid {model_cls.__name__.lower()}: {exc.errors()[0]['msg']}",
            details={"errors": exc.errors(include_url=False, include_context=False, include_input=False)},
        ) from exc


class TimelineService:
    """
    Service for editing and evaluating motion timelines.
    Currently in-memory storage.
    """

    def __init__(self, repo: Optional[TimelineRepository] = None, presets: Optional[PresetLibrary] = None) -> None:
        self.repo = repo or InMemoryTimelineRepository()
        self.presets = presets

    # Timelines

    def create_timeline(self, timeline: Optional[Timeline] = None, **fields: Any) -> Timeline:
        if timeline is None:
            timeline = _validated(Timeline, fields)
        if self.repo.get(timeline.id):
            raise InvalidParameterError(f"Timeline with ID {timeline.id} already exists")
        logger.debug("Created timeline %s", timeline.id)
        return self.repo.save(timeline)

    def get_timeline(self, timeline_id: str) -> Optional[Timeline]:
        return self.repo.get(timeline_id)

    def require_timeline(self, timeline_id: str) -> Timeline:
        timeline = self.repo.get(timeline_id)
        if timeline is None:
            raise TimelineNotFoundError(f"Timeline {timeline_id} not found", details={"timeline_id": timeline_id})
        return timeline

    def list_timelines(self) -> List[Timeline]:
        return self.repo.list()

    def delete_timeline(self, timeline_id: str) -> None:
        self.require_timeline(timeline_id)
        self.repo.delete(timeline_id)
        logger.debug("Deleted timeline %s", timeline_id)

    def snapshot(self, timeline_id: str) -> Timeline:
        """Deep copy safe to evaluate while edits continue on the stored timeline."""
        return self.require_timeline(timeline_id).model_copy(deep=True)

    def seek(self, timeline_id: str, time: float) -> float:
        timeline = self.require_timeline(timeline_id)
        timeline.current_time = min(max(float(time), 0.0), timeline.duration)
        return timeline.current_time

    def export_state(self, timeline_id: str) -> Dict[str, Any]:
        """Plain nested-dict form (JSON safe) for persistence."""
        return self.require_timeline(timeline_id).model_dump(mode="json")

    def import_state(self, data: Dict[str, Any], replace: bool = False) -> Timeline:
        timeline = _validated(Timeline, data)
        if self.repo.get(timeline.id) and not replace:
            raise InvalidParameterError(f"Timeline with ID {timeline.id} already exists")
        logger.debug("Imported timeline %s with %d elements", timeline.id, len(timeline.elements))
        return self.repo.save(timeline)

    # Elements

    def _require_element(self, timeline: Timeline, element_id: str) -> Element:
        element = timeline.elements.get(element_id)
        if element is None:
            raise ElementNotFoundError(
                f"Element {element_id} not found",
                details={"timeline_id": timeline.id, "element_id": element_id},
            )
        return element

    def _ensure_editable(self, element: Element) -> None:
        if element.locked:
            raise InvalidParameterError(f"Element {element.id} is locked", details={"element_id": element.id})

    def _check_parent(self, timeline: Timeline, element_id: str, parent_id: Optional[str]) -> None:
        if parent_id is not None and would_create_cycle(element_id, parent_id, timeline.elements):
            raise CyclicHierarchyError(
                f"Parenting {element_id} under {parent_id} creates a cycle",
                details={"element_id": element_id, "parent_id": parent_id},
            )

    def get_element(self, timeline_id: str, element_id: str) -> Element:
        return self._require_element(self.require_timeline(timeline_id), element_id)

    def add_element(self, timeline_id: str, element: Element) -> Element:
        timeline = self.require_timeline(timeline_id)
        if element.id in timeline.elements:
            raise InvalidParameterError(f"Element with ID {element.id} already exists")
        self._check_parent(timeline, element.id, element.parent_id)
        timeline.elements[element.id] = element
        logger.debug("Added element %s to timeline %s", element.id, timeline_id)
        return element

    def create_element(
        self,
        timeline_id: str,
        element_type: Union[ElementType, str],
        name: Optional[str] = None,
        start_time: Optional[float] = None,
        duration: Optional[float] = None,
        layer: Optional[int] = None,
    ) -> Element:
        """Element with default tracks, starting at the playhead by default."""
        timeline = self.require_timeline(timeline_id)
        try:
            element_type = ElementType(element_type)
        except ValueError:
            raise InvalidParameterError(f"Unknown element type {element_type!r}") from None
        try:
            element = create_default_element(
                element_type,
                name=name,
                start_time=timeline.current_time if start_time is None else start_time,
                duration=duration,
                layer=len(timeline.elements) if layer is None else layer,
                resolution=timeline.resolution,
            )
        except ValidationError as exc:
            raise InvalidParameterError(f"Invalid element: {exc.errors()[0]['msg']}") from exc
        return self.add_element(timeline_id, element)

    def update_element(self, timeline_id: str, element_id: str, **changes: Any) -> Element:
        timeline = self.require_timeline(timeline_id)
        element = self._require_element(timeline, element_id)

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise InvalidParameterError(f"Fields not editable: {sorted(unknown)}")
        if element.locked and set(changes) - LOCK_EXEMPT_FIELDS:
            self._ensure_editable(element)
        if "parent_id" in changes:
            self._check_parent(timeline, element_id, changes["parent_id"])

        updated = _validated(Element, {**element.model_dump(), **changes})
        timeline.elements[element_id] = updated
        logger.debug("Updated element %s fields %s", element_id, sorted(changes))
        return updated

    def remove_element(self, timeline_id: str, element_id: str) -> Element:
        """Remove an element and its tracks; children lose their parent link."""
        timeline = self.require_timeline(timeline_id)
        element = self._require_element(timeline, element_id)
        del timeline.elements[element_id]
        for other in timeline.elements.values():
            if other.parent_id == element_id:
                other.parent_id = None
        logger.debug("Removed element %s from timeline %s", element_id, timeline_id)
        return element

    # Keyframes

    def add_keyframe(
        self,
        timeline_id: str,
        element_id: str,
        path: Union[PropertyPath, str],
        time: float,
        value: Any,
        easing: Union[EasingKind, str] = EasingKind.LINEAR,
        bezier_points: Optional[Sequence[float]] = None,
    ) -> Keyframe:
        """Add a keyframe at element-relative ``time``."""
        timeline = self.require_timeline(timeline_id)
        element = self._require_element(timeline, element_id)
        self._ensure_editable(element)
        path = parse_property_path(path)

        track = element.properties.get(path)
        if track is None:
            track = new_track(path)
            keyframe = add_keyframe(track, time, value, easing, bezier_points)
            element.properties[path] = track
        else:
            keyframe = add_keyframe(track, time, value, easing, bezier_points)
        logger.debug("Keyframe %s@%s on element %s", path.value, keyframe.time, element_id)
        return keyframe

    def remove_keyframe(
        self, timeline_id: str, element_id: str, path: Union[PropertyPath, str], index: int
    ) -> Keyframe:
        timeline = self.require_timeline(timeline_id)
        element = self._require_element(timeline, element_id)
        self._ensure_editable(element)
        path = parse_property_path(path)

        track = element.properties.get(path)
        if track is None:
            raise IndexOutOfRangeError(
                f"keyframe index {index!r} out of range for track {path.value!r}",
                details={"index": index, "count": 0},
            )
        removed = remove_keyframe(track, index)
        logger.debug("Removed keyframe %d from %s on element %s", index, path.value, element_id)
        return removed

    def apply_preset(self, timeline_id: str, element_id: str, category: str, name: str) -> Element:
        timeline = self.require_timeline(timeline_id)
        element = self._require_element(timeline, element_id)
        self._ensure_editable(element)
        changed = apply_preset(element, category, name, library=self.presets)
        logger.debug("Applied preset %s/%s to %s (%s)", category, name, element_id, [p.value for p in changed])
        return element

    # Motion paths

    def add_motion_path(self, timeline_id: str, path: MotionPath) -> MotionPath:
        timeline = self.require_timeline(timeline_id)
        if path.id in timeline.motion_paths:
            raise InvalidParameterError(f"Motion path with ID {path.id} already exists")
        timeline.motion_paths[path.id] = path
        logger.debug("Added motion path %s to timeline %s", path.id, timeline_id)
        return path

    def remove_motion_path(self, timeline_id: str, path_id: str) -> None:
        """Remove a path and unbind the elements that follow it. Unknown ids are a no-op."""
        timeline = self.require_timeline(timeline_id)
        if timeline.motion_paths.pop(path_id, None) is None:
            return
        unbound = []
        for element in timeline.elements.values():
            if element.motion_path_id == path_id:
                element.motion_path_id = None
                unbound.append(element.id)
        logger.debug("Removed motion path %s from timeline %s (unbound %s)", path_id, timeline_id, unbound)

    # Evaluation

    def evaluate(self, timeline_id: str, time: Optional[float] = None, hold: bool = False) -> List[ElementFrame]:
        timeline = self.require_timeline(timeline_id)
        return evaluate_frame(timeline, timeline.current_time if time is None else time, hold=hold)


_timeline_service: Optional[TimelineService] = None


def get_timeline_service() -> TimelineService:
    global _timeline_service
    if _timeline_service is None:
        _timeline_service = TimelineService()
    return _timeline_service


def set_timeline_service(service: TimelineService) -> None:
    global _timeline_service
    _timeline_service = service

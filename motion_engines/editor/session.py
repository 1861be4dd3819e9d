"""Editor session.

Stateful adapter between an editing surface and the motion timeline. The
session owns selection, the active tool and the edit lock; the timeline
core knows nothing about any of them.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator, List, Optional, Sequence, Union

from motion_engines.common.errors import InvalidParameterError
from motion_engines.keyframes.models import Keyframe
from motion_engines.motion_graphics.models import Element, ElementFrame, ElementType, PropertyPath, Timeline
from motion_engines.motion_graphics.service import (
    TimelineService,
    evaluate_frame,
    get_timeline_service,
    parse_property_path,
)


class EditorTool(str, Enum):
    SELECT = "select"
    MOVE = "move"
    ROTATE = "rotate"
    SCALE = "scale"
    BEZIER = "bezier"
    TYPE = "type"
    SHAPE = "shape"


class EditorSession:
    """Single-writer editing session over one timeline."""

    def __init__(self, timeline_id: str, service: Optional[TimelineService] = None) -> None:
        self.service = service or get_timeline_service()
        self.service.require_timeline(timeline_id)
        self.timeline_id = timeline_id
        self.selected_element_id: Optional[str] = None
        self.selected_property: Optional[PropertyPath] = None
        self.tool = EditorTool.SELECT
        self._lock = threading.RLock()

    @contextmanager
    def edit(self) -> Iterator[Timeline]:
        """Hold the edit lock for a batch of changes."""
        with self._lock:
            yield self.service.require_timeline(self.timeline_id)

    # Selection and tools

    def select_element(self, element_id: Optional[str]) -> Optional[Element]:
        with self._lock:
            if element_id is None:
                self.selected_element_id = None
                self.selected_property = None
                return None
            element = self.service.get_element(self.timeline_id, element_id)
            if element_id != self.selected_element_id:
                self.selected_property = None
            self.selected_element_id = element_id
            return element

    def select_property(self, path: Union[PropertyPath, str, None]) -> None:
        with self._lock:
            self.selected_property = None if path is None else parse_property_path(path)

    def set_tool(self, tool: Union[EditorTool, str]) -> EditorTool:
        with self._lock:
            try:
                self.tool = EditorTool(tool)
            except ValueError:
                raise InvalidParameterError(f"Unknown tool {tool!r}") from None
            return self.tool

    def _selected(self) -> str:
        if self.selected_element_id is None:
            raise InvalidParameterError("No element selected")
        return self.selected_element_id

    def _selected_path(self, path: Union[PropertyPath, str, None]) -> PropertyPath:
        if path is not None:
            return parse_property_path(path)
        if self.selected_property is None:
            raise InvalidParameterError("No property selected")
        return self.selected_property

    # Edits

    def create_element(self, element_type: Union[ElementType, str], **fields: Any) -> Element:
        with self._lock:
            element = self.service.create_element(self.timeline_id, element_type, **fields)
            self.selected_element_id = element.id
            self.selected_property = None
            return element

    def update_selected(self, **changes: Any) -> Element:
        with self._lock:
            return self.service.update_element(self.timeline_id, self._selected(), **changes)

    def remove_selected(self) -> Element:
        with self._lock:
            removed = self.service.remove_element(self.timeline_id, self._selected())
            self.selected_element_id = None
            self.selected_property = None
            return removed

    def add_keyframe(
        self,
        value: Any,
        time: Optional[float] = None,
        path: Union[PropertyPath, str, None] = None,
        easing: str = "ease-in-out",
        bezier_points: Optional[Sequence[float]] = None,
    ) -> Keyframe:
        """
        Keyframe on the selected element and property.
        Defaults to the playhead position, relative to the element start.
        """
        with self._lock:
            element_id = self._selected()
            target = self._selected_path(path)
            if time is None:
                timeline = self.service.require_timeline(self.timeline_id)
                element = self.service.get_element(self.timeline_id, element_id)
                time = max(timeline.current_time - element.start_time, 0.0)
            return self.service.add_keyframe(
                self.timeline_id, element_id, target, time, value, easing, bezier_points
            )

    def remove_keyframe(self, index: int, path: Union[PropertyPath, str, None] = None) -> Keyframe:
        with self._lock:
            return self.service.remove_keyframe(
                self.timeline_id, self._selected(), self._selected_path(path), index
            )

    def apply_preset(self, category: str, name: str) -> Element:
        with self._lock:
            return self.service.apply_preset(self.timeline_id, self._selected(), category, name)

    # Playback

    def seek(self, time: float) -> float:
        with self._lock:
            return self.service.seek(self.timeline_id, time)

    def evaluate(self, time: Optional[float] = None, hold: bool = False) -> List[ElementFrame]:
        """Evaluate a snapshot so rendering never blocks further edits."""
        with self._lock:
            snapshot = self.service.snapshot(self.timeline_id)
        return evaluate_frame(snapshot, snapshot.current_time if time is None else time, hold=hold)

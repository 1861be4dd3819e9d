"""
Motion Graphics Models.

Elements (layers), motion paths and the timeline that owns them.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

from motion_engines.config import runtime_config
from motion_engines.keyframes.models import KeyframeTrack, TypedValue, ValueType


class ElementType(str, Enum):
    TEXT = "text"
    SHAPE = "shape"
    IMAGE = "image"
    VIDEO = "video"
    PARTICLE = "particle"
    PATH = "path"
    GROUP = "group"


class PropertyPath(str, Enum):
    """Closed set of animatable properties."""
    POSITION = "transform.position"
    ROTATION = "transform.rotation"  # degrees
    SCALE = "transform.scale"
    ANCHOR = "transform.anchor"
    OPACITY = "transform.opacity"  # 0..1
    PATH_PROGRESS = "transform.path_progress"  # 0..1 along the bound motion path
    FILL = "style.fill"
    STROKE = "style.stroke"
    STROKE_WIDTH = "style.stroke_width"
    CONTENT = "text.content"
    FONT_SIZE = "text.font_size"
    FONT_FAMILY = "text.font_family"
    FONT_WEIGHT = "text.font_weight"
    TEXT_COLOR = "text.color"
    LETTER_SPACING = "text.letter_spacing"
    LINE_HEIGHT = "text.line_height"
    BLUR = "effects.blur"
    BRIGHTNESS = "effects.brightness"
    CONTRAST = "effects.contrast"
    SATURATION = "effects.saturation"
    ENABLED = "visibility.enabled"


class PropertySpec(NamedTuple):
    value_type: ValueType
    default: TypedValue
    label: str


PROPERTY_SPECS: Dict[PropertyPath, PropertySpec] = {
    PropertyPath.POSITION: PropertySpec(ValueType.VECTOR2, (0.0, 0.0), "Position"),
    PropertyPath.ROTATION: PropertySpec(ValueType.NUMBER, 0.0, "Rotation"),
    PropertyPath.SCALE: PropertySpec(ValueType.VECTOR2, (1.0, 1.0), "Scale"),
    PropertyPath.ANCHOR: PropertySpec(ValueType.VECTOR2, (0.5, 0.5), "Anchor Point"),
    PropertyPath.OPACITY: PropertySpec(ValueType.NUMBER, 1.0, "Opacity"),
    PropertyPath.PATH_PROGRESS: PropertySpec(ValueType.NUMBER, 0.0, "Path Progress"),
    PropertyPath.FILL: PropertySpec(ValueType.COLOR, (1.0, 1.0, 1.0, 1.0), "Fill"),
    PropertyPath.STROKE: PropertySpec(ValueType.COLOR, (0.0, 0.0, 0.0, 1.0), "Stroke"),
    PropertyPath.STROKE_WIDTH: PropertySpec(ValueType.NUMBER, 0.0, "Stroke Width"),
    PropertyPath.CONTENT: PropertySpec(ValueType.TEXT, "", "Content"),
    PropertyPath.FONT_SIZE: PropertySpec(ValueType.NUMBER, 48.0, "Font Size"),
    PropertyPath.FONT_FAMILY: PropertySpec(ValueType.TEXT, "Inter", "Font Family"),
    PropertyPath.FONT_WEIGHT: PropertySpec(ValueType.NUMBER, 400.0, "Font Weight"),
    PropertyPath.TEXT_COLOR: PropertySpec(ValueType.COLOR, (1.0, 1.0, 1.0, 1.0), "Color"),
    PropertyPath.LETTER_SPACING: PropertySpec(ValueType.NUMBER, 0.0, "Letter Spacing"),
    PropertyPath.LINE_HEIGHT: PropertySpec(ValueType.NUMBER, 1.2, "Line Height"),
    PropertyPath.BLUR: PropertySpec(ValueType.NUMBER, 0.0, "Blur"),
    PropertyPath.BRIGHTNESS: PropertySpec(ValueType.NUMBER, 1.0, "Brightness"),
    PropertyPath.CONTRAST: PropertySpec(ValueType.NUMBER, 1.0, "Contrast"),
    PropertyPath.SATURATION: PropertySpec(ValueType.NUMBER, 1.0, "Saturation"),
    PropertyPath.ENABLED: PropertySpec(ValueType.BOOLEAN, True, "Enabled"),
}

TRANSFORM_PATHS = (
    PropertyPath.POSITION,
    PropertyPath.ROTATION,
    PropertyPath.SCALE,
    PropertyPath.ANCHOR,
    PropertyPath.OPACITY,
)
STYLE_PATHS = (PropertyPath.FILL, PropertyPath.STROKE, PropertyPath.STROKE_WIDTH)
TEXT_PATHS = (
    PropertyPath.CONTENT,
    PropertyPath.FONT_SIZE,
    PropertyPath.FONT_FAMILY,
    PropertyPath.FONT_WEIGHT,
    PropertyPath.TEXT_COLOR,
    PropertyPath.LETTER_SPACING,
    PropertyPath.LINE_HEIGHT,
)


class Element(BaseModel):
    """
    A time-bounded, z-ordered animatable entity.
    Active over [start_time, start_time + duration).
    """
    id: str = Field(default_factory=lambda: f"element-{uuid.uuid4().hex[:12]}")
    name: str
    type: ElementType
    visible: bool = True
    locked: bool = False
    layer: int = 0
    start_time: float = Field(default=0.0, ge=0.0)
    duration: float = Field(default=10.0, ge=0.0)

    # Non-owning references, resolved by id at evaluation time
    parent_id: Optional[str] = None
    motion_path_id: Optional[str] = None

    properties: Dict[PropertyPath, KeyframeTrack] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_tracks(self):
        for path, track in self.properties.items():
            spec = PROPERTY_SPECS[path]
            if track.value_type != spec.value_type:
                raise ValueError(
                    f"track {path.value} must hold {spec.value_type.value} values, got {track.value_type.value}"
                )
            if track.property_name != path.value:
                track.property_name = path.value
        if self.parent_id == self.id:
            raise ValueError("element cannot be its own parent")
        return self

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration


class Point2(BaseModel):
    x: float
    y: float


class PathPoint(BaseModel):
    """Anchor point with optional Bezier handles, relative to the anchor."""
    x: float
    y: float
    handle_in: Optional[Point2] = None
    handle_out: Optional[Point2] = None


class MotionPath(BaseModel):
    """Path in normalized units (0..1 of the timeline resolution)."""
    id: str = Field(default_factory=lambda: f"path-{uuid.uuid4().hex[:12]}")
    name: str = "Path"
    points: List[PathPoint] = Field(default_factory=list)
    closed: bool = False
    visible: bool = True


class Resolution(BaseModel):
    width: int = Field(gt=0)
    height: int = Field(gt=0)


def _default_resolution() -> Resolution:
    width, height = runtime_config.get_default_resolution()
    return Resolution(width=width, height=height)


class Timeline(BaseModel):
    """
    Owns every element (insertion ordered) plus global time settings.
    """
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str = "Untitled"
    duration: float = Field(default_factory=runtime_config.get_default_duration, ge=0.0)
    fps: float = Field(default_factory=runtime_config.get_default_fps, gt=0.0)
    resolution: Resolution = Field(default_factory=_default_resolution)
    current_time: float = Field(default=0.0, ge=0.0)

    elements: Dict[str, Element] = Field(default_factory=dict)
    motion_paths: Dict[str, MotionPath] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_keys(self):
        for key, element in self.elements.items():
            if key != element.id:
                raise ValueError(f"element key {key} does not match element id {element.id}")
        for key, path in self.motion_paths.items():
            if key != path.id:
                raise ValueError(f"motion path key {key} does not match path id {path.id}")
        return self


class WorldTransform(BaseModel):
    """Transform composed through the parent chain."""
    position: Tuple[float, float] = (0.0, 0.0)
    rotation: float = 0.0
    scale: Tuple[float, float] = (1.0, 1.0)
    opacity: float = 1.0


class ElementFrame(BaseModel):
    """Evaluated state of one element at one time, handed to the renderer."""
    element_id: str
    name: str
    type: ElementType
    layer: int
    properties: Dict[str, Any] = Field(default_factory=dict)
    world: WorldTransform = Field(default_factory=WorldTransform)

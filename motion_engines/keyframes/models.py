"""Keyframe track models.

A track holds the timed values of one animatable property. Values are
stored in the canonical form of the track's value type:

* number  -> float
* vector2 -> (x, y)
* vector3 -> (x, y, z)
* color   -> (r, g, b, a), straight (non premultiplied) sRGB components in [0, 1]
* boolean -> bool
* text    -> str
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from motion_engines.common.errors import InvalidParameterError
from motion_engines.easing.models import EasingKind

TypedValue = Union[float, Tuple[float, ...], bool, str]


class ValueType(str, Enum):
    NUMBER = "number"
    VECTOR2 = "vector2"
    VECTOR3 = "vector3"
    COLOR = "color"
    BOOLEAN = "boolean"
    TEXT = "text"


VECTOR_SIZES = {ValueType.VECTOR2: 2, ValueType.VECTOR3: 3, ValueType.COLOR: 4}
STEP_TYPES = frozenset({ValueType.BOOLEAN, ValueType.TEXT})

_TYPE_DEFAULTS = {
    ValueType.NUMBER: 0.0,
    ValueType.VECTOR2: (0.0, 0.0),
    ValueType.VECTOR3: (0.0, 0.0, 0.0),
    ValueType.COLOR: (0.0, 0.0, 0.0, 1.0),
    ValueType.BOOLEAN: False,
    ValueType.TEXT: "",
}


def _as_float(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidParameterError(f"{what} must be a number, got {value!r}")
    result = float(value)
    if not math.isfinite(result):
        raise InvalidParameterError(f"{what} must be finite, got {value!r}")
    return result


def parse_hex_color(raw: str) -> Tuple[float, float, float, float]:
    """Parse ``#RGB``, ``#RRGGBB`` or ``#RRGGBBAA`` into RGBA floats."""
    text = raw.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) == 6:
        text += "ff"
    if len(text) != 8:
        raise InvalidParameterError(f"invalid hex color {raw!r}")
    try:
        channels = [int(text[i:i + 2], 16) for i in range(0, 8, 2)]
    except ValueError:
        raise InvalidParameterError(f"invalid hex color {raw!r}") from None
    r, g, b, a = (channel / 255.0 for channel in channels)
    return r, g, b, a


def _coerce_components(value: Any, size: int, value_type: ValueType) -> Tuple[float, ...]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise InvalidParameterError(f"{value_type.value} value must be a sequence, got {value!r}")
    if len(value) != size:
        raise InvalidParameterError(
            f"{value_type.value} value must have {size} components, got {len(value)}"
        )
    return tuple(_as_float(component, f"{value_type.value} component") for component in value)


def coerce_value(value_type: ValueType, value: Any) -> TypedValue:
    """Normalise ``value`` to the canonical form for ``value_type``."""
    value_type = ValueType(value_type)

    if value_type == ValueType.NUMBER:
        return _as_float(value, "number value")

    if value_type in (ValueType.VECTOR2, ValueType.VECTOR3):
        return _coerce_components(value, VECTOR_SIZES[value_type], value_type)

    if value_type == ValueType.COLOR:
        if isinstance(value, str):
            return parse_hex_color(value)
        if isinstance(value, Sequence) and not isinstance(value, bytes) and len(value) == 3:
            value = tuple(value) + (1.0,)
        components = _coerce_components(value, 4, value_type)
        if any(c < 0.0 or c > 1.0 for c in components):
            raise InvalidParameterError(f"color components must be within [0, 1], got {value!r}")
        return components

    if value_type == ValueType.BOOLEAN:
        if not isinstance(value, bool):
            raise InvalidParameterError(f"boolean value must be true or false, got {value!r}")
        return value

    if not isinstance(value, str):
        raise InvalidParameterError(f"text value must be a string, got {value!r}")
    return value


def default_for(value_type: ValueType) -> TypedValue:
    return _TYPE_DEFAULTS[ValueType(value_type)]


class Keyframe(BaseModel):
    """A timestamped target value. Times are relative to the owning element's start."""
    model_config = ConfigDict(frozen=True)

    time: float = Field(ge=0.0)
    value: Any
    easing: str = EasingKind.LINEAR.value
    bezier_points: Optional[Tuple[float, float, float, float]] = None

    @field_validator("easing", mode="before")
    @classmethod
    def _easing_value(cls, v: Any) -> Any:
        return v.value if isinstance(v, Enum) else v


class KeyframeTrack(BaseModel):
    """
    Ordered keyframes for a single animatable property.
    Keyframes stay sorted ascending by time; ties keep insertion order.
    """
    property_name: str
    value_type: ValueType
    keyframes: List[Keyframe] = Field(default_factory=list)
    default_value: Any = None

    @model_validator(mode="after")
    def _normalise(self):
        if self.default_value is None:
            self.default_value = default_for(self.value_type)
        else:
            self.default_value = coerce_value(self.value_type, self.default_value)
        frames = [
            kf.model_copy(update={"value": coerce_value(self.value_type, kf.value)})
            for kf in self.keyframes
        ]
        self.keyframes = sorted(frames, key=lambda kf: kf.time)
        return self

    @property
    def times(self) -> List[float]:
        return [kf.time for kf in self.keyframes]

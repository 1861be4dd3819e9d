"""Animation preset catalog."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from motion_engines.common.errors import InvalidParameterError, PresetNotFoundError
from motion_engines.motion_graphics.models import PropertyPath

# Short property names used by preset definitions
PRESET_PROPERTY_ALIASES: Dict[str, PropertyPath] = {
    "position": PropertyPath.POSITION,
    "rotation": PropertyPath.ROTATION,
    "scale": PropertyPath.SCALE,
    "anchor": PropertyPath.ANCHOR,
    "opacity": PropertyPath.OPACITY,
}


class PresetKeyframe(BaseModel):
    time: float = Field(ge=0.0)  # seconds from the element start
    value: Any
    easing: str = "linear"
    bezier_points: Optional[List[float]] = None


class AnimationPreset(BaseModel):
    name: str
    description: str = ""
    properties: Dict[str, List[PresetKeyframe]] = Field(default_factory=dict)


class PresetLibrary(BaseModel):
    """Presets grouped by category (entrance, exit, motion, text...)."""
    categories: Dict[str, List[AnimationPreset]] = Field(default_factory=dict)

    def find(self, category: str, name: str) -> AnimationPreset:
        for preset in self.categories.get(category, []):
            if preset.name == name:
                return preset
        raise PresetNotFoundError(
            f"Preset {category}/{name} not found",
            details={"category": category, "name": name},
        )


def resolve_property(name: Union[str, PropertyPath]) -> PropertyPath:
    if isinstance(name, PropertyPath):
        return name
    if name in PRESET_PROPERTY_ALIASES:
        return PRESET_PROPERTY_ALIASES[name]
    try:
        return PropertyPath(name)
    except ValueError:
        raise InvalidParameterError(f"Unknown property {name!r}") from None


def _kf(time: float, value: Any, easing: str) -> PresetKeyframe:
    return PresetKeyframe(time=time, value=value, easing=easing)


def _preset(name: str, description: str, **properties: List[PresetKeyframe]) -> AnimationPreset:
    return AnimationPreset(name=name, description=description, properties=properties)


def _entrance_presets() -> List[AnimationPreset]:
    return [
        _preset("Fade In", "Opacity 0 to 1", opacity=[_kf(0, 0, "ease-out"), _kf(1, 1, "ease-out")]),
        _preset(
            "Scale In",
            "Grow from nothing while fading in",
            scale=[_kf(0, [0, 0], "ease-out"), _kf(1, [1, 1], "ease-out")],
            opacity=[_kf(0, 0, "ease-out"), _kf(0.5, 1, "ease-out")],
        ),
        _preset(
            "Slide In Left",
            "Slide in from the left edge",
            position=[_kf(0, [-200, 0], "ease-out"), _kf(1.5, [0, 0], "ease-out")],
        ),
        _preset(
            "Bounce In",
            "Overshoot then settle",
            scale=[_kf(0, [0, 0], "ease-out"), _kf(0.5, [1.2, 1.2], "ease-out"), _kf(1, [1, 1], "ease-out")],
        ),
    ]


def _exit_presets() -> List[AnimationPreset]:
    return [
        _preset("Fade Out", "Opacity 1 to 0", opacity=[_kf(0, 1, "ease-in"), _kf(1, 0, "ease-in")]),
        _preset("Scale Out", "Shrink to nothing", scale=[_kf(0, [1, 1], "ease-in"), _kf(1, [0, 0], "ease-in")]),
        _preset(
            "Slide Out Right",
            "Slide out to the right",
            position=[_kf(0, [0, 0], "ease-in"), _kf(1.5, [200, 0], "ease-in")],
        ),
    ]


def _motion_presets() -> List[AnimationPreset]:
    return [
        _preset("Rotate 360", "One full turn", rotation=[_kf(0, 0, "linear"), _kf(2, 360, "linear")]),
        _preset(
            "Pulse",
            "Gentle scale pulse",
            scale=[_kf(0, [1, 1], "ease-in-out"), _kf(0.5, [1.1, 1.1], "ease-in-out"), _kf(1, [1, 1], "ease-in-out")],
        ),
        _preset(
            "Wiggle",
            "Rotate back and forth",
            rotation=[
                _kf(0, 0, "ease-in-out"),
                _kf(0.25, -5, "ease-in-out"),
                _kf(0.5, 5, "ease-in-out"),
                _kf(0.75, -5, "ease-in-out"),
                _kf(1, 0, "ease-in-out"),
            ],
        ),
    ]


def _text_presets() -> List[AnimationPreset]:
    return [
        _preset("Typewriter", "Slow linear reveal", opacity=[_kf(0, 0, "linear"), _kf(2, 1, "linear")]),
        _preset("Letter by Letter", "Quick eased reveal", opacity=[_kf(0, 0, "ease-out"), _kf(1, 1, "ease-out")]),
    ]


def built_in_library() -> PresetLibrary:
    return PresetLibrary(
        categories={
            "entrance": _entrance_presets(),
            "exit": _exit_presets(),
            "motion": _motion_presets(),
            "text": _text_presets(),
        }
    )


_default_library: Optional[PresetLibrary] = None


def get_preset_library() -> PresetLibrary:
    global _default_library
    if _default_library is None:
        _default_library = built_in_library()
    return _default_library


def set_preset_library(library: PresetLibrary) -> None:
    global _default_library
    _default_library = library


def list_presets(library: Optional[PresetLibrary] = None) -> Dict[str, List[str]]:
    lib = library or get_preset_library()
    return {category: [p.name for p in presets] for category, presets in lib.categories.items()}

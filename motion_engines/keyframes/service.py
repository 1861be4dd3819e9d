"""Keyframe track editing and evaluation."""
from __future__ import annotations

import math
from bisect import bisect_right
from typing import Any, Iterable, List, Optional, Sequence, Union

from motion_engines.common.errors import IndexOutOfRangeError, InvalidParameterError
from motion_engines.easing.models import EasingKind
from motion_engines.easing.service import ease, validate_bezier_points, validate_easing
from motion_engines.keyframes.models import (
    STEP_TYPES,
    Keyframe,
    KeyframeTrack,
    TypedValue,
    ValueType,
    coerce_value,
)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def _check_time(time: Any) -> float:
    if isinstance(time, bool) or not isinstance(time, (int, float)) or not math.isfinite(time):
        raise InvalidParameterError(f"keyframe time must be a finite number, got {time!r}")
    if time < 0:
        raise InvalidParameterError(f"keyframe time must be >= 0, got {time}")
    return float(time)


def make_track(
    property_name: str,
    value_type: ValueType,
    default_value: Any = None,
    keyframes: Iterable[Union[Keyframe, dict]] = (),
) -> KeyframeTrack:
    return KeyframeTrack(
        property_name=property_name,
        value_type=value_type,
        default_value=default_value,
        keyframes=list(keyframes),
    )


def build_keyframe(
    value_type: ValueType,
    time: float,
    value: Any,
    easing: Union[EasingKind, str] = EasingKind.LINEAR,
    bezier_points: Optional[Sequence[float]] = None,
    lenient: Optional[bool] = None,
) -> Keyframe:
    """Validate every field of a keyframe before it touches a track."""
    checked_time = _check_time(time)
    easing_value = validate_easing(easing, bezier_points, lenient)
    points = None
    if bezier_points is not None:
        points = validate_bezier_points(bezier_points)
    return Keyframe(
        time=checked_time,
        value=coerce_value(value_type, value),
        easing=easing_value,
        bezier_points=points,
    )


def add_keyframe(
    track: KeyframeTrack,
    time: float,
    value: Any,
    easing: Union[EasingKind, str] = EasingKind.LINEAR,
    bezier_points: Optional[Sequence[float]] = None,
    lenient: Optional[bool] = None,
) -> Keyframe:
    """
    Insert a keyframe, keeping the track sorted.
    An existing keyframe at exactly ``time`` is replaced (last write wins).
    """
    keyframe = build_keyframe(track.value_type, time, value, easing, bezier_points, lenient)

    frames = track.keyframes
    matches = [i for i, kf in enumerate(frames) if kf.time == keyframe.time]
    if matches:
        first = matches[0]
        frames[:] = [kf for i, kf in enumerate(frames) if i not in matches]
        frames.insert(first, keyframe)
        return keyframe

    frames.insert(bisect_right(track.times, keyframe.time), keyframe)
    return keyframe


def remove_keyframe(track: KeyframeTrack, index: int) -> Keyframe:
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(track.keyframes):
        raise IndexOutOfRangeError(
            f"keyframe index {index!r} out of range for track {track.property_name!r}",
            details={"index": index, "count": len(track.keyframes)},
        )
    return track.keyframes.pop(index)


def replace_keyframes(
    track: KeyframeTrack,
    frames: Iterable[Union[Keyframe, dict]],
    offset: float = 0.0,
    lenient: Optional[bool] = None,
) -> List[Keyframe]:
    """Swap all keyframes of ``track`` for ``frames`` shifted by ``offset``."""
    built: List[Keyframe] = []
    for frame in frames:
        data = frame.model_dump() if isinstance(frame, Keyframe) else dict(frame)
        built.append(
            build_keyframe(
                track.value_type,
                data["time"] + offset,
                data["value"],
                data.get("easing", EasingKind.LINEAR),
                data.get("bezier_points"),
                lenient,
            )
        )
    # Later duplicates win, as with add_keyframe
    by_time = {}
    for kf in built:
        by_time[kf.time] = kf
    track.keyframes = sorted(by_time.values(), key=lambda kf: kf.time)
    return track.keyframes


def shift_keyframes(track: KeyframeTrack, offset: float) -> None:
    shifted = [kf.time + offset for kf in track.keyframes]
    if any(t < 0 for t in shifted):
        raise InvalidParameterError(f"shifting by {offset} moves keyframes before 0")
    track.keyframes = [kf.model_copy(update={"time": t}) for kf, t in zip(track.keyframes, shifted)]


def interpolate_values(
    value_type: ValueType,
    start: TypedValue,
    end: TypedValue,
    progress: float,
    eased: float,
) -> TypedValue:
    if value_type in STEP_TYPES:
        # Not numerically interpolable: switch half way through the segment
        return end if progress >= 0.5 else start
    if value_type == ValueType.NUMBER:
        return _lerp(start, end, eased)
    values = tuple(_lerp(a, b, eased) for a, b in zip(start, end))
    if value_type == ValueType.COLOR:
        return tuple(max(0.0, min(1.0, c)) for c in values)
    return values


def evaluate_track(track: KeyframeTrack, time: float, lenient: Optional[bool] = None) -> TypedValue:
    """Value of the track at ``time`` (element-relative seconds)."""
    frames = track.keyframes
    if not frames:
        return track.default_value
    if len(frames) == 1:
        return frames[0].value

    first, last = frames[0], frames[-1]
    if time <= first.time:
        return first.value
    if time >= last.time:
        return last.value

    index = bisect_right(track.times, time)
    before, after = frames[index - 1], frames[index]
    span = after.time - before.time
    if span <= 0:
        return after.value

    progress = (time - before.time) / span
    eased = ease(after.easing, progress, after.bezier_points, lenient)
    return interpolate_values(track.value_type, before.value, after.value, progress, eased)

import pytest

from motion_engines.keyframes.models import ValueType
from motion_engines.keyframes.service import add_keyframe
from motion_engines.motion_graphics.elements import (
    create_default_element,
    evaluate_element,
    is_active,
    local_time,
    new_track,
    property_value,
)
from motion_engines.motion_graphics.models import (
    Element,
    ElementType,
    PropertyPath,
    Resolution,
)


def _element(start=5.0, duration=10.0):
    element = create_default_element(ElementType.SHAPE, start_time=start, duration=duration)
    track = element.properties[PropertyPath.OPACITY]
    add_keyframe(track, 0, 0.0)
    add_keyframe(track, 2, 1.0)
    return element


def test_active_interval_is_half_open():
    element = _element()
    assert not is_active(element, 3)
    assert is_active(element, 5)
    assert is_active(element, 14.999)
    assert not is_active(element, 15)
    assert not is_active(element, 16)


def test_inactive_element_evaluates_empty():
    element = _element()
    assert evaluate_element(element, 3) == {}
    assert evaluate_element(element, 16) == {}
    assert evaluate_element(element, 5) != {}
    assert evaluate_element(element, 14.999) != {}


def test_keyframe_times_are_element_relative():
    element = _element()
    values = evaluate_element(element, 6)
    assert values[PropertyPath.OPACITY] == pytest.approx(0.5)


def test_hold_mode_keeps_last_values_after_end():
    element = _element()
    assert local_time(element, 16, hold=True) == 10
    assert local_time(element, 15, hold=True) == 10
    assert evaluate_element(element, 16, hold=True)[PropertyPath.OPACITY] == 1.0


def test_hold_mode_does_not_show_element_before_start():
    element = _element()
    assert local_time(element, 3, hold=True) is None
    assert evaluate_element(element, 3, hold=True) == {}
    assert evaluate_element(element, 5, hold=True)[PropertyPath.OPACITY] == 0.0


def test_default_element_tracks():
    element = create_default_element(ElementType.TEXT, resolution=Resolution(width=1280, height=720))
    assert element.name == "Text"
    assert element.duration == 10.0
    assert PropertyPath.CONTENT in element.properties
    assert PropertyPath.FILL not in element.properties
    values = evaluate_element(element, 0)
    assert values[PropertyPath.POSITION] == (640.0, 360.0)
    assert values[PropertyPath.SCALE] == (1.0, 1.0)
    assert values[PropertyPath.OPACITY] == 1.0
    assert all(len(track.keyframes) == 1 for track in element.properties.values())


def test_shape_element_has_style_tracks():
    element = create_default_element(ElementType.SHAPE)
    assert PropertyPath.FILL in element.properties
    assert PropertyPath.CONTENT not in element.properties


def test_property_value_falls_back_to_default():
    assert property_value({}, PropertyPath.SCALE) == (1.0, 1.0)
    assert property_value({PropertyPath.SCALE: (2.0, 2.0)}, PropertyPath.SCALE) == (2.0, 2.0)


def test_element_rejects_mismatched_track_type():
    track = new_track(PropertyPath.OPACITY)
    with pytest.raises(ValueError):
        Element(name="bad", type=ElementType.SHAPE, properties={PropertyPath.POSITION: track})


def test_element_rejects_self_parent():
    with pytest.raises(ValueError):
        Element(id="a", name="a", type=ElementType.GROUP, parent_id="a")


def test_element_normalises_track_names():
    track = new_track(PropertyPath.ROTATION)
    track.property_name = "whatever"
    element = Element(name="e", type=ElementType.SHAPE, properties={"transform.rotation": track})
    assert element.properties[PropertyPath.ROTATION].property_name == "transform.rotation"
    assert element.properties[PropertyPath.ROTATION].value_type == ValueType.NUMBER

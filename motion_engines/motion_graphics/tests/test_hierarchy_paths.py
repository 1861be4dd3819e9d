import pytest

from motion_engines.common.errors import CyclicHierarchyError
from motion_engines.keyframes.service import add_keyframe
from motion_engines.motion_graphics.elements import create_default_element, evaluate_element, new_track
from motion_engines.motion_graphics.hierarchy import (
    compose_world_transform,
    resolve_parent_chain,
    would_create_cycle,
)
from motion_engines.motion_graphics.models import (
    ElementType,
    MotionPath,
    PathPoint,
    Point2,
    PropertyPath,
    Resolution,
)
from motion_engines.motion_graphics.paths import point_at, to_pixels


def _el(element_id, parent_id=None, **values):
    element = create_default_element(ElementType.GROUP, element_id=element_id)
    element.parent_id = parent_id
    for name, value in values.items():
        path = PropertyPath("transform." + name)
        track = element.properties.setdefault(path, new_track(path))
        add_keyframe(track, 0, value)
    return element


def _world(element, elements, time=0.0, **kwargs):
    values = evaluate_element(element, time)
    return compose_world_transform(
        element, values, time, elements, {}, Resolution(width=100, height=100), **kwargs
    )


def test_parent_chain_nearest_first():
    elements = {e.id: e for e in (_el("a", "b"), _el("b", "c"), _el("c"))}
    assert [e.id for e in resolve_parent_chain(elements["a"], elements)] == ["b", "c"]


def test_dangling_parent_ends_chain():
    elements = {"a": _el("a", "gone")}
    assert resolve_parent_chain(elements["a"], elements) == []


def test_cycle_detected_at_evaluation():
    elements = {e.id: e for e in (_el("a", "b"), _el("b", "a"))}
    with pytest.raises(CyclicHierarchyError):
        resolve_parent_chain(elements["a"], elements)


def test_depth_limit():
    elements = {e.id: e for e in (_el("a", "b"), _el("b", "c"), _el("c", "d"), _el("d"))}
    with pytest.raises(CyclicHierarchyError):
        resolve_parent_chain(elements["a"], elements, max_depth=2)
    assert len(resolve_parent_chain(elements["a"], elements, max_depth=3)) == 3


def test_would_create_cycle():
    elements = {e.id: e for e in (_el("a", "b"), _el("b"), _el("c"))}
    assert would_create_cycle("b", "a", elements)
    assert would_create_cycle("a", "a", elements)
    assert not would_create_cycle("c", "a", elements)


def test_world_transform_composition():
    parent = _el("p", position=(100, 0), rotation=90, scale=(2, 2), opacity=0.5)
    child = _el("c", "p", position=(10, 0), rotation=15, scale=(0.5, 3), opacity=0.5)
    world = _world(child, {"p": parent, "c": child})
    assert world.position == pytest.approx((100, 20))
    assert world.rotation == pytest.approx(105)
    assert world.scale == pytest.approx((1, 6))
    assert world.opacity == pytest.approx(0.25)


def test_world_transform_without_parent_is_local():
    element = _el("solo", position=(3, 4), rotation=30)
    world = _world(element, {"solo": element})
    assert world.position == (3, 4)
    assert world.rotation == 30


def test_motion_path_drives_position():
    path = MotionPath(id="line", points=[PathPoint(x=0, y=0), PathPoint(x=1, y=0)])
    element = _el("e", path_progress=0.5)
    element.motion_path_id = "line"
    values = evaluate_element(element, 0)
    world = compose_world_transform(
        element, values, 0, {"e": element}, {"line": path}, Resolution(width=100, height=50)
    )
    assert world.position == pytest.approx((50, 0))


def test_point_at_straight_handles():
    path = MotionPath(
        points=[
            PathPoint(x=0, y=0, handle_out=Point2(x=1 / 3, y=0)),
            PathPoint(x=1, y=0, handle_in=Point2(x=-1 / 3, y=0)),
        ]
    )
    assert point_at(path, 0.25) == pytest.approx((0.25, 0))


def test_point_at_curved_segment():
    path = MotionPath(
        points=[
            PathPoint(x=0, y=0, handle_out=Point2(x=0, y=1)),
            PathPoint(x=1, y=0, handle_in=Point2(x=0, y=1)),
        ]
    )
    assert point_at(path, 0.5) == pytest.approx((0.5, 0.75))


def test_point_at_edges():
    assert point_at(MotionPath(), 0.5) == (0.0, 0.0)
    assert point_at(MotionPath(points=[PathPoint(x=0.2, y=0.3)]), 0.9) == (0.2, 0.3)

    closed = MotionPath(
        closed=True,
        points=[PathPoint(x=0, y=0), PathPoint(x=1, y=0), PathPoint(x=1, y=1)],
    )
    assert point_at(closed, 1.0) == pytest.approx((0, 0))
    assert point_at(closed, 5.0) == pytest.approx((0, 0))
    assert point_at(closed, 1 / 3) == pytest.approx((1, 0))


def test_to_pixels():
    assert to_pixels((0.5, 0.25), Resolution(width=1920, height=1080)) == (960, 270)

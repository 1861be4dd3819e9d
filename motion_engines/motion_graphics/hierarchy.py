"""Parent/child transform composition.

Parenting is a non-owning relation: elements refer to their parent by id
and the timeline keeps owning every element. A parent id that no longer
resolves ends the chain.
"""
from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional

from motion_engines.common.errors import CyclicHierarchyError
from motion_engines.config import runtime_config
from motion_engines.keyframes.models import TypedValue
from motion_engines.motion_graphics.elements import evaluate_element, property_value
from motion_engines.motion_graphics.models import (
    Element,
    MotionPath,
    PropertyPath,
    Resolution,
    WorldTransform,
)
from motion_engines.motion_graphics.paths import point_at, to_pixels


def resolve_parent_chain(
    element: Element,
    elements: Mapping[str, Element],
    max_depth: Optional[int] = None,
) -> List[Element]:
    """Ancestors of ``element``, nearest first."""
    limit = max_depth or runtime_config.get_max_hierarchy_depth()
    visited = {element.id}
    chain: List[Element] = []
    parent_id = element.parent_id
    while parent_id is not None:
        parent = elements.get(parent_id)
        if parent is None:
            break
        if parent.id in visited:
            raise CyclicHierarchyError(
                f"Cycle detected in parent chain of {element.id} at {parent.id}",
                details={"element_id": element.id, "chain": [e.id for e in chain] + [parent.id]},
            )
        if len(chain) >= limit:
            raise CyclicHierarchyError(
                f"Parent chain of {element.id} exceeds depth {limit}",
                details={"element_id": element.id, "max_depth": limit},
            )
        visited.add(parent.id)
        chain.append(parent)
        parent_id = parent.parent_id
    return chain


def would_create_cycle(element_id: str, parent_id: Optional[str], elements: Mapping[str, Element]) -> bool:
    """True when parenting ``element_id`` under ``parent_id`` closes a loop."""
    seen = set()
    current = parent_id
    while current is not None and current not in seen:
        if current == element_id:
            return True
        seen.add(current)
        node = elements.get(current)
        current = node.parent_id if node else None
    return False


def local_transform(
    element: Element,
    values: Dict[PropertyPath, TypedValue],
    motion_paths: Mapping[str, MotionPath],
    resolution: Resolution,
) -> WorldTransform:
    position = property_value(values, PropertyPath.POSITION)
    path = motion_paths.get(element.motion_path_id) if element.motion_path_id else None
    if path is not None:
        progress = property_value(values, PropertyPath.PATH_PROGRESS)
        position = to_pixels(point_at(path, progress), resolution)
    return WorldTransform(
        position=tuple(position),
        rotation=property_value(values, PropertyPath.ROTATION),
        scale=tuple(property_value(values, PropertyPath.SCALE)),
        opacity=property_value(values, PropertyPath.OPACITY),
    )


def combine(parent: WorldTransform, local: WorldTransform) -> WorldTransform:
    """Place ``local`` into the space of ``parent``."""
    theta = math.radians(parent.rotation)
    cos_t, sin_t = math.cos(theta), math.sin(theta)
    lx = local.position[0] * parent.scale[0]
    ly = local.position[1] * parent.scale[1]
    return WorldTransform(
        position=(
            parent.position[0] + lx * cos_t - ly * sin_t,
            parent.position[1] + lx * sin_t + ly * cos_t,
        ),
        rotation=parent.rotation + local.rotation,
        scale=(parent.scale[0] * local.scale[0], parent.scale[1] * local.scale[1]),
        opacity=parent.opacity * local.opacity,
    )


def compose_world_transform(
    element: Element,
    values: Dict[PropertyPath, TypedValue],
    time: float,
    elements: Mapping[str, Element],
    motion_paths: Mapping[str, MotionPath],
    resolution: Resolution,
    max_depth: Optional[int] = None,
    lenient: Optional[bool] = None,
) -> WorldTransform:
    """
    World transform of ``element`` at ``time``.
    Parents are evaluated in hold mode so a parent that has ended still
    places its children. A parent that has not started contributes its
    property defaults.
    """
    chain = resolve_parent_chain(element, elements, max_depth)
    world = local_transform(element, values, motion_paths, resolution)
    for parent in chain:
        parent_values = evaluate_element(parent, time, hold=True, lenient=lenient)
        parent_local = local_transform(parent, parent_values, motion_paths, resolution)
        world = combine(parent_local, world)
    return world

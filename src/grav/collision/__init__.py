# MIT License (see LICENSE)
"""
Collision detection and resolution subsystem.

This subpackage provides:
    - Detection: Distance thresholds plus a shape-pair test per unordered pair.
    - Merge: Colliding entities are replaced by a single merged sphere.

Typical usage:
    from grav.collision import detect_collisions, resolve_collisions

    clear_collisions(world, ctx)
    detect_collisions(world, ctx)
    resolve_collisions(world, ctx)
    world.maintain()
"""
from .detection import (
    CollisionOutcome,
    DetectionStats,
    classify_pair,
    clear_collisions,
    detect_collisions,
    shape_test,
)
from .merge import merge_into, resolve_collisions

__all__ = [
    # Detection
    "CollisionOutcome",
    "DetectionStats",
    "classify_pair",
    "clear_collisions",
    "detect_collisions",
    "shape_test",
    # Resolution
    "merge_into",
    "resolve_collisions",
]

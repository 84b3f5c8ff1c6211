"""Scene module for primitive storage and the reference scene.

Components:
    scene: Tagged-variant Primitive storage, the immutable Scene container
        and nearest-hit queries
    cornell_box: Factory for the reference box/sphere/light scene

Scene data is organized for parallel access from Taichi kernels:
    - One contiguous struct field holding every primitive
    - A single dispatch function on the primitive kind tag
    - Fixed membership after construction
"""

from .cornell_box import (
    BOX_HALF_SIZE,
    LIGHT_HEIGHT,
    CornellBoxParams,
    create_cornell_box_scene,
    get_cornell_box_primitives,
)
from .scene import (
    HitResult,
    Primitive,
    PrimitiveInfo,
    PrimitiveKind,
    Scene,
    SphereInfo,
    TriangleInfo,
    intersect_primitive,
)

__all__ = [
    # Scene module
    "Scene",
    "Primitive",
    "PrimitiveKind",
    "PrimitiveInfo",
    "SphereInfo",
    "TriangleInfo",
    "HitResult",
    "intersect_primitive",
    # Reference scene
    "CornellBoxParams",
    "create_cornell_box_scene",
    "get_cornell_box_primitives",
    "BOX_HALF_SIZE",
    "LIGHT_HEIGHT",
]

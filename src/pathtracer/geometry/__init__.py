"""Geometry module for intersectable primitives.

Components:
    sphere: Sphere primitive and the Hit record shared by all primitives
    triangle: Triangle primitive with a same-side inside test

All intersection routines are Taichi functions (@ti.func) and follow the
same contract:
    hit = hit_shape(ray_origin, ray_direction, shape, epsilon)
where hit.hit is 1 on intersection and the remaining fields are only
meaningful in that case.
"""

from .sphere import Hit, Sphere, hit_sphere, make_miss
from .triangle import Triangle, face_normal, hit_triangle

__all__ = [
    "Hit",
    "Sphere",
    "hit_sphere",
    "make_miss",
    "Triangle",
    "face_normal",
    "hit_triangle",
]

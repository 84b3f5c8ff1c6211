"""Path tracing integrator for Monte Carlo light transport.

This module implements the light-transport estimator for a single ray. A path
is followed through the scene, bouncing off diffuse surfaces in random
directions, until it reaches a light, escapes, hits a surface from behind or
exceeds the bounce budget.

The estimator is defined recursively:

    trace(ray, depth) = 0                              if depth > max_depth
                      = 0                              if the ray misses
                      = color                          if the hit is emissive
                      = 0                              if dot(-d, n) <= 0
                      = (dot(-d, n) * color) * trace(bounce, depth + 1)

where the bounce ray starts at position + n * normal_offset and points along
normalize(n + u) for a uniform random unit vector u. Taichi functions cannot
recurse, so trace() walks the same chain with a loop and a throughput term:
each level multiplies the throughput by dot(-d, n) * color, and the final
value is throughput * emission when a light is reached.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.integrator import trace_radiance
    >>> from src.pathtracer.scene.cornell_box import create_cornell_box_scene
    >>>
    >>> scene = create_cornell_box_scene()
    >>> trace_radiance(scene, (0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=0)
    (1.0, 1.0, 1.0)
"""

import math

import taichi as ti
import taichi.math as tm

from src.pathtracer.config import DEFAULT_MAX_DEPTH, NORMAL_OFFSET, RenderConfig
from src.pathtracer.core.ray import random_direction

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def trace(
    scene: ti.template(),
    ray_origin: vec3,
    ray_direction: vec3,
    depth: ti.i32,
    max_depth: ti.i32,
    normal_offset: ti.f32,
) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        scene: The Scene to trace against.
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        depth: Recursion level of this ray; levels above max_depth return
            black without tracing.
        max_depth: Deepest level that still traces.
        normal_offset: Distance bounce rays are pushed along the normal.

    Returns:
        The radiance estimate (RGB), unbounded above.
    """
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray_origin
    direction = ray_direction
    level = depth
    active = 1

    while active == 1 and level <= max_depth:
        rec = scene.nearest_hit(origin, direction)

        if rec.hit == 0:
            active = 0
        elif rec.emissive == 1:
            radiance = throughput * rec.color
            active = 0
        else:
            cosine = tm.dot(-direction, rec.normal)
            if cosine <= 0.0:
                # Back-facing or grazing: no transport along this path
                active = 0
            else:
                throughput *= cosine * rec.color
                origin = rec.position + rec.normal * normal_offset
                direction = random_direction(rec.normal)
                level += 1

    return radiance


@ti.kernel
def _trace_kernel(
    scene: ti.template(),
    ray_origin: vec3,
    ray_direction: vec3,
    depth: ti.i32,
    max_depth: ti.i32,
    normal_offset: ti.f32,
) -> vec3:
    return trace(scene, ray_origin, ray_direction, depth, max_depth, normal_offset)


def trace_radiance(
    scene,
    ray_origin: tuple[float, float, float],
    ray_direction: tuple[float, float, float],
    depth: int = 0,
    max_depth: int = DEFAULT_MAX_DEPTH,
    normal_offset: float = NORMAL_OFFSET,
    config: RenderConfig | None = None,
) -> tuple[float, float, float]:
    """Trace one ray from Python.

    This is a Python-callable function for testing and diagnostics. The
    direction is normalized before tracing. For rendering, the frame
    accumulator calls trace() from inside its kernel.

    Args:
        scene: The Scene to trace against.
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        depth: Recursion level to start from.
        max_depth: Deepest level that still traces.
        normal_offset: Distance bounce rays are pushed along the normal.
        config: If given, its max_depth and normal_offset replace the
            two arguments above.

    Returns:
        Tuple of (R, G, B) radiance.

    Raises:
        ValueError: If ray_direction is the zero vector.
    """
    length = math.sqrt(sum(c * c for c in ray_direction))
    if length == 0.0:
        raise ValueError("ray_direction must be non-zero")
    if config is not None:
        max_depth = config.max_depth
        normal_offset = config.normal_offset
    direction = vec3(*(c / length for c in ray_direction))
    color = _trace_kernel(scene, vec3(*ray_origin), direction, depth, max_depth, normal_offset)
    return (float(color[0]), float(color[1]), float(color[2]))

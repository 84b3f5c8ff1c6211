"""Ray data structure and random direction helpers.

This module provides the Ray dataclass and the sampling helpers used by the
path integrator. All helpers are Taichi functions and draw their random
numbers from ``ti.random``, whose generator state is per thread in the Taichi
runtime, so parallel pixels never contend for a shared generator.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length at construction; callers normalize before tracing.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a Taichi kernel."""
    return Ray(origin=origin, direction=direction)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Args:
        v: The vector to check.

    Returns:
        1 if all components are near zero, 0 otherwise.
    """
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit sphere.

    Uses rejection sampling to generate uniformly distributed points
    within the unit sphere.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(100):  # Max iterations to avoid infinite loops
        if not found:
            p = vec3(
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
            )
            if tm.dot(p, p) < 1.0 and tm.dot(p, p) > 1e-12:
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere."""
    return tm.normalize(random_in_unit_sphere())


@ti.func
def random_direction(normal: vec3) -> vec3:
    """Sample a bounce direction around a surface normal.

    Adds a uniformly distributed point on the unit sphere to the normal and
    renormalizes. The result always lies in the hemisphere of the normal.

    If the sum cancels out (the random vector is almost exactly -normal),
    the normal itself is returned.

    Args:
        normal: The unit surface normal.

    Returns:
        A unit bounce direction.
    """
    direction = random_unit_vector() + normal
    result = normal
    if not near_zero(direction):
        result = tm.normalize(direction)
    return result

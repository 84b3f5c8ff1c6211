"""Sphere primitive and the shared Hit record.

The ray-sphere intersection solves

    a*t^2 + 2*b*t + c = 0

with a = dot(d, d), b = dot(o - C, d) and c = dot(o - C, o - C) - r^2, using
the half-b discriminant b^2 - a*c. The nearest root beyond epsilon is kept.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Below this |a| the ray direction is treated as degenerate
DEGENERATE_EPSILON = 1e-12


@ti.dataclass
class Hit:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The ray parameter at the intersection, in units of the ray
            direction. Only valid if hit == 1.
        position: The world-space intersection point. Only valid if hit == 1.
        normal: The geometric surface normal (unit length). Only valid if
            hit == 1.
        color: The base color of the hit primitive.
        emissive: 1 if the hit primitive is a light source, 0 otherwise.
    """

    hit: ti.i32
    t: ti.f32
    position: vec3
    normal: vec3
    color: vec3
    emissive: ti.i32


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere.
        color: The base color (emitted radiance if emissive).
        emissive: 1 if the sphere is a light source.
    """

    center: vec3
    radius: ti.f32
    color: vec3
    emissive: ti.i32


@ti.func
def make_miss() -> Hit:
    """Create a Hit indicating no intersection."""
    return Hit(
        hit=0,
        t=0.0,
        position=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        color=vec3(0.0, 0.0, 0.0),
        emissive=0,
    )


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    epsilon: ti.f32,
) -> Hit:
    """Test for ray-sphere intersection.

    A ray starting inside the sphere hits the far side, since the near root
    is negative and therefore rejected.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be
            normalized; t is measured in direction units).
        sphere: The sphere to test.
        epsilon: Roots must be strictly greater than this to count.

    Returns:
        A Hit. The normal points away from the center.
    """
    result = make_miss()

    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = b * b - a * c

    if discriminant > 0.0 and ti.abs(a) > DEGENERATE_EPSILON:
        sqrt_d = ti.sqrt(discriminant)
        # a > 0, so t1 <= t2
        t1 = (-b - sqrt_d) / a
        t2 = (-b + sqrt_d) / a

        t = t1
        valid = t > epsilon
        if not valid:
            t = t2
            valid = t > epsilon

        if valid:
            position = ray_origin + t * ray_direction
            result = Hit(
                hit=1,
                t=t,
                position=position,
                normal=tm.normalize(position - sphere.center),
                color=sphere.color,
                emissive=sphere.emissive,
            )

    return result


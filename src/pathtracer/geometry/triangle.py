"""Triangle primitive with ray-triangle intersection.

A triangle is defined by three vertices v1, v2, v3 and its face normal
normalize(cross(v2 - v1, v3 - v1)), following the right-hand rule. The normal
is computed once on the host by face_normal() when a scene is built and
stored with the triangle, so hit tests never recompute it.

Ray-triangle intersection uses the plane test followed by a same-side test:
1. Find where the ray intersects the plane containing the triangle
2. For each edge, check that the hit point lies on the inner side, i.e. the
   cross product of the edge and the vector to the point agrees with the
   face normal

There is no backface culling: a ray arriving from behind the face still hits,
and the returned normal is always the face normal (never flipped).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.triangle import Triangle, face_normal, hit_triangle
    >>> v1, v2, v3 = (1, -1, 1), (-1, -1, -1), (-1, -1, 1)
    >>> face_normal(v1, v2, v3)
    (0.0, 1.0, 0.0)
    >>> floor = Triangle(
    ...     v1=ti.math.vec3(*v1),
    ...     v2=ti.math.vec3(*v2),
    ...     v3=ti.math.vec3(*v3),
    ...     normal=ti.math.vec3(*face_normal(v1, v2, v3)),
    ... )
    >>> # Use hit_triangle within a Taichi kernel
"""

import math

import taichi as ti
import taichi.math as tm

from .sphere import Hit, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Below this |dot(normal, direction)| the ray is parallel to the plane
PARALLEL_EPSILON = 1e-12


@ti.dataclass
class Triangle:
    """A triangle defined by three vertices.

    Attributes:
        v1: First vertex (vec3).
        v2: Second vertex (vec3).
        v3: Third vertex (vec3).
        normal: Unit face normal (vec3), see face_normal().
        color: The base color (emitted radiance if emissive).
        emissive: 1 if the triangle is a light source.
    """

    v1: vec3
    v2: vec3
    v3: vec3
    normal: vec3
    color: vec3
    emissive: ti.i32


def face_normal(v1, v2, v3) -> tuple[float, float, float]:
    """Compute the unit face normal normalize(cross(v2 - v1, v3 - v1)).

    Degenerate triangles (collinear vertices) get a zero normal, which every
    hit test then treats as parallel, so they are never hit.
    """
    e1 = [b - a for a, b in zip(v1, v2)]
    e2 = [b - a for a, b in zip(v1, v3)]
    n = (
        e1[1] * e2[2] - e1[2] * e2[1],
        e1[2] * e2[0] - e1[0] * e2[2],
        e1[0] * e2[1] - e1[1] * e2[0],
    )
    length = math.sqrt(n[0] * n[0] + n[1] * n[1] + n[2] * n[2])
    if length == 0.0:
        return (0.0, 0.0, 0.0)
    return (n[0] / length, n[1] / length, n[2] / length)


@ti.func
def hit_triangle(
    ray_origin: vec3,
    ray_direction: vec3,
    triangle: Triangle,
    epsilon: ti.f32,
) -> Hit:
    """Test for ray-triangle intersection.

    The plane parameter is

        t = (dot(n, v1) - dot(n, origin)) / dot(direction, n)

    A zero denominator (ray parallel to the plane) is treated as a miss
    rather than dividing by it.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        triangle: The triangle to test.
        epsilon: The plane parameter must be strictly greater than this.

    Returns:
        A Hit carrying the face normal and the triangle's color and
        emissive flag.
    """
    result = make_miss()

    normal = triangle.normal
    denom = tm.dot(ray_direction, normal)

    if ti.abs(denom) > PARALLEL_EPSILON:
        t = (tm.dot(normal, triangle.v1) - tm.dot(ray_origin, normal)) / denom

        if t > epsilon:
            position = ray_origin + ray_direction * t

            c1 = tm.cross(triangle.v2 - triangle.v1, position - triangle.v1)
            c2 = tm.cross(triangle.v3 - triangle.v2, position - triangle.v2)
            c3 = tm.cross(triangle.v1 - triangle.v3, position - triangle.v3)

            # All three edges must agree with the face normal
            if (
                tm.dot(c1, normal) >= 0.0
                and tm.dot(c2, normal) >= 0.0
                and tm.dot(c3, normal) >= 0.0
            ):
                result = Hit(
                    hit=1,
                    t=t,
                    position=position,
                    normal=normal,
                    color=triangle.color,
                    emissive=triangle.emissive,
                )

    return result


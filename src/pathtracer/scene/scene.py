"""Scene storage and nearest-hit queries.

Primitives are stored as a tagged variant: a single Primitive struct whose
``kind`` field selects between sphere and triangle, so that all geometry of
a scene lives in one contiguous Taichi struct field and a single dispatch
function performs the hit test.

The Scene owns its primitives exclusively and is immutable after
construction: the primitive list passed to the constructor is the whole
scene. Kernels that trace rays reference a Scene instance and call its
``nearest_hit`` Taichi function.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.scene import Scene, SphereInfo, TriangleInfo
    >>> scene = Scene([
    ...     SphereInfo(center=(0, 0, -1), radius=0.5, color=(1, 1, 1)),
    ...     TriangleInfo(v1=(1, -1, 1), v2=(-1, -1, -1), v3=(-1, -1, 1), color=(1, 1, 1)),
    ... ])
    >>> result = scene.query((0, 0, 5), (0, 0, -1))
    >>> result.hit
    True
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

import taichi as ti
import taichi.math as tm

from src.pathtracer.config import EPSILON, T_SENTINEL
from src.pathtracer.geometry.sphere import Hit, Sphere, hit_sphere, make_miss
from src.pathtracer.geometry.triangle import Triangle, face_normal, hit_triangle

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

Vec3Tuple = tuple[float, float, float]


class PrimitiveKind(IntEnum):
    """Tag values for the Primitive variant.

    Values are stored in Primitive.kind and compared inside Taichi kernels.
    """

    SPHERE = 0
    TRIANGLE = 1


@ti.dataclass
class Primitive:
    """Tagged-variant storage for one scene primitive.

    Attributes:
        kind: A PrimitiveKind value.
        a: Sphere center, or the first triangle vertex.
        b: Second triangle vertex (unused for spheres).
        c: Third triangle vertex (unused for spheres).
        normal: Triangle face normal, computed at construction (unused for
            spheres).
        radius: Sphere radius (unused for triangles).
        color: Base color, or emitted radiance for emissive primitives.
        emissive: 1 if the primitive is a light source.
    """

    kind: ti.i32
    a: vec3
    b: vec3
    c: vec3
    normal: vec3
    radius: ti.f32
    color: vec3
    emissive: ti.i32


@ti.func
def intersect_primitive(
    primitive: Primitive,
    ray_origin: vec3,
    ray_direction: vec3,
    epsilon: ti.f32,
) -> Hit:
    """Dispatch a ray test on the primitive's kind tag.

    Args:
        primitive: The primitive to test.
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        epsilon: Minimum accepted ray parameter.

    Returns:
        The Hit from the matching sphere or triangle test.
    """
    result = make_miss()
    if primitive.kind == int(PrimitiveKind.SPHERE):
        sphere = Sphere(
            center=primitive.a,
            radius=primitive.radius,
            color=primitive.color,
            emissive=primitive.emissive,
        )
        result = hit_sphere(ray_origin, ray_direction, sphere, epsilon)
    elif primitive.kind == int(PrimitiveKind.TRIANGLE):
        triangle = Triangle(
            v1=primitive.a,
            v2=primitive.b,
            v3=primitive.c,
            normal=primitive.normal,
            color=primitive.color,
            emissive=primitive.emissive,
        )
        result = hit_triangle(ray_origin, ray_direction, triangle, epsilon)
    return result


# =============================================================================
# Host-side primitive descriptions
# =============================================================================


@dataclass(frozen=True)
class SphereInfo:
    """Host-side description of a sphere.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere.
        color: Base color, or emitted radiance if emissive.
        emissive: Whether the sphere is a light source.
    """

    center: Vec3Tuple
    radius: float
    color: Vec3Tuple
    emissive: bool = False

    @property
    def kind(self) -> PrimitiveKind:
        return PrimitiveKind.SPHERE


@dataclass(frozen=True)
class TriangleInfo:
    """Host-side description of a triangle.

    The winding v1 -> v2 -> v3 fixes the face normal through the right-hand
    rule.

    Attributes:
        v1: First vertex.
        v2: Second vertex.
        v3: Third vertex.
        color: Base color, or emitted radiance if emissive.
        emissive: Whether the triangle is a light source.
    """

    v1: Vec3Tuple
    v2: Vec3Tuple
    v3: Vec3Tuple
    color: Vec3Tuple
    emissive: bool = False

    @property
    def kind(self) -> PrimitiveKind:
        return PrimitiveKind.TRIANGLE


PrimitiveInfo = Union[SphereInfo, TriangleInfo]


@dataclass(frozen=True)
class HitResult:
    """Host-side copy of a Hit, returned by Scene.query().

    Attributes:
        hit: Whether anything was hit.
        t: Ray parameter of the hit (0.0 on a miss).
        position: Hit position.
        normal: Unit geometric normal.
        color: Color of the hit primitive.
        emissive: Whether the hit primitive is a light source.
    """

    hit: bool
    t: float
    position: Vec3Tuple
    normal: Vec3Tuple
    color: Vec3Tuple
    emissive: bool


def _as_tuple(v) -> Vec3Tuple:
    return (float(v[0]), float(v[1]), float(v[2]))


# =============================================================================
# Scene
# =============================================================================


@ti.data_oriented
class Scene:
    """An immutable, ordered collection of primitives.

    The primitive list is copied into a Taichi struct field at construction.
    Queries test every primitive (no acceleration structure) and keep the
    nearest hit.

    Attributes:
        epsilon: Minimum ray parameter accepted as a hit.
        num_primitives: Number of primitives in the scene.
    """

    def __init__(self, primitives: Iterable[PrimitiveInfo] = (), epsilon: float = EPSILON) -> None:
        """Build the scene.

        Args:
            primitives: Sphere and triangle descriptions, in scene order.
            epsilon: Minimum ray parameter accepted as a hit.

        Raises:
            TypeError: If an element is not a SphereInfo or TriangleInfo.
        """
        self._infos: tuple[PrimitiveInfo, ...] = tuple(primitives)
        for info in self._infos:
            if not isinstance(info, (SphereInfo, TriangleInfo)):
                raise TypeError(f"Unsupported primitive description: {info!r}")

        self.epsilon = float(epsilon)
        self.num_primitives = len(self._infos)

        # Taichi fields cannot be empty; an empty scene keeps one unused slot
        self._storage = Primitive.field(shape=max(self.num_primitives, 1))
        for i, info in enumerate(self._infos):
            self._write_primitive(i, info)

        self._query_result = Hit.field(shape=())

        logger.debug(
            "Built scene with %d primitives (%d emissive)",
            self.num_primitives,
            sum(1 for info in self._infos if info.emissive),
        )

    def _write_primitive(self, index: int, info: PrimitiveInfo) -> None:
        storage = self._storage
        storage.kind[index] = int(info.kind)
        storage.color[index] = _as_tuple(info.color)
        storage.emissive[index] = 1 if info.emissive else 0
        if isinstance(info, SphereInfo):
            storage.a[index] = _as_tuple(info.center)
            storage.b[index] = (0.0, 0.0, 0.0)
            storage.c[index] = (0.0, 0.0, 0.0)
            storage.normal[index] = (0.0, 0.0, 0.0)
            storage.radius[index] = float(info.radius)
        else:
            storage.a[index] = _as_tuple(info.v1)
            storage.b[index] = _as_tuple(info.v2)
            storage.c[index] = _as_tuple(info.v3)
            storage.normal[index] = face_normal(info.v1, info.v2, info.v3)
            storage.radius[index] = 0.0

    @classmethod
    def from_infos(cls, infos: list[PrimitiveInfo], epsilon: float = EPSILON) -> "Scene":
        """Build a scene from a list of primitive descriptions."""
        return cls(infos, epsilon=epsilon)

    @property
    def primitives(self) -> tuple[PrimitiveInfo, ...]:
        """The host-side primitive descriptions, in scene order."""
        return self._infos

    def __len__(self) -> int:
        return self.num_primitives

    @ti.func
    def nearest_hit(self, ray_origin: vec3, ray_direction: vec3) -> Hit:
        """Find the nearest intersection of a ray with the scene.

        Every primitive is tested; among those reporting a hit, the one with
        the smallest t wins. The search starts from T_SENTINEL.

        Args:
            ray_origin: The starting point of the ray.
            ray_direction: The direction of the ray.

        Returns:
            The nearest Hit, or a miss if no primitive is hit.
        """
        closest_t = T_SENTINEL
        result = make_miss()
        for i in range(self.num_primitives):
            rec = intersect_primitive(self._storage[i], ray_origin, ray_direction, self.epsilon)
            if rec.hit == 1 and rec.t < closest_t:
                closest_t = rec.t
                result = rec
        return result

    @ti.kernel
    def _query_kernel(self, ray_origin: vec3, ray_direction: vec3):
        # Single outer iteration keeps the primitive loop serial
        for _ in range(1):
            self._query_result[None] = self.nearest_hit(ray_origin, ray_direction)

    def query(self, ray_origin: Vec3Tuple, ray_direction: Vec3Tuple) -> HitResult:
        """Run a nearest-hit query from Python.

        This is a Python-callable wrapper for diagnostics and tests. Rendering
        kernels call nearest_hit() directly.

        Args:
            ray_origin: The starting point of the ray.
            ray_direction: The direction of the ray (not normalized here).

        Returns:
            A HitResult with host-side values.
        """
        self._query_kernel(vec3(*ray_origin), vec3(*ray_direction))
        result = self._query_result
        return HitResult(
            hit=bool(result.hit[None]),
            t=float(result.t[None]),
            position=_as_tuple(result.position[None]),
            normal=_as_tuple(result.normal[None]),
            color=_as_tuple(result.color[None]),
            emissive=bool(result.emissive[None]),
        )

    def __repr__(self) -> str:
        return f"Scene(primitives={self.num_primitives}, epsilon={self.epsilon})"

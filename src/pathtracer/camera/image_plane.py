"""Fixed-eye image-plane camera.

The camera has an eye point and an image plane at a fixed depth. The plane
spans [-1, 1] in x and y. The primary ray for a pixel starts on the image
plane and points away from the eye:

    point = (2 * x / width - 1, 2 * y / height - 1, plane_z)
    direction = normalize(point - eye)

Example:
    >>> from src.pathtracer.camera.image_plane import ImagePlaneCamera
    >>> camera = ImagePlaneCamera(eye=(0.0, 0.0, 5.0), plane_z=1.2)
    >>> camera.ray(384, 384, 768, 768)
    ((0.0, 0.0, 1.2), (0.0, 0.0, -1.0))
"""

import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.pathtracer.config import RenderConfig
from src.pathtracer.core.ray import Ray, make_ray

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class ImagePlaneCamera:
    """Configuration for the fixed-eye camera.

    Attributes:
        eye: Camera eye position in world space.
        plane_z: Depth of the image plane.
    """

    eye: tuple[float, float, float] = (0.0, 0.0, 5.0)
    plane_z: float = 1.2

    @classmethod
    def from_config(cls, config: RenderConfig) -> "ImagePlaneCamera":
        """Build the camera described by a RenderConfig."""
        return cls(eye=config.eye, plane_z=config.image_plane_z)

    def ray(
        self, x: int, y: int, width: int, height: int
    ) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        """Compute the primary ray for a pixel in Python.

        This mirrors get_ray() for diagnostics and tests.

        Returns:
            Tuple of (origin, unit direction).
        """
        i = 2.0 * x / width - 1.0
        j = 2.0 * y / height - 1.0
        origin = (i, j, self.plane_z)
        d = tuple(o - e for o, e in zip(origin, self.eye))
        length = math.sqrt(d[0] * d[0] + d[1] * d[1] + d[2] * d[2])
        return origin, (d[0] / length, d[1] / length, d[2] / length)


@ti.func
def image_plane_point(
    pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32, plane_z: ti.f32
) -> vec3:
    """Map pixel coordinates to a point on the image plane.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        plane_z: Depth of the image plane.

    Returns:
        The point (i, j, plane_z) with i, j in [-1, 1).
    """
    i = 2.0 * ti.cast(pixel_i, ti.f32) / ti.cast(width, ti.f32) - 1.0
    j = 2.0 * ti.cast(pixel_j, ti.f32) / ti.cast(height, ti.f32) - 1.0
    return vec3(i, j, plane_z)


@ti.func
def get_ray(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    eye: vec3,
    plane_z: ti.f32,
) -> Ray:
    """Generate the primary ray for a pixel.

    The ray starts on the image plane and its direction is normalized.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        eye: Camera eye position.
        plane_z: Depth of the image plane.

    Returns:
        A Ray from the image-plane point, pointing away from the eye.
    """
    origin = image_plane_point(pixel_i, pixel_j, width, height, plane_z)
    return make_ray(origin, tm.normalize(origin - eye))

"""Camera module for primary ray generation.

Components:
    image_plane: Fixed-eye camera shooting rays through a [-1, 1] x [-1, 1]
        image plane

Pixel coordinates map to the image plane as
    i = 2 * x / width - 1
    j = 2 * y / height - 1
with x = 0 at the left edge and y = 0 at the bottom edge. No sub-pixel
jitter is applied.
"""

from .image_plane import ImagePlaneCamera, get_ray, image_plane_point

__all__ = [
    "ImagePlaneCamera",
    "get_ray",
    "image_plane_point",
]

"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    ray: Ray data structure and random bounce directions
    integrator: Iterative Monte Carlo radiance estimator
    accumulator: Per-pixel sample accumulation into an 8-bit framebuffer
    render_loop: Accumulate/denoise/present driver

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    make_ray,
    near_zero,
    random_direction,
    random_in_unit_sphere,
    random_unit_vector,
    vec3,
)

# Note: integrator, accumulator and render_loop are NOT imported here to avoid
# circular imports. Import directly from src.pathtracer.core.<module>.

__all__ = [
    "Ray",
    "make_ray",
    "vec3",
    "near_zero",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_direction",
]

"""Taichi-based CPU path tracer for a closed box scene.

This package renders a static scene (a box, a sphere and an area light) by
stochastic path tracing, accumulating one sample per pixel per pass into an
8-bit framebuffer and smoothing the result with a median filter.

Subpackages:
    core: Ray utilities, the path integrator, the frame accumulator and the
        outer render loop
    geometry: Sphere and triangle primitives with ray intersection
    scene: Tagged-variant primitive storage and the reference box scene
    denoise: Median filter post-process
    preview: Presenters (window / headless) and PNG export
"""

__version__ = "0.1.0"

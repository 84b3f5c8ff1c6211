"""Tests for the fixed-eye image-plane camera."""

import math

import taichi as ti


class TestImagePlaneCamera:
    """Tests for the Python-side camera."""

    def test_center_pixel_looks_down_negative_z(self):
        from src.pathtracer.camera.image_plane import ImagePlaneCamera

        origin, direction = ImagePlaneCamera().ray(384, 384, 768, 768)

        assert origin == (0.0, 0.0, 1.2)
        assert direction == (0.0, 0.0, -1.0)

    def test_corner_pixel(self):
        """Test that pixel (0, 0) maps to the bottom-left corner of the plane."""
        from src.pathtracer.camera.image_plane import ImagePlaneCamera

        origin, direction = ImagePlaneCamera().ray(0, 0, 768, 768)

        assert origin == (-1.0, -1.0, 1.2)
        expected = (-1.0, -1.0, -3.8)
        length = math.sqrt(sum(c * c for c in expected))
        assert all(abs(d - e / length) < 1e-12 for d, e in zip(direction, expected))

    def test_from_config(self):
        from src.pathtracer.camera.image_plane import ImagePlaneCamera
        from src.pathtracer.config import RenderConfig

        camera = ImagePlaneCamera.from_config(RenderConfig(eye=(1.0, 2.0, 3.0), image_plane_z=0.5))

        assert camera.eye == (1.0, 2.0, 3.0)
        assert camera.plane_z == 0.5


class TestGetRay:
    """Tests for primary ray generation inside kernels."""

    def test_kernel_ray_matches_python_ray(self):
        """Test get_ray() against ImagePlaneCamera.ray() for a few pixels."""
        from src.pathtracer.camera.image_plane import ImagePlaneCamera, get_ray

        pixels = [(0, 0), (3, 5), (7, 7), (4, 4)]
        count = len(pixels)
        origins = ti.Vector.field(3, dtype=ti.f32, shape=count)
        directions = ti.Vector.field(3, dtype=ti.f32, shape=count)
        xs = ti.field(dtype=ti.i32, shape=count)
        ys = ti.field(dtype=ti.i32, shape=count)
        for k, (x, y) in enumerate(pixels):
            xs[k] = x
            ys[k] = y

        @ti.kernel
        def generate():
            for k in range(count):
                ray = get_ray(xs[k], ys[k], 8, 8, ti.math.vec3(0.0, 0.0, 5.0), 1.2)
                origins[k] = ray.origin
                directions[k] = ray.direction

        generate()
        camera = ImagePlaneCamera()
        o = origins.to_numpy()
        d = directions.to_numpy()
        for k, (x, y) in enumerate(pixels):
            origin, direction = camera.ray(x, y, 8, 8)
            assert all(abs(a - b) < 1e-5 for a, b in zip(o[k], origin))
            assert all(abs(a - b) < 1e-5 for a, b in zip(d[k], direction))

"""Tests for the frame accumulator.

This module tests the FrameAccumulator class including:
- Initialization, properties and reset
- Per-sample weighting (emissive vs. diffuse first hits)
- 8-bit accumulation with truncation and clamping
- Progressive rendering and callbacks
- Framebuffer orientation and numpy round trips

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import math

import numpy as np
import pytest
import taichi as ti

# Pixel (4, 0) sees the floor of floor_scene, pixel (4, 7) sees the sky
FLOOR_PIXEL = (4, 0)
SKY_PIXEL = (4, 7)


class TestFrameAccumulatorInit:
    """Test FrameAccumulator initialization."""

    def test_init_creates_cleared_framebuffer(self, floor_scene, small_config):
        """Test dimensions and an all-black framebuffer."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)

        assert accumulator.width == 8
        assert accumulator.height == 8
        assert accumulator.framebuffer.shape == (8, 8)
        assert accumulator.sample_index == 0
        assert accumulator.sample_budget == 4
        assert (accumulator.get_framebuffer_numpy() == 0).all()

    def test_init_without_scene_raises(self, small_config):
        """Test that an accumulator needs a scene."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        with pytest.raises(RuntimeError, match="needs a scene"):
            FrameAccumulator(None, small_config)

    def test_default_config(self, floor_scene):
        """Test that the reference settings are used by default."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene)

        assert accumulator.width == 768
        assert accumulator.height == 768
        assert accumulator.sample_budget == 1000

    def test_repr(self, floor_scene, small_config):
        """Test the accumulator representation."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)
        assert repr(accumulator) == "FrameAccumulator(width=8, height=8, samples=0/4)"


class TestSampleWeighting:
    """Test the weight of a single sample."""

    def test_emissive_first_hit_is_unscaled(self, floor_scene, small_config):
        """Test that a camera ray hitting a light contributes its color."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)
        color = accumulator.sample_pixel(*SKY_PIXEL)

        assert all(abs(c - 1.0) < 1e-5 for c in color)

    def test_diffuse_first_hit_uses_brightness(self, floor_scene, small_config):
        """Test color * radiance * 2*pi/N without a cosine factor at the first hit."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)
        color = accumulator.sample_pixel(*FLOOR_PIXEL)

        expected = 0.5 * 1.0 * (2.0 * math.pi / 4)
        assert all(abs(c - expected) < 1e-4 for c in color)

    def test_eye_position_sets_ray_direction(self, floor_scene):
        """Test that a configured eye below the image plane turns every ray toward the sky."""
        from src.pathtracer.config import RenderConfig
        from src.pathtracer.core.accumulator import FrameAccumulator

        config = RenderConfig(width=8, height=8, sample_budget=4, median_size=3, eye=(0.0, -10.0, 5.0))
        accumulator = FrameAccumulator(floor_scene, config)
        color = accumulator.sample_pixel(*FLOOR_PIXEL)
        accumulator.update()

        assert all(abs(c - 1.0) < 1e-5 for c in color)
        assert (accumulator.get_framebuffer_numpy() == 255).all()

    def test_half_lit_floor_average(self):
        """Test the mean sample of a floor point that sees a light over half its sky.

        The floor point under pixel (4, 0) is (0, -2, -2.6). The light is a
        large emissive plane just above the floor covering z <= -2.6, so a
        cosine-weighted bounce reaches it with probability 1/2 and the mean
        sample is floor_color * 0.5 * brightness. The camera ray crosses the
        light plane at z > -2.6 and reaches the floor unobstructed.
        """
        from src.pathtracer.config import RenderConfig
        from src.pathtracer.core.accumulator import FrameAccumulator
        from src.pathtracer.scene.scene import Scene, TriangleInfo

        s = 1000.0
        z_edge = -2.6
        light_y = -1.9
        floor_color = 0.5
        scene = Scene([
            TriangleInfo((s, -2.0, s), (-s, -2.0, -s), (-s, -2.0, s), (floor_color,) * 3),
            TriangleInfo((s, -2.0, s), (s, -2.0, -s), (-s, -2.0, -s), (floor_color,) * 3),
            TriangleInfo((-s, light_y, -s), (s, light_y, -s), (s, light_y, z_edge), (1, 1, 1), emissive=True),
            TriangleInfo((-s, light_y, -s), (s, light_y, z_edge), (-s, light_y, z_edge), (1, 1, 1), emissive=True),
        ])
        config = RenderConfig(width=8, height=8, sample_budget=100, median_size=3)
        accumulator = FrameAccumulator(scene, config)

        num_draws = 8000
        total = 0.0
        for _ in range(num_draws):
            total += accumulator.sample_pixel(4, 0)[0]
        mean = total / num_draws

        expected = floor_color * 0.5 * config.brightness
        assert abs(mean - expected) < 0.05 * expected

    def test_empty_scene_is_black(self, small_config):
        """Test that nothing is accumulated when every ray misses."""
        from src.pathtracer.core.accumulator import FrameAccumulator
        from src.pathtracer.scene.scene import Scene

        accumulator = FrameAccumulator(Scene([]), small_config)
        accumulator.update()

        assert (accumulator.get_framebuffer_numpy() == 0).all()


class TestAccumulation:
    """Test 8-bit accumulation."""

    def test_update_truncates_to_8_bit(self, floor_scene, small_config):
        """Test that a pass adds floor(255 * sample) per channel."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)
        accumulator.update()

        fb = accumulator.get_framebuffer_numpy()
        sample = 0.5 * (2.0 * math.pi / 4)
        assert (fb[FLOOR_PIXEL] == int(sample * 255)).all()
        assert (fb[SKY_PIXEL] == 255).all()
        assert accumulator.sample_index == 1

    def test_accumulation_clamps_instead_of_wrapping(self, floor_scene, small_config):
        """Test that channels saturate at 255."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)
        for _ in range(3):
            accumulator.update()

        fb = accumulator.get_framebuffer_numpy()
        assert (fb[FLOOR_PIXEL] == 255).all()
        assert (fb[SKY_PIXEL] == 255).all()

    def test_bright_emission_is_clamped_per_pass(self, small_config):
        """Test that colors above 1 saturate instead of overflowing."""
        from src.pathtracer.core.accumulator import FrameAccumulator
        from src.pathtracer.scene.scene import Scene, SphereInfo

        scene = Scene([SphereInfo(center=(0, 0, 0), radius=50.0, color=(10.0, 0.5, 0.0), emissive=True)])
        accumulator = FrameAccumulator(scene, small_config)
        accumulator.update()

        fb = accumulator.get_framebuffer_numpy()
        assert (fb[..., 0] == 255).all()
        assert (fb[..., 1] == 127).all()
        assert (fb[..., 2] == 0).all()

    def test_channel_conversion(self):
        """Test truncation, negative values and saturation."""
        from src.pathtracer.core.accumulator import to_channel_units

        result = ti.Vector.field(3, dtype=ti.i32, shape=())

        @ti.kernel
        def convert(r: ti.f32, g: ti.f32, b: ti.f32):
            result[None] = to_channel_units(ti.math.vec3(r, g, b))

        convert(-0.5, 0.5, 2.0)
        assert tuple(result.to_numpy()) == (0, 127, 255)

        convert(1.0, 0.0, 0.999)
        assert tuple(result.to_numpy()) == (255, 0, 254)

    def test_reset_clears_framebuffer(self, floor_scene, small_config):
        """Test that reset() clears pixels and the sample index."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)
        accumulator.update()
        accumulator.reset()

        assert accumulator.sample_index == 0
        assert (accumulator.get_framebuffer_numpy() == 0).all()


class TestProgress:
    """Test budget tracking and progressive rendering."""

    def test_progress_percent(self, floor_scene, small_config):
        """Test the integer progress percentage and completion flag."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)
        percentages = [accumulator.progress_percent]
        for _ in range(4):
            accumulator.update()
            percentages.append(accumulator.progress_percent)

        assert percentages == [0, 25, 50, 75, 100]
        assert accumulator.is_complete

    def test_render_runs_remaining_budget(self, floor_scene, small_config):
        """Test that render() defaults to the remaining budget."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)
        accumulator.update()
        accumulator.render()

        assert accumulator.sample_index == 4
        assert accumulator.is_complete

    def test_render_with_callback(self, floor_scene, small_config):
        """Test that the callback receives progress after each batch."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)
        calls = []
        accumulator.render(batch_size=3, callback=lambda current, total: calls.append((current, total)))

        assert calls == [(3, 4), (4, 4)]

    def test_render_progressive_yields(self, floor_scene, small_config):
        """Test the progress generator with an explicit pass count."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)
        progress = list(accumulator.render_progressive(num_passes=2))

        assert progress == [(1, 4), (2, 4)]

    def test_render_when_complete_does_nothing(self, floor_scene, small_config):
        """Test that a finished accumulator ignores render()."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)
        accumulator.render()
        before = accumulator.get_framebuffer_numpy()
        accumulator.render()

        assert accumulator.sample_index == 4
        assert np.array_equal(accumulator.get_framebuffer_numpy(), before)


class TestFramebufferAccess:
    """Test numpy access to the framebuffer."""

    def test_image_is_top_left_origin(self, floor_scene, small_config):
        """Test that get_image_uint8() flips the bottom-left-origin framebuffer."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)
        data = np.zeros((8, 8, 3), dtype=np.uint8)
        # x = 1, y = 0 is the second pixel of the bottom row
        data[1, 0] = (10, 20, 30)
        accumulator.set_framebuffer_numpy(data)

        image = accumulator.get_image_uint8()
        assert image.shape == (8, 8, 3)
        assert image.dtype == np.uint8
        assert tuple(image[7, 1]) == (10, 20, 30)

    def test_set_framebuffer_validates_shape(self, floor_scene, small_config):
        """Test that mismatched arrays are rejected."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)
        with pytest.raises(ValueError, match="doesn't match"):
            accumulator.set_framebuffer_numpy(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_floor_appears_at_bottom_of_image(self, floor_scene, small_config):
        """Test that the floor fills the bottom half of the output image."""
        from src.pathtracer.core.accumulator import FrameAccumulator

        accumulator = FrameAccumulator(floor_scene, small_config)
        accumulator.update()
        image = accumulator.get_image_uint8()

        assert (image[0] == 255).all()
        assert (image[-1] < 255).all()


class TestCornellBoxRender:
    """End-to-end accumulation on the reference scene."""

    def test_small_render_produces_image(self):
        """Test a tiny render of the reference scene."""
        from src.pathtracer.config import RenderConfig
        from src.pathtracer.core.accumulator import FrameAccumulator
        from src.pathtracer.scene.cornell_box import create_cornell_box_scene

        config = RenderConfig(width=16, height=16, sample_budget=8)
        accumulator = FrameAccumulator(create_cornell_box_scene(), config)
        accumulator.render()
        image = accumulator.get_image_uint8()

        assert image.shape == (16, 16, 3)
        assert image.max() > 0
        # The red wall is on the left, the green wall on the right
        assert image[:, 1, 0].astype(int).sum() > image[:, 1, 1].astype(int).sum()
        assert image[:, -1, 1].astype(int).sum() > image[:, -1, 0].astype(int).sum()

"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture
def small_config():
    """A tiny render configuration for fast accumulator/render loop tests."""
    from src.pathtracer.config import RenderConfig

    return RenderConfig(width=8, height=8, sample_budget=4, median_size=3, denoise_repetitions=1)


def floor_under_sky(floor_y=-2.0, floor_color=(0.5, 0.5, 0.5), sky_color=(1.0, 1.0, 1.0)):
    """Primitives for a large upward-facing floor inside an emissive sphere.

    Every bounce off the floor escapes upward into the sphere, so paths have a
    deterministic value: the sphere's color times the first-hit weights.
    """
    from src.pathtracer.scene.scene import SphereInfo, TriangleInfo

    s = 100.0
    y = floor_y
    return [
        TriangleInfo((s, y, s), (-s, y, -s), (-s, y, s), floor_color),
        TriangleInfo((s, y, s), (s, y, -s), (-s, y, -s), floor_color),
        SphereInfo(center=(0.0, 0.0, 0.0), radius=50.0, color=sky_color, emissive=True),
    ]


@pytest.fixture
def floor_scene():
    """Scene with a 0.5-grey floor at y = -2 under a white emissive sky sphere."""
    from src.pathtracer.scene.scene import Scene

    return Scene(floor_under_sky())

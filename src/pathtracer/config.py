"""Render configuration.

All constants that shape a render live in a single frozen dataclass so that a
scene, accumulator, denoiser and render loop can share one value. The values
are fixed for the lifetime of a render: Taichi kernels read them as
compile-time constants.

Example:
    >>> from src.pathtracer.config import RenderConfig
    >>> config = RenderConfig(width=256, height=256, sample_budget=64)
    >>> round(config.brightness, 6)
    0.098175
"""

import math
from dataclasses import dataclass

# Maximum supported image dimensions
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Reference render settings
DEFAULT_WIDTH = 768
DEFAULT_HEIGHT = 768
DEFAULT_SAMPLE_BUDGET = 1000
DEFAULT_MAX_DEPTH = 5
DEFAULT_MEDIAN_SIZE = 5
DEFAULT_DENOISE_REPETITIONS = 10

# Minimum ray parameter accepted as a hit
EPSILON = 1e-4

# Distance a bounce ray is pushed off the surface along the normal
NORMAL_OFFSET = 1e-3

# Starting distance for nearest-hit searches
T_SENTINEL = 1e6

DEFAULT_EYE = (0.0, 0.0, 5.0)
DEFAULT_IMAGE_PLANE_Z = 1.2
DEFAULT_TITLE = "RayTracer (CPU Version)"


@dataclass(frozen=True)
class RenderConfig:
    """Fixed settings for one render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        sample_budget: Number of accumulation passes before denoising.
        max_depth: Deepest integrator level that still traces; deeper
            levels return black.
        median_size: Side length of the square median window (odd).
        denoise_repetitions: How many times the median filter runs.
        epsilon: Minimum ray parameter accepted as a hit.
        normal_offset: Offset applied along the normal for bounce rays
            spawned inside the integrator.
        eye: Camera eye position.
        image_plane_z: Depth of the [-1, 1] x [-1, 1] image plane.
        title: Base text for progress reports.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    sample_budget: int = DEFAULT_SAMPLE_BUDGET
    max_depth: int = DEFAULT_MAX_DEPTH
    median_size: int = DEFAULT_MEDIAN_SIZE
    denoise_repetitions: int = DEFAULT_DENOISE_REPETITIONS
    epsilon: float = EPSILON
    normal_offset: float = NORMAL_OFFSET
    eye: tuple[float, float, float] = DEFAULT_EYE
    image_plane_z: float = DEFAULT_IMAGE_PLANE_Z
    title: str = DEFAULT_TITLE

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.sample_budget <= 0:
            raise ValueError(f"sample_budget must be positive, got {self.sample_budget}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.median_size <= 0 or self.median_size % 2 == 0:
            raise ValueError(f"median_size must be a positive odd number, got {self.median_size}")
        if self.denoise_repetitions < 0:
            raise ValueError(
                f"denoise_repetitions must be non-negative, got {self.denoise_repetitions}"
            )
        if self.epsilon <= 0.0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")

    @property
    def brightness(self) -> float:
        """Weight applied to every non-emissive sample: 2*pi / sample_budget."""
        return 2.0 * math.pi / float(self.sample_budget)

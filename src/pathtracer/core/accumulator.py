"""Frame accumulator: one path-traced sample per pixel per pass.

The accumulator owns the framebuffer, an 8-bit RGB grid, and a sample index
counting how many passes of the sample budget have been applied. Each pass
(``update``) runs one parallel Taichi loop over all pixels:

1. Build the primary ray through the image plane
2. Find the nearest hit
3. Emissive hit: contribute its color unscaled. Other hit: sample one bounce
   direction, trace it, and contribute color * radiance * brightness
4. Convert the contribution to 8 bits, add it to the stored value and clamp
   each channel to [0, 255]

Each pixel reads the shared, immutable scene and writes only its own cell,
so the pass is safe to run in parallel over both image dimensions.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.config import RenderConfig
    >>> from src.pathtracer.core.accumulator import FrameAccumulator
    >>> from src.pathtracer.scene.cornell_box import create_cornell_box_scene
    >>>
    >>> config = RenderConfig(width=64, height=64, sample_budget=16)
    >>> accumulator = FrameAccumulator(create_cornell_box_scene(), config)
    >>> accumulator.render()  # Run the whole sample budget
    >>> image = accumulator.get_image_uint8()
"""

import logging
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.image_plane import get_ray
from src.pathtracer.config import RenderConfig
from src.pathtracer.core.integrator import trace
from src.pathtracer.core.ray import random_direction

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Callback receives (current_samples, sample_budget)
ProgressCallback = Callable[[int, int], None]


@ti.func
def to_channel_units(color: vec3) -> ti.types.vector(3, ti.i32):
    """Convert a color to 8-bit channel units, truncating toward zero.

    Values are clamped to [0, 255] before the cast so that bright or
    non-finite contributions can never wrap.
    """
    scaled = tm.clamp(color * 255.0, 0.0, 255.0)
    result = ti.Vector([0, 0, 0], dt=ti.i32)
    for c in ti.static(range(3)):
        # NaN fails both comparisons inside clamp; treat it as black
        if scaled[c] == scaled[c]:
            result[c] = ti.cast(scaled[c], ti.i32)
    return result


@ti.data_oriented
class FrameAccumulator:
    """Accumulates path-traced samples into an 8-bit framebuffer.

    The framebuffer is indexed (x, y) with y = 0 at the bottom row, the
    layout a bottom-left-origin display blit expects. Use get_image_uint8()
    for a top-left-origin (height, width, 3) array.

    Attributes:
        scene: The Scene being rendered.
        config: The RenderConfig in use.
        framebuffer: Taichi u8 vector field of shape (width, height).
    """

    def __init__(self, scene, config: RenderConfig | None = None) -> None:
        """Initialize the accumulator and clear the framebuffer.

        Args:
            scene: The Scene to render.
            config: Render settings. Defaults to RenderConfig().

        Raises:
            RuntimeError: If scene is None.
        """
        if scene is None:
            raise RuntimeError("FrameAccumulator needs a scene to render")

        self.scene = scene
        self.config = config if config is not None else RenderConfig()

        self._width = self.config.width
        self._height = self.config.height
        self._max_depth = self.config.max_depth
        self._normal_offset = self.config.normal_offset
        self._brightness = self.config.brightness
        self._eye = tuple(float(c) for c in self.config.eye)
        self._plane_z = self.config.image_plane_z

        self.framebuffer = ti.Vector.field(3, dtype=ti.u8, shape=(self._width, self._height))
        self._sample_result = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._sample_index = 0

        self.reset()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def sample_index(self) -> int:
        """Get the number of passes accumulated so far."""
        return self._sample_index

    @property
    def sample_budget(self) -> int:
        """Get the total number of passes to accumulate."""
        return self.config.sample_budget

    @property
    def is_complete(self) -> bool:
        """Whether the whole sample budget has been accumulated."""
        return self._sample_index >= self.config.sample_budget

    @property
    def progress_percent(self) -> int:
        """Integer percentage of the sample budget accumulated so far."""
        return int(float(self._sample_index) / float(self.config.sample_budget) * 100.0)

    # =========================================================================
    # Kernels
    # =========================================================================

    @ti.func
    def _eye_position(self) -> vec3:
        return vec3(self._eye[0], self._eye[1], self._eye[2])

    @ti.func
    def _sample_camera_ray(self, ray_origin: vec3, ray_direction: vec3) -> vec3:
        """Compute one weighted sample for a primary ray.

        The first bounce starts exactly at the hit position. The offset along
        the normal only applies to deeper bounces inside trace().
        """
        color = vec3(0.0, 0.0, 0.0)
        rec = self.scene.nearest_hit(ray_origin, ray_direction)
        if rec.hit == 1:
            if rec.emissive == 1:
                color = rec.color
            else:
                bounce = random_direction(rec.normal)
                radiance = trace(
                    self.scene, rec.position, bounce, 0, self._max_depth, self._normal_offset
                )
                color = rec.color * radiance * self._brightness
        return color

    @ti.kernel
    def _update_kernel(self):
        for i, j in ti.ndrange(self._width, self._height):
            ray = get_ray(i, j, self._width, self._height, self._eye_position(), self._plane_z)
            color = self._sample_camera_ray(ray.origin, ray.direction)

            stored = ti.cast(self.framebuffer[i, j], ti.i32)
            total = tm.clamp(stored + to_channel_units(color), 0, 255)
            self.framebuffer[i, j] = ti.cast(total, ti.u8)

    @ti.kernel
    def _sample_pixel_kernel(self, pixel_i: ti.i32, pixel_j: ti.i32):
        # Single outer iteration keeps the primitive loop serial
        for _ in range(1):
            ray = get_ray(pixel_i, pixel_j, self._width, self._height, self._eye_position(), self._plane_z)
            self._sample_result[None] = self._sample_camera_ray(ray.origin, ray.direction)

    # =========================================================================
    # Public API
    # =========================================================================

    def reset(self) -> None:
        """Clear the framebuffer and the sample index."""
        self.framebuffer.fill(0)
        self._sample_index = 0

    def update(self) -> None:
        """Accumulate one sample into every pixel.

        Passes beyond the sample budget are allowed; the render loop is
        responsible for stopping at the budget.
        """
        self._update_kernel()
        self._sample_index += 1
        logger.debug("Accumulated pass %d/%d", self._sample_index, self.sample_budget)

    def render(
        self,
        num_passes: int | None = None,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Accumulate several passes with an optional progress callback.

        Args:
            num_passes: Number of passes to add. Defaults to whatever remains
                of the sample budget.
            batch_size: Number of passes between callback invocations.
            callback: Optional function called after each batch with
                (sample_index, sample_budget).
        """
        for current, target in self.render_progressive(num_passes, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_passes: int | None = None,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Accumulate passes, yielding progress after each batch.

        Args:
            num_passes: Number of passes to add. Defaults to whatever remains
                of the sample budget.
            batch_size: Number of passes before each yield.

        Yields:
            Tuple of (sample_index, sample_budget).
        """
        if num_passes is None:
            num_passes = max(self.sample_budget - self._sample_index, 0)
        if num_passes <= 0:
            return

        remaining = num_passes
        while remaining > 0:
            batch = min(max(batch_size, 1), remaining)
            for _ in range(batch):
                self.update()
            remaining -= batch
            yield (self._sample_index, self.sample_budget)

        logger.info("Accumulated %d passes (%d%%)", num_passes, self.progress_percent)

    def sample_pixel(self, pixel_i: int, pixel_j: int) -> tuple[float, float, float]:
        """Compute one weighted sample for a pixel without accumulating it.

        This is a Python-callable function for testing. The value is the
        float contribution a pass would add, before 8-bit conversion.

        Args:
            pixel_i: Pixel x-coordinate (0 = left).
            pixel_j: Pixel y-coordinate (0 = bottom).

        Returns:
            Tuple of (R, G, B).
        """
        self._sample_pixel_kernel(pixel_i, pixel_j)
        color = self._sample_result[None]
        return (float(color[0]), float(color[1]), float(color[2]))

    def get_framebuffer_numpy(self) -> npt.NDArray[np.uint8]:
        """Get the raw framebuffer as a (width, height, 3) uint8 array."""
        return self.framebuffer.to_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the framebuffer as a top-left-origin image.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8.
        """
        image = np.transpose(self.framebuffer.to_numpy(), (1, 0, 2))
        # Row 0 of the framebuffer is the bottom row
        return np.ascontiguousarray(np.flipud(image))

    def set_framebuffer_numpy(self, data: npt.NDArray[np.uint8]) -> None:
        """Overwrite the framebuffer from a (width, height, 3) uint8 array.

        Raises:
            ValueError: If the array shape does not match the framebuffer.
        """
        expected_shape = (self._width, self._height, 3)
        if data.shape != expected_shape:
            raise ValueError(f"Framebuffer shape {data.shape} doesn't match expected {expected_shape}")
        self.framebuffer.from_numpy(np.ascontiguousarray(data, dtype=np.uint8))

    def __repr__(self) -> str:
        return (
            f"FrameAccumulator(width={self.width}, height={self.height}, "
            f"samples={self.sample_index}/{self.sample_budget})"
        )

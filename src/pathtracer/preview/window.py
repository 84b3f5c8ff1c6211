"""Presenters: where the render loop sends frames and progress text.

A presenter receives top-left-origin (height, width, 3) uint8 frames from the
render loop, shows the progress text and tells the loop when to stop.

Implementations:
    WindowPresenter: Taichi GGUI window with a small progress panel
    HeadlessPresenter: No display; keeps the last frame for saving/testing

Example:
    >>> from src.pathtracer.preview.window import WindowPresenter
    >>>
    >>> if WindowPresenter.is_display_available():
    ...     presenter = WindowPresenter(768, 768, title="RayTracer (CPU Version)")
"""

import logging
import os
from typing import Protocol

import numpy as np
import numpy.typing as npt
import taichi as ti

logger = logging.getLogger(__name__)


class PresenterError(RuntimeError):
    """Raised when a presenter cannot be set up."""


class Presenter(Protocol):
    """Interface the render loop talks to."""

    def present(self, image: npt.NDArray[np.uint8]) -> None: ...

    def should_stop(self) -> bool: ...

    def set_progress(self, text: str) -> None: ...

    def mark_finished(self) -> None: ...

    def close(self) -> None: ...


def _check_frame(image: npt.NDArray[np.uint8], width: int, height: int) -> None:
    expected_shape = (height, width, 3)
    if image.shape != expected_shape:
        raise ValueError(f"Image shape {image.shape} doesn't match expected {expected_shape}")


class WindowPresenter:
    """On-screen presenter using Taichi GGUI.

    GGUI cannot change a window title after creation, so the progress text
    is drawn in a GUI sub-window on top of the image.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        title: Window title.
        progress_text: The last progress text received.
        display_image: Taichi field holding the displayed frame (RGB float).
    """

    def __init__(self, width: int, height: int, *, title: str = "RayTracer (CPU Version)") -> None:
        """Initialize the presenter.

        The window is created lazily on first use.

        Args:
            width: Window width in pixels.
            height: Window height in pixels.
            title: Window title.
        """
        self.width = width
        self.height = height
        self.title = title
        self.progress_text = title
        self.finished = False

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        # Shape is (width, height) for Taichi field, RGB values stored as vec3
        self.display_image = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))

    def _initialize_window(self) -> None:
        """Create the GGUI window and canvas.

        Raises:
            PresenterError: If the window cannot be created.
        """
        if self._window is not None:
            return

        try:
            window = ti.ui.Window(name=self.title, res=(self.width, self.height), vsync=True)
        except Exception as exc:
            raise PresenterError(f"Could not open a {self.width}x{self.height} window: {exc}") from exc

        self._window = window
        self._canvas = window.get_canvas()
        logger.debug("Opened %dx%d window", self.width, self.height)

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        if self._window is None:
            self._initialize_window()
        assert self._window is not None
        return self._window

    def update_image(self, image: npt.NDArray[np.uint8]) -> None:
        """Copy a frame into the display field without showing it.

        Args:
            image: Array of shape (height, width, 3) with dtype uint8.

        Raises:
            ValueError: If the image shape doesn't match the window.
        """
        _check_frame(image, self.width, self.height)

        # NumPy images are (height, width) with row 0 at the top; Taichi
        # fields are (x, y) with y = 0 at the bottom
        image_transposed = np.ascontiguousarray(
            np.transpose(np.flipud(image), (1, 0, 2)).astype(np.float32) / 255.0
        )
        self.display_image.from_numpy(image_transposed)

    def present(self, image: npt.NDArray[np.uint8]) -> None:
        """Show a frame together with the progress panel."""
        self.update_image(image)

        window = self.window
        assert self._canvas is not None
        self._canvas.set_image(self.display_image)
        with window.GUI.sub_window("Progress", 0.02, 0.02, 0.4, 0.06) as gui:
            gui.text(self.progress_text)
        window.show()

    def should_stop(self) -> bool:
        """Stop once the user closes the window."""
        return not self.window.running

    def set_progress(self, text: str) -> None:
        self.progress_text = text

    def mark_finished(self) -> None:
        # Keep the window open on the final frame until the user closes it
        self.finished = True

    def close(self) -> None:
        """Close the window. It cannot be reopened afterwards."""
        if self._window is not None:
            self._window.running = False
            self._window.destroy()
            self._window = None
            self._canvas = None

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        # On macOS, display is always available if not in SSH
        if os.uname().sysname == "Darwin":
            ssh_connection = os.environ.get("SSH_CONNECTION")
            if ssh_connection and not display:
                return False
            return True

        if display or wayland:
            return True

        # Windows generally always has display
        if os.name == "nt":
            return True

        return False


class HeadlessPresenter:
    """Presenter without a display.

    Records the last frame and every progress text. Stops once the render is
    finished (after the final, denoised frame has been presented) or after
    max_frames frames, whichever comes first.

    Attributes:
        frames_presented: Number of frames received.
        last_frame: Copy of the most recent frame, or None.
        progress_history: Every progress text received, in order.
        finished: Whether the render loop reported completion.
    """

    def __init__(self, max_frames: int | None = None) -> None:
        """Initialize the presenter.

        Args:
            max_frames: Optional limit on the number of frames.

        Raises:
            ValueError: If max_frames is negative.
        """
        if max_frames is not None and max_frames < 0:
            raise ValueError(f"max_frames must be non-negative, got {max_frames}")
        self.max_frames = max_frames
        self.frames_presented = 0
        self.last_frame: npt.NDArray[np.uint8] | None = None
        self.progress_history: list[str] = []
        self.finished = False
        self.closed = False

    @property
    def progress_text(self) -> str | None:
        """The last progress text received."""
        return self.progress_history[-1] if self.progress_history else None

    def present(self, image: npt.NDArray[np.uint8]) -> None:
        self.last_frame = np.array(image, dtype=np.uint8, copy=True)
        self.frames_presented += 1

    def should_stop(self) -> bool:
        if self.finished and self.frames_presented > 0:
            return True
        return self.max_frames is not None and self.frames_presented >= self.max_frames

    def set_progress(self, text: str) -> None:
        self.progress_history.append(text)
        logger.debug("Progress: %s", text)

    def mark_finished(self) -> None:
        self.finished = True

    def close(self) -> None:
        self.closed = True

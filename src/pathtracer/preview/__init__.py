"""Preview module for output and visualization.

Components:
    window: Presenters used by the render loop (GGUI window, headless)
    export: PNG export and image comparison utilities
    display: Matplotlib-based static preview

The framebuffer holds display-ready 8-bit values; nothing here applies tone
mapping or gamma correction.

Example:
    >>> from src.pathtracer.preview import save_png, show_preview
    >>>
    >>> accumulator.render()
    >>> show_preview(accumulator)
    >>> save_png(accumulator, "output.png")
"""

from src.pathtracer.preview.display import show_comparison, show_preview
from src.pathtracer.preview.export import (
    compute_rmse,
    load_png,
    save_png,
    save_png_from_array,
)
from src.pathtracer.preview.window import (
    HeadlessPresenter,
    Presenter,
    PresenterError,
    WindowPresenter,
)

__all__ = [
    # Presenters
    "Presenter",
    "PresenterError",
    "WindowPresenter",
    "HeadlessPresenter",
    # Display functions
    "show_preview",
    "show_comparison",
    # Export functions
    "save_png",
    "save_png_from_array",
    "load_png",
    "compute_rmse",
]

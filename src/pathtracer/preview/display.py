"""Matplotlib-based preview display for rendered images.

Static alternative to the GGUI window, useful in notebooks and for comparing
the raw accumulated image with its denoised version.

Example:
    >>> from src.pathtracer.preview.display import show_preview
    >>>
    >>> accumulator.render()
    >>> show_preview(accumulator)
"""

import numpy as np
import numpy.typing as npt

from src.pathtracer.preview.export import compute_rmse


def show_preview(
    accumulator,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display the current framebuffer as a Matplotlib figure.

    Args:
        accumulator: The FrameAccumulator to display.
        title: Custom title (default shows the pass count).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(accumulator.get_image_uint8())
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {accumulator.sample_index}/{accumulator.sample_budget} passes"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: npt.NDArray[np.uint8],
    image_b: npt.NDArray[np.uint8],
    *,
    labels: tuple[str, str] = ("Accumulated", "Denoised"),
    diff_scale: float = 4.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display two 8-bit images side by side with an amplified difference.

    Args:
        image_a: First image (H, W, 3) uint8.
        image_b: Second image (H, W, 3) uint8.
        labels: Labels for the two images.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE between the two images, in 8-bit units.
    """
    import matplotlib.pyplot as plt

    rmse = compute_rmse(image_a, image_b)

    diff = np.abs(image_a.astype(np.float64) - image_b.astype(np.float64)) / 255.0
    diff_amplified = np.clip(diff * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(image_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(image_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.3f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse

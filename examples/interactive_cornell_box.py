#!/usr/bin/env python3
"""Interactive viewer for the reference box scene.

Opens a Taichi GGUI window and shows the image as it accumulates, one pass
per frame. The progress percentage is shown in a small panel. Once the
sample budget is spent the image is median-filtered once and the final
frame stays on screen until the window is closed.

Usage:
    python -m examples.interactive_cornell_box [options]

Options:
    --width WIDTH           Window width in pixels (default: 768)
    --height HEIGHT         Window height in pixels (default: 768)
    --samples SAMPLES       Sample budget (default: 1000)
    --max-depth DEPTH       Deepest integrator level (default: 5)
    --arch {cpu,gpu}        Taichi backend (default: cpu)
    --verbose               Enable debug logging
"""

import argparse
import logging
import sys
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from src.pathtracer.config import (  # noqa: E402
    DEFAULT_HEIGHT,
    DEFAULT_MAX_DEPTH,
    DEFAULT_SAMPLE_BUDGET,
    DEFAULT_WIDTH,
)
from examples.render_cornell_box import initialize_taichi  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Interactive viewer for the reference box scene.")
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH)
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT)
    parser.add_argument("--samples", type=int, default=DEFAULT_SAMPLE_BUDGET)
    parser.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH)
    parser.add_argument("--arch", choices=("cpu", "gpu"), default="cpu")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the interactive viewer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    from src.pathtracer.config import RenderConfig

    try:
        config = RenderConfig(
            width=args.width,
            height=args.height,
            sample_budget=args.samples,
            max_depth=args.max_depth,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Initialize Taichi first (before importing modules that use ti.kernel)
    backend = initialize_taichi(args.arch)
    print(f"Taichi backend: {backend}")

    # Import after Taichi initialization
    from src.pathtracer.core.accumulator import FrameAccumulator
    from src.pathtracer.core.render_loop import RenderLoop
    from src.pathtracer.denoise.median import MedianDenoiser
    from src.pathtracer.preview.window import PresenterError, WindowPresenter
    from src.pathtracer.scene.cornell_box import create_cornell_box_scene

    if not WindowPresenter.is_display_available():
        print("Error: No display available. Cannot open the viewer.", file=sys.stderr)
        print("Use examples/render_cornell_box.py to render to a file instead.", file=sys.stderr)
        return 1

    scene = create_cornell_box_scene(epsilon=config.epsilon)
    accumulator = FrameAccumulator(scene, config)
    denoiser = MedianDenoiser(config.width, config.height, size=config.median_size)
    presenter = WindowPresenter(config.width, config.height, title=config.title)
    loop = RenderLoop(accumulator, denoiser, presenter, config)

    print(f"Rendering {config.sample_budget} samples ({config.width}x{config.height})...")
    print("  - Close window to exit")

    try:
        loop.run()
    except PresenterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        presenter.close()

    print(f"Viewer closed after {loop.iterations} frames.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

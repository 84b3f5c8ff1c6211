#!/usr/bin/env python3
"""Render the reference box scene to a PNG file without opening a window.

The render runs the same loop as the interactive viewer: one accumulation
pass per iteration until the sample budget is spent, then a single median
denoise, then the final frame is written to disk.

Usage:
    python -m examples.render_cornell_box [options]

Options:
    --width WIDTH           Image width in pixels (default: 768)
    --height HEIGHT         Image height in pixels (default: 768)
    --samples SAMPLES       Sample budget (default: 1000)
    --max-depth DEPTH       Deepest integrator level (default: 5)
    --median-size SIZE      Median window side, odd (default: 5)
    --denoise-passes N      Median filter repetitions (default: 10)
    --output OUTPUT         Output file path (default: cornell_box.png)
    --raw-output PATH       Also save the image before denoising
    --show                  Show accumulated vs. denoised with Matplotlib
    --arch {cpu,gpu}        Taichi backend (default: cpu)
    --quiet                 Suppress progress output
    --verbose               Enable debug logging

Example:
    python -m examples.render_cornell_box --width 256 --height 256 --samples 100
"""

import argparse
import logging
import sys
import time
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import taichi as ti  # noqa: E402

from src.pathtracer.config import (  # noqa: E402
    DEFAULT_DENOISE_REPETITIONS,
    DEFAULT_HEIGHT,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MEDIAN_SIZE,
    DEFAULT_SAMPLE_BUDGET,
    DEFAULT_WIDTH,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the reference box scene to a PNG file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=DEFAULT_WIDTH,
        help=f"Image width in pixels (default: {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=DEFAULT_HEIGHT,
        help=f"Image height in pixels (default: {DEFAULT_HEIGHT})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLE_BUDGET,
        help=f"Sample budget (default: {DEFAULT_SAMPLE_BUDGET})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Deepest integrator level (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--median-size",
        type=int,
        default=DEFAULT_MEDIAN_SIZE,
        help=f"Median window side, odd (default: {DEFAULT_MEDIAN_SIZE})",
    )
    parser.add_argument(
        "--denoise-passes",
        type=int,
        default=DEFAULT_DENOISE_REPETITIONS,
        help=f"Median filter repetitions (default: {DEFAULT_DENOISE_REPETITIONS})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="cornell_box.png",
        help="Output file path (default: cornell_box.png)",
    )
    parser.add_argument(
        "--raw-output",
        type=str,
        default=None,
        help="Also save the image before denoising",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Show accumulated vs. denoised with Matplotlib",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def initialize_taichi(arch: str) -> str:
    """Initialize Taichi, falling back to CPU if the GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    if arch == "gpu":
        try:
            ti.init(arch=ti.gpu)
            return "GPU"
        except Exception as e:
            logging.getLogger(__name__).debug("GPU backend unavailable: %s", e)
    ti.init(arch=ti.cpu)
    return "CPU"


def render_cornell_box(
    config,
    output_path: str = "cornell_box.png",
    raw_output_path: str | None = None,
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Render the reference scene and save the denoised image.

    Args:
        config: The RenderConfig to render with.
        output_path: Output file path (PNG).
        raw_output_path: Optional path for the image before denoising.
        show: If True, display a Matplotlib comparison at the end.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtracer.core.accumulator import FrameAccumulator
    from src.pathtracer.core.render_loop import RenderLoop
    from src.pathtracer.denoise.median import MedianDenoiser
    from src.pathtracer.preview.export import save_png, save_png_from_array
    from src.pathtracer.preview.window import HeadlessPresenter
    from src.pathtracer.scene.cornell_box import create_cornell_box_scene

    if not quiet:
        print(f"Creating scene ({config.width}x{config.height})...")

    scene = create_cornell_box_scene(epsilon=config.epsilon)
    accumulator = FrameAccumulator(scene, config)
    denoiser = MedianDenoiser(config.width, config.height, size=config.median_size)
    presenter = HeadlessPresenter()
    loop = RenderLoop(accumulator, denoiser, presenter, config)

    if not quiet:
        print(f"Rendering {config.sample_budget} samples...")

    start_time = time.time()
    raw_image = None
    last_text = None

    while not presenter.should_stop():
        if accumulator.is_complete and not loop.denoised:
            raw_image = accumulator.get_image_uint8()
        loop.step()

        if not quiet and presenter.progress_text != last_text:
            last_text = presenter.progress_text
            print(f"\r  {last_text}", end="", flush=True)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_png(accumulator, output_file)
    if raw_output_path is not None and raw_image is not None:
        save_png_from_array(raw_image, raw_output_path)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if show and raw_image is not None:
        from src.pathtracer.preview.display import show_comparison

        show_comparison(raw_image, accumulator.get_image_uint8())

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
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
            median_size=args.median_size,
            denoise_repetitions=args.denoise_passes,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    backend = initialize_taichi(args.arch)
    if not args.quiet:
        print(f"Using {backend} backend")

    try:
        render_cornell_box(
            config,
            output_path=args.output,
            raw_output_path=args.raw_output,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

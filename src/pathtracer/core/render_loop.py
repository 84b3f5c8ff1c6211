"""Progressive render loop: accumulate, denoise once, present.

Each iteration of the loop:

1. Reports the integer progress percentage, but only when it changed from
   the last value shown (0% is never reported; the presenter starts there)
2. Runs one accumulation pass while the sample budget lasts; once the budget
   is spent, runs the median denoiser exactly one time
3. Presents the framebuffer, whether or not a pass ran

The loop ends when the presenter asks to stop. Nothing needs rolling back on
exit: a pass is either fully applied or not started.

Example:
    >>> from src.pathtracer.core.render_loop import RenderLoop
    >>> from src.pathtracer.preview.window import HeadlessPresenter
    >>>
    >>> loop = RenderLoop(accumulator, denoiser, HeadlessPresenter(), config)
    >>> loop.run()
"""

import logging

from src.pathtracer.config import RenderConfig

logger = logging.getLogger(__name__)


def format_progress(title: str, percent: int) -> str:
    """Format the progress text shown by presenters."""
    return f"{title} - {percent}%"


class RenderLoop:
    """Drives a FrameAccumulator, a MedianDenoiser and a presenter.

    Attributes:
        accumulator: The FrameAccumulator being filled.
        denoiser: The MedianDenoiser applied once the budget is spent.
        presenter: Receives frames and progress text.
        config: The RenderConfig in use.
    """

    def __init__(self, accumulator, denoiser, presenter, config: RenderConfig | None = None) -> None:
        self.accumulator = accumulator
        self.denoiser = denoiser
        self.presenter = presenter
        self.config = config if config is not None else accumulator.config

        # The window starts out showing the bare title, i.e. 0%
        self._last_percent = 0
        self._denoised = False
        self._iterations = 0

    @property
    def denoised(self) -> bool:
        """Whether the denoiser has run."""
        return self._denoised

    @property
    def iterations(self) -> int:
        """Number of completed step() calls."""
        return self._iterations

    @property
    def finished(self) -> bool:
        """Whether the budget is spent and the image has been denoised."""
        return self.accumulator.is_complete and self._denoised

    def step(self) -> None:
        """Run one iteration of the render loop."""
        percent = self.accumulator.progress_percent
        if percent != self._last_percent:
            self._last_percent = percent
            self.presenter.set_progress(format_progress(self.config.title, percent))

        if not self.accumulator.is_complete:
            self.accumulator.update()
        elif not self._denoised:
            self.denoiser.apply(self.accumulator.framebuffer, self.config.denoise_repetitions)
            self._denoised = True
            self.presenter.mark_finished()
            logger.info(
                "Render finished: %d passes, %d denoise repetitions",
                self.accumulator.sample_index,
                self.config.denoise_repetitions,
            )

        self.presenter.present(self.accumulator.get_image_uint8())
        self._iterations += 1

    def run(self, max_iterations: int | None = None) -> int:
        """Loop step() until the presenter stops or the iteration cap is hit.

        Args:
            max_iterations: Optional cap on the number of iterations.

        Returns:
            The number of iterations run by this call.
        """
        count = 0
        while not self.presenter.should_stop():
            if max_iterations is not None and count >= max_iterations:
                break
            self.step()
            count += 1
        logger.debug("Render loop exited after %d iterations", count)
        return count

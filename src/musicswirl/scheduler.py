import logging
import time

from musicswirl.constants import DEFAULT_FPS

logger = logging.getLogger(__name__)


class FramePacer:
    """Next-frame primitive that sleeps until the next slot at a fixed rate."""

    def __init__(self, fps=DEFAULT_FPS, clock=time.perf_counter, sleep=time.sleep):
        self.interval = 1 / fps
        self.clock = clock
        self.sleep = sleep
        self._deadline = None

    def __call__(self):
        now = self.clock()
        if self._deadline is None:
            self._deadline = now
        self._deadline += self.interval

        delay = self._deadline - now
        if delay > 0:
            self.sleep(delay)
        else:
            # Fell behind; don't try to catch up with a burst of frames
            self._deadline = now
        return True


class FrameScheduler:
    """
    Runs `step` once per frame until cancelled.

    `request_frame` blocks until the next frame is due and returns False to
    stop the loop. The cancellation flag is checked before every step.
    """

    def __init__(self, step, request_frame=None):
        self.step = step
        self.request_frame = request_frame or FramePacer()
        self.cancelled = False
        self.frame_count = 0

    def cancel(self):
        self.cancelled = True

    def run(self, max_frames=None):
        """Returns the number of frames stepped in this run."""
        frames = 0
        while not self.cancelled:
            if max_frames is not None and frames >= max_frames:
                break

            self.step()
            frames += 1
            self.frame_count += 1

            if not self.request_frame():
                self.cancel()

        logger.debug(f"[i] Frame loop stopped after {frames} frames")
        return frames

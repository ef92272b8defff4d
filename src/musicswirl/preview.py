import logging

import cv2

from musicswirl.audio_graph import AudioGraph
from musicswirl.audio_output import AudioOutput
from musicswirl.canvas import Canvas
from musicswirl.constants import ANALYSER_SMOOTHING, DEFAULT_FPS, DEFAULT_VOLUME
from musicswirl.context import Visualiser
from musicswirl.scheduler import FramePacer, FrameScheduler

logger = logging.getLogger(__name__)

QUIT_KEYS = (27, ord("q"))


class PreviewWindow:
    """OpenCV HighGUI window that shows the canvas and reports its size."""

    def __init__(self, title="musicswirl", size=None):
        self.title = title
        cv2.namedWindow(title, cv2.WINDOW_NORMAL)
        if size is not None:
            cv2.resizeWindow(title, *size)

    def viewport(self):
        _, _, w, h = cv2.getWindowImageRect(self.title)
        if w <= 0 or h <= 0:
            return None
        return (w, h)

    def show(self, canvas):
        """Present a frame. Returns False once the user asked to quit."""
        cv2.imshow(self.title, canvas.pixels)
        key = cv2.waitKey(1) & 0xFF
        if key in QUIT_KEYS:
            return False
        return cv2.getWindowProperty(self.title, cv2.WND_PROP_VISIBLE) >= 1

    def close(self):
        cv2.destroyWindow(self.title)


class PlaylistPreview:
    """
    Plays a list of files back to back in a live window.

    Each file gets a fresh pipeline; the window's size is picked up every
    frame and the canvas reallocated when it changes.
    """

    def __init__(self, paths, visualiser, canvas, window, fps=DEFAULT_FPS):
        self.queue = list(paths)
        self.visualiser = visualiser
        self.canvas = canvas
        self.window = window
        self.pacer = FramePacer(fps)
        self.scheduler = FrameScheduler(self.step, self.request_frame)

    def load_next(self):
        while self.queue:
            if self.visualiser.load_file(self.queue.pop(0)):
                return True
        return False

    def step(self):
        viewport = self.window.viewport()
        if viewport is not None and viewport != (self.canvas.width, self.canvas.height):
            logger.debug(f"[i] Viewport resized to {viewport[0]}x{viewport[1]}")
            self.canvas.resize(*viewport)

        if self.visualiser.ended and not self.load_next():
            logger.info("[+] Playlist finished")
            self.scheduler.cancel()
            return

        self.visualiser.step(self.canvas)

    def request_frame(self):
        return self.window.show(self.canvas) and self.pacer()

    def run(self):
        if not self.load_next():
            return False
        try:
            self.scheduler.run()
        finally:
            self.visualiser.unload()
        return True


def run_preview(
    paths,
    width,
    height,
    fps=DEFAULT_FPS,
    smoothing=ANALYSER_SMOOTHING,
    volume=DEFAULT_VOLUME,
    mute=False,
):
    """Open a window and visualise `paths` in real time, playing them through the sound card."""
    logger.info(f"[+] Opening preview: {width}x{height} @ {fps}fps")
    graph = AudioGraph()
    visualiser = Visualiser(graph, smoothing=smoothing, volume=volume)
    output = None if mute else AudioOutput(graph)
    window = PreviewWindow(size=(width, height))
    preview = PlaylistPreview(paths, visualiser, Canvas(width, height), window, fps)
    try:
        if output is not None:
            output.open()
        return preview.run()
    finally:
        if output is not None:
            output.close()
        window.close()

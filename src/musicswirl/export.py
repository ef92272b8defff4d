import logging

from moviepy import AudioFileClip, VideoClip, afx

from musicswirl.audio_graph import AudioGraph, ManualClock
from musicswirl.canvas import Canvas
from musicswirl.constants import ANALYSER_SMOOTHING, DEFAULT_FPS, DEFAULT_VOLUME
from musicswirl.context import Visualiser

logger = logging.getLogger(__name__)


class FrameRecorder:
    """
    Steps the visualiser at the timestamps a video writer asks for.

    The audio graph runs on a manual clock set to each frame time, so the
    analysis sees exactly the audio under that frame. Repeated requests for
    the same timestamp return the cached frame instead of stepping again.
    """

    def __init__(self, visualiser, canvas, clock):
        self.visualiser = visualiser
        self.canvas = canvas
        self.clock = clock
        self._last_t = None
        self._last_frame = None

    def make_frame(self, t):
        if t == self._last_t:
            return self._last_frame

        self.clock.set(t)
        self.visualiser.step(self.canvas)

        self._last_t = t
        self._last_frame = self.canvas.to_rgb()
        return self._last_frame


def render_video(
    input_path,
    output_path,
    width,
    height,
    fps=DEFAULT_FPS,
    duration=None,
    smoothing=ANALYSER_SMOOTHING,
    volume=DEFAULT_VOLUME,
):
    """Render the visualisation of one file to a video with its audio. Returns False on decode failure."""
    clock = ManualClock()
    visualiser = Visualiser(AudioGraph(clock=clock), smoothing=smoothing, volume=volume)
    if not visualiser.load_file(input_path):
        return False

    audio_clip = None
    try:
        audio_clip = AudioFileClip(str(input_path))
        total = audio_clip.duration
        if duration and duration < total:
            total = duration
            logger.info(f"[i] Truncating duration to {total} seconds.")

        logger.info(f"[+] Preparing render: {width}x{height} @ {fps}fps")
        logger.info(f"[+] Duration: {total:.2f} seconds")

        recorder = FrameRecorder(visualiser, Canvas(width, height), clock)
        video_clip = VideoClip(recorder.make_frame, duration=total)

        # The gain sits in front of the analyser and the output alike
        audio_clip = audio_clip.subclipped(0, total).with_effects([afx.MultiplyVolume(volume)])
        video_clip = video_clip.with_audio(audio_clip)

        logger.info("[+] Rendering video... (This may take a while)")
        video_clip.write_videofile(
            str(output_path),
            fps=fps,
            codec="libx264",
            audio_codec="aac",
            threads=4,
            preset="medium",
            logger="bar",
        )
    finally:
        visualiser.unload()
        if audio_clip is not None:
            audio_clip.close()

    logger.info(f"[+] Done! Saved to {output_path}")
    return True

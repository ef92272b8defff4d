import logging
from dataclasses import dataclass

from musicswirl.audio_analyser import AnalysisEngine
from musicswirl.constants import ANALYSER_SMOOTHING, BUFFER_SIZE, DEFAULT_VOLUME
from musicswirl.decoder import DecodeError, decode_audio
from musicswirl.particle import ParticleField
from musicswirl.visualiser_renderer import VisualiserRenderer

logger = logging.getLogger(__name__)


@dataclass
class FrameContext:
    """Everything one frame step reads and mutates for the loaded file."""

    engine: AnalysisEngine
    field: ParticleField


def frame_step(context, canvas, renderer, viewport=None):
    """Analyse the current audio frame, advance the particles and paint them."""
    amplitude = context.engine.amplitude_level()
    spectrum = context.engine.spectrum_above_average()

    context.field.update(spectrum)
    renderer.draw(canvas, spectrum, amplitude, context.field, viewport)


class Visualiser:
    """
    Owns the active FrameContext and swaps it out when a new file is loaded.

    At most one engine is connected to the graph: the previous one is
    disconnected before the next playback chain is built.
    """

    def __init__(
        self,
        graph,
        renderer=None,
        smoothing=ANALYSER_SMOOTHING,
        volume=DEFAULT_VOLUME,
        capacity=BUFFER_SIZE,
        decoder=decode_audio,
    ):
        self.graph = graph
        self.renderer = renderer or VisualiserRenderer()
        self.smoothing = smoothing
        self.volume = volume
        self.capacity = capacity
        self.decoder = decoder
        self.context = None

    @property
    def ended(self):
        return self.context is None or self.context.engine.ended

    def unload(self):
        if self.context is None:
            return
        self.context.engine.disconnect()
        self.context = None

    def load(self, buffer):
        """Replace the current context with a fresh one playing `buffer`."""
        self.unload()

        engine = AnalysisEngine(self.graph.create_chain(buffer, self.smoothing))
        try:
            engine.set_volume(self.volume)
            engine.start()
        except Exception:
            engine.disconnect()
            raise

        self.context = FrameContext(engine=engine, field=ParticleField(self.capacity))
        return self.context

    def load_file(self, filepath):
        """
        Decode and load a file. Returns False if decoding failed.

        A failed decode leaves the current context untouched.
        """
        try:
            buffer = self.decoder(filepath, sample_rate=self.graph.sample_rate)
        except DecodeError as e:
            logger.error(f"[!] Decode error: {e}")
            return False

        self.load(buffer)
        logger.info(f"[+] Loaded {filepath} ({buffer.duration:.2f}s)")
        return True

    def step(self, canvas, viewport=None):
        """Run one frame. Without a loaded file only the trail fade is drawn."""
        if self.context is None:
            self.renderer.draw(canvas, [], 0, None, viewport)
            return
        frame_step(self.context, canvas, self.renderer, viewport)

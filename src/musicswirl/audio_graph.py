"""
Pull-based audio graph modelled on the browser's Web Audio API.

Nodes produce sample blocks on demand: the analyser asks its inputs for the
window of frames that ends at the graph's current time, and each node mixes
what its own inputs produce. Time comes from an injectable clock so the same
graph runs against the wall clock (live preview) or a manual clock driven by
the frame time of a video export.
"""

import logging
import time

import numpy as np

from musicswirl.constants import (
    ANALYSER_SMOOTHING,
    FFT_SIZE,
    MAX_DECIBELS,
    MIN_DECIBELS,
    SAMPLE_RATE,
)

logger = logging.getLogger(__name__)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, time=0.0):
        self.time = time

    def set(self, t):
        self.time = t

    def advance(self, dt):
        self.time += dt

    def __call__(self):
        return self.time


class AudioNode:
    def __init__(self, graph):
        self.graph = graph
        self.inputs = []
        self.outputs = []

    def connect(self, destination):
        self.outputs.append(destination)
        destination.inputs.append(self)
        return destination

    def disconnect(self):
        """Remove every outgoing connection of this node."""
        for node in self.outputs:
            node.inputs.remove(self)
        self.outputs = []

    def pull(self, start, count):
        """Mix of all inputs over frames [start, start + count)."""
        block = np.zeros(count, dtype=np.float32)
        # Snapshot: the audio thread pulls while the main thread rewires
        for node in tuple(self.inputs):
            block += node.pull(start, count)
        return block


class AudioDestination(AudioNode):
    pass


class AudioBufferSource(AudioNode):
    """Plays a PCM buffer once, starting at the graph time `start()` is called."""

    def __init__(self, graph, buffer):
        super().__init__(graph)
        if buffer.sample_rate != graph.sample_rate:
            raise ValueError(
                f"buffer sample rate {buffer.sample_rate} does not match graph rate {graph.sample_rate}"
            )
        self.buffer = buffer
        self.start_frame = None

    def start(self):
        if self.start_frame is not None:
            raise RuntimeError("an AudioBufferSource can only be started once")
        self.start_frame = self.graph.current_frame

    @property
    def ended(self):
        if self.start_frame is None:
            return False
        return self.graph.current_frame - self.start_frame >= len(self.buffer)

    def pull(self, start, count):
        block = np.zeros(count, dtype=np.float32)
        if self.start_frame is None:
            return block

        offset = start - self.start_frame
        lo = max(offset, 0)
        hi = min(offset + count, len(self.buffer))
        if lo < hi:
            block[lo - offset : hi - offset] = self.buffer.samples[lo:hi]
        return block


class GainNode(AudioNode):
    def __init__(self, graph, gain=1.0):
        super().__init__(graph)
        self.gain = gain

    def pull(self, start, count):
        return super().pull(start, count) * self.gain


class AnalyserNode(AudioNode):
    """
    Real-time frequency and time-domain analysis of the signal passing through.

    Frequency data follows the Web Audio AnalyserNode: Blackman window, FFT,
    magnitude normalised by the FFT size, exponential smoothing over
    successive reads, then decibels mapped from [min_decibels, max_decibels]
    onto the 0-255 byte range.
    """

    def __init__(
        self,
        graph,
        fft_size=FFT_SIZE,
        smoothing=ANALYSER_SMOOTHING,
        min_decibels=MIN_DECIBELS,
        max_decibels=MAX_DECIBELS,
    ):
        super().__init__(graph)
        if not 0 <= smoothing <= 1:
            raise ValueError(f"smoothing must be in [0, 1], got {smoothing}")
        self.fft_size = fft_size
        self.frequency_bin_count = fft_size // 2
        self.smoothing_time_constant = smoothing
        self.min_decibels = min_decibels
        self.max_decibels = max_decibels

        self._window = np.blackman(fft_size)
        self._smoothed = np.zeros(self.frequency_bin_count)

    def _time_block(self):
        end = self.graph.current_frame
        return self.pull(end - self.fft_size, self.fft_size)

    def fill_frequency_domain(self, target):
        block = self._time_block() * self._window
        magnitudes = np.abs(np.fft.rfft(block))[: self.frequency_bin_count] / self.fft_size

        tau = self.smoothing_time_constant
        self._smoothed = tau * self._smoothed + (1 - tau) * magnitudes

        with np.errstate(divide="ignore"):
            decibels = 20 * np.log10(self._smoothed)
        scale = 255 / (self.max_decibels - self.min_decibels)
        scaled = np.floor((decibels - self.min_decibels) * scale)

        n = min(len(target), self.frequency_bin_count)
        target[:n] = np.clip(scaled[:n], 0, 255)

    def fill_time_domain(self, target):
        block = self._time_block()
        n = min(len(target), self.fft_size)
        target[:n] = np.clip(np.floor(128 * (1 + block[:n])), 0, 255)


class PlaybackChain:
    """
    A wired source -> gain -> analyser -> destination chain.

    This is the whole surface the analysis engine sees of the graph.
    """

    def __init__(self, source, gain, analyser):
        self.source = source
        self.gain = gain
        self.analyser = analyser

    @property
    def frequency_bin_count(self):
        return self.analyser.frequency_bin_count

    @property
    def ended(self):
        return self.source.ended

    def start(self):
        self.source.start()

    def disconnect(self):
        self.source.disconnect()

    def set_volume(self, level):
        self.gain.gain = level

    def fill_frequency_domain(self, target):
        self.analyser.fill_frequency_domain(target)

    def fill_time_domain(self, target):
        self.analyser.fill_time_domain(target)


class AudioGraph:
    def __init__(self, clock=time.perf_counter, sample_rate=SAMPLE_RATE):
        self.clock = clock
        self.sample_rate = sample_rate
        self.destination = AudioDestination(self)
        self._epoch = clock()

    @property
    def current_time(self):
        """Seconds since the graph was created."""
        return self.clock() - self._epoch

    @property
    def current_frame(self):
        return int(self.current_time * self.sample_rate)

    def create_source(self, buffer):
        return AudioBufferSource(self, buffer)

    def create_gain(self):
        return GainNode(self)

    def create_analyser(self, smoothing=ANALYSER_SMOOTHING):
        return AnalyserNode(self, smoothing=smoothing)

    def connect(self, a, b):
        return a.connect(b)

    def create_chain(self, buffer, smoothing=ANALYSER_SMOOTHING):
        source = self.create_source(buffer)
        gain = self.create_gain()
        analyser = self.create_analyser(smoothing)

        self.connect(source, gain)
        self.connect(gain, analyser)
        self.connect(analyser, self.destination)

        logger.debug(f"[i] Wired playback chain at t={self.current_time:.3f}s (smoothing={smoothing})")
        return PlaybackChain(source, gain, analyser)

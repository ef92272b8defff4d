"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from musicswirl.audio_graph import AudioGraph, ManualClock
from musicswirl.decoder import PcmBuffer

# Default sample rate for test audio
TEST_SR = 22050

# Analyser bin that a test tone lands on exactly (bin width is TEST_SR / 2048)
TONE_BIN = 100


class FakeChain:
    """Playback chain that serves canned byte buffers and records calls."""

    def __init__(self, freqs=(), times=(), bins=None, log=None, name="chain"):
        self.freqs = np.asarray(freqs, dtype=np.uint8)
        self.times = np.asarray(times, dtype=np.uint8)
        self.frequency_bin_count = bins if bins is not None else max(len(self.freqs), len(self.times))
        self.log = log if log is not None else []
        self.name = name
        self.volume = None
        self.started = False
        self.disconnected = False
        self.ended = False

    def start(self):
        self.started = True
        self.log.append(f"start:{self.name}")

    def disconnect(self):
        self.disconnected = True
        self.log.append(f"disconnect:{self.name}")

    def set_volume(self, level):
        self.volume = level

    def fill_frequency_domain(self, target):
        n = min(len(target), len(self.freqs))
        target[:n] = self.freqs[:n]

    def fill_time_domain(self, target):
        n = min(len(target), len(self.times))
        target[:n] = self.times[:n]


class FakeGraph:
    """Hands out FakeChains and logs construction order."""

    sample_rate = TEST_SR

    def __init__(self, freqs=(0, 100, 0, 100), times=(128, 128, 128, 128)):
        self.freqs = freqs
        self.times = times
        self.log = []
        self.chains = []

    def create_chain(self, buffer, smoothing):
        name = str(len(self.chains) + 1)
        self.log.append(f"create:{name}")
        chain = FakeChain(self.freqs, self.times, log=self.log, name=name)
        self.chains.append(chain)
        return chain


@pytest.fixture
def sample_rate() -> int:
    """Default sample rate for tests."""
    return TEST_SR


@pytest.fixture
def tone(sample_rate: int) -> PcmBuffer:
    """
    A quiet 2 second sine sitting exactly on analyser bin TONE_BIN.

    Quiet enough that only the peak bin reaches the top of the byte range.
    """
    duration = 2.0
    frequency = TONE_BIN * sample_rate / 2048
    t = np.arange(int(sample_rate * duration)) / sample_rate
    y = 0.01 * np.sin(2 * np.pi * frequency * t)
    return PcmBuffer(samples=y.astype(np.float32), sample_rate=sample_rate)


@pytest.fixture
def loud_chord(sample_rate: int) -> PcmBuffer:
    """C major chord, loud enough to push several bins above the mean."""
    duration = 2.0
    t = np.arange(int(sample_rate * duration)) / sample_rate
    y = (
        0.3 * np.sin(2 * np.pi * 261.63 * t)
        + 0.3 * np.sin(2 * np.pi * 329.63 * t)
        + 0.3 * np.sin(2 * np.pi * 392.00 * t)
    )
    return PcmBuffer(samples=y.astype(np.float32), sample_rate=sample_rate)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def graph(clock, sample_rate) -> AudioGraph:
    return AudioGraph(clock=clock, sample_rate=sample_rate)


@pytest.fixture
def fake_graph() -> FakeGraph:
    return FakeGraph()


@pytest.fixture
def temp_audio_file(tmp_path, loud_chord):
    """Create a temporary audio file for testing file I/O."""
    import soundfile as sf

    audio_path = tmp_path / "test_audio.wav"
    sf.write(audio_path, loud_chord.samples, loud_chord.sample_rate)
    return audio_path

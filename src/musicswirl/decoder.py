import logging
from dataclasses import dataclass

import librosa
import numpy as np

from musicswirl.constants import SAMPLE_RATE

logger = logging.getLogger(__name__)


class DecodeError(Exception):
    """Raised when an audio file cannot be decoded to PCM."""


@dataclass(frozen=True)
class PcmBuffer:
    """Mono float PCM samples in [-1, 1] at a fixed sample rate."""

    samples: np.ndarray
    sample_rate: int

    @property
    def duration(self) -> float:
        return len(self.samples) / self.sample_rate

    def __len__(self) -> int:
        return len(self.samples)


def decode_audio(filepath, sample_rate: int = SAMPLE_RATE) -> PcmBuffer:
    """
    Decode an audio file into a mono PCM buffer resampled to `sample_rate`.

    Any failure from the underlying readers is re-raised as DecodeError.
    """
    logger.info(f"[+] Decoding audio: {filepath}...")
    try:
        y, sr = librosa.load(filepath, sr=sample_rate, mono=True)
    except Exception as e:
        raise DecodeError(f"could not decode {filepath}: {e}") from e

    if y.size == 0:
        raise DecodeError(f"no audio samples in {filepath}")

    buffer = PcmBuffer(samples=y.astype(np.float32), sample_rate=int(sr))
    logger.debug(f"[i] Decoded {len(buffer)} samples ({buffer.duration:.2f}s) @ {sr} Hz")
    return buffer

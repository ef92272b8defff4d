import logging

import numpy as np

logger = logging.getLogger(__name__)


class AnalysisEngine:
    """
    Produces per-frame readings from a playback chain.

    The chain owns the audio graph wiring; the engine only asks it for fresh
    byte buffers and reduces them to the two numbers the visualiser needs.
    """

    def __init__(self, chain):
        self.chain = chain

        # Fixed for the lifetime of the engine
        self.bin_capacity = chain.frequency_bin_count
        self.freqs = np.zeros(self.bin_capacity, dtype=np.uint8)
        self.times = np.zeros(self.bin_capacity, dtype=np.uint8)

    @property
    def ended(self):
        return self.chain.ended

    def start(self):
        """Begin playback. Must be called at most once."""
        logger.info("[+] Starting playback...")
        self.chain.start()

    def disconnect(self):
        self.chain.disconnect()

    def set_volume(self, level):
        """Set the output gain; 0 is silent, 1 is unity."""
        self.chain.set_volume(level)

    def spectrum_above_average(self):
        """
        Returns the frequency magnitudes above this frame's mean, minus the mean.

        The mean divides by the bin capacity, not by the number of bins that
        were filled. Output indices are ranks among the retained bins, so
        index i is not tied to a frequency.
        """
        self.chain.fill_frequency_domain(self.freqs)

        average = self.freqs.sum(dtype=np.float64) / self.bin_capacity
        above = self.freqs[self.freqs > average]

        return above.astype(np.float64) - average

    def amplitude_level(self):
        """
        Returns the root of the sum of squares of the time-domain bytes.

        Not divided by the sample count.
        """
        self.chain.fill_time_domain(self.times)

        samples = self.times.astype(np.float64)
        return float(np.sqrt(np.sum(samples * samples)))

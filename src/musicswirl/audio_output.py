import logging

import numpy as np

logger = logging.getLogger(__name__)


class AudioOutput:
    """
    Streams whatever reaches the graph's destination to the sound card.

    The stream callback runs on the audio thread and pulls consecutive blocks
    from the destination, starting at the graph frame the output was opened
    at. Gain and disconnects applied to a chain are therefore heard as well
    as analysed.
    """

    def __init__(self, graph, blocksize=1024, stream_factory=None):
        self.graph = graph
        self.blocksize = blocksize
        self.stream_factory = stream_factory
        self.cursor = None
        self.stream = None

    def render(self, frames):
        """Next `frames` samples of the destination mix, clipped to [-1, 1]."""
        if self.cursor is None:
            self.cursor = self.graph.current_frame
        block = self.graph.destination.pull(self.cursor, frames)
        self.cursor += frames
        return np.clip(block, -1.0, 1.0)

    def _callback(self, outdata, frames, time_info, status):
        if status:
            logger.debug(f"[i] Output stream status: {status}")
        outdata[:, 0] = self.render(frames)

    def open(self):
        factory = self.stream_factory
        if factory is None:
            # PortAudio is only loaded when sound is actually wanted
            import sounddevice as sd

            factory = sd.OutputStream

        self.cursor = self.graph.current_frame
        self.stream = factory(
            samplerate=self.graph.sample_rate,
            channels=1,
            dtype="float32",
            blocksize=self.blocksize,
            callback=self._callback,
        )
        self.stream.start()
        logger.info(f"[+] Audio output open @ {self.graph.sample_rate} Hz")

    def close(self):
        if self.stream is None:
            return
        self.stream.stop()
        self.stream.close()
        self.stream = None

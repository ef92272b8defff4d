#!/usr/bin/env python3
"""
musicswirl
==========

Audio-reactive particle swirl. Every frame the spectrum of the playing audio
is compared against its own average; each bin that rises above it becomes a
coloured disc orbiting the centre of the screen, spinning faster the louder
it is.

Usage:
    python -m musicswirl song.wav                  # live preview window
    python -m musicswirl a.mp3 b.flac              # play several files back to back
    python -m musicswirl song.wav -o result.mp4    # render to video
"""

import argparse
import logging
import os
import sys

from musicswirl.constants import (
    ANALYSER_SMOOTHING,
    DEFAULT_FPS,
    DEFAULT_RESOLUTION,
    DEFAULT_VOLUME,
)

logger = logging.getLogger("musicswirl")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="musicswirl",
        description="Visualise audio files as a swirl of spectrum-driven particles.",
    )
    parser.add_argument("inputs", nargs="+", help="Path(s) to input audio files (WAV/MP3/FLAC)")
    parser.add_argument(
        "--output", "-o", help="Render the first input to this video file instead of opening a window"
    )
    parser.add_argument("--width", type=int, default=DEFAULT_RESOLUTION[0], help="Canvas width")
    parser.add_argument("--height", type=int, default=DEFAULT_RESOLUTION[1], help="Canvas height")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Frames per second")
    parser.add_argument("--duration", type=float, help="Limit video duration in seconds (optional)")
    parser.add_argument("--volume", type=float, default=DEFAULT_VOLUME, help="Output gain, 0 to 1")
    parser.add_argument(
        "--smoothing",
        type=float,
        default=ANALYSER_SMOOTHING,
        help="Analyser smoothing constant, 0 (jumpy) to 1 (frozen)",
    )
    parser.add_argument("--mute", action="store_true", help="Preview without sound")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    # 1. Validation
    for path in args.inputs:
        if not os.path.exists(path):
            sys.exit(f"[!] Input file not found: {path}")
    if not 0 <= args.smoothing <= 1:
        sys.exit(f"[!] Smoothing must be between 0 and 1, got {args.smoothing}")

    # 2. Render or preview
    if args.output:
        from musicswirl.export import render_video

        if len(args.inputs) > 1:
            logger.warning("[i] Only the first input is rendered to video.")
        ok = render_video(
            args.inputs[0],
            args.output,
            args.width,
            args.height,
            fps=args.fps,
            duration=args.duration,
            smoothing=args.smoothing,
            volume=args.volume,
        )
    else:
        from musicswirl.preview import run_preview

        ok = run_preview(
            args.inputs,
            args.width,
            args.height,
            fps=args.fps,
            smoothing=args.smoothing,
            volume=args.volume,
            mute=args.mute,
        )

    if not ok:
        sys.exit("[!] None of the inputs could be decoded.")


if __name__ == "__main__":
    main()

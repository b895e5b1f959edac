"""Broadcast-wave energy level extension written at the end of a frame."""

from __future__ import annotations

from layertwo.bitstream import BitStream
from layertwo.options import SAMPLES_PER_FRAME, EncoderOptions, Mode

_MAX_LEVEL = 32767


def required_energy_bits(options: EncoderOptions) -> int:
    """Ancillary bits to reserve at the end of a frame for energy levels."""
    return 24 if options.mode == Mode.MONO else 40


def _peak(samples: list[int]) -> int:
    return min(max((abs(s) for s in samples[:SAMPLES_PER_FRAME]), default=0), _MAX_LEVEL)


def write_energy_levels(options: EncoderOptions, stream: BitStream) -> None:
    """Write the peak levels of the current frame's PCM into its last bytes.

    The left peak goes into the last two bytes, preceded by a zero byte; in
    modes other than mono the right peak goes into the two bytes before that.
    """
    mono = options.mode == Mode.MONO
    frame_end = stream.tell() // 8
    needed = 3 if mono else 5
    if frame_end < needed:
        raise ValueError(
            f"frame of {frame_end} bytes is too short for energy levels"
        )

    left = _peak(options.buffer[0])
    stream.buffer[frame_end - 2 : frame_end] = left.to_bytes(2, "big")
    stream.buffer[frame_end - 3] = 0

    if not mono:
        right = _peak(options.buffer[1])
        stream.buffer[frame_end - 5 : frame_end - 3] = right.to_bytes(2, "big")
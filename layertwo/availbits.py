"""Number of bits available for one Layer II frame."""

from __future__ import annotations

from layertwo.options import SAMPLES_PER_FRAME, EncoderOptions


def available_bits(options: EncoderOptions) -> int:
    """Bits available for the next frame, updating the padding decision.

    With padding enabled and a fractional frame length, the running
    ``slots_lag`` decides whether this frame gets a padding slot, which is
    recorded in ``options.header.padding``. VBR frames are never padded.
    """
    average = (SAMPLES_PER_FRAME / (options.samplerate_out / 1000.0)) * (
        options.bitrate / 8.0
    )
    whole = int(average)
    frac = average - whole

    if frac != 0 and options.padding and not options.vbr:
        if options.slots_lag > frac - 1.0:
            options.slots_lag -= frac
            options.header.padding = 0
        else:
            options.header.padding = 1
            options.slots_lag += 1 - frac

    return whole * 8
"""Absolute threshold of hearing and frequency-to-bark conversion."""

from __future__ import annotations

import math

_ENERGY_OFFSET_DB = 41.837375


def ath_db(freq: float, value: float) -> float:
    """Threshold of hearing in dB at ``freq`` Hz, raised by ``value`` dB."""
    if freq < -0.3:
        freq = 3410.0
    f = min(18.0, max(0.01, freq / 1000.0))
    ath = (
        3.640 * f**-0.8
        - 6.800 * math.exp(-0.6 * (f - 3.4) ** 2)
        + 6.000 * math.exp(-0.15 * (f - 8.7) ** 2)
        + 0.6 * 0.001 * f**4
    )
    return ath + value


def ath_energy(freq: float, value: float) -> float:
    """Threshold of hearing at ``freq`` Hz, raised by ``value`` dB, in the energy domain."""
    db = ath_db(freq, 0.0) + value
    return 10.0 ** ((db + _ENERGY_OFFSET_DB) * 0.1)


def freq_to_bark(freq: float) -> float:
    """Convert a frequency in Hz to the bark scale."""
    khz = max(freq, 0.0) * 0.001
    return 13.0 * math.atan(0.76 * khz) + 3.5 * math.atan(khz * khz / (7.5 * 7.5))
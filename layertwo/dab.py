"""CRC-8 over scalefactors for Digital Audio Broadcasting frames."""

from __future__ import annotations

from collections.abc import Sequence

from layertwo.options import CRC8_POLYNOMIAL, EncoderOptions

_SUBBAND_GROUPS = (0, 4, 8, 16, 30)


def dab_crc_update(data: int, length: int, crc: int) -> int:
    """Feed the low ``length`` bits of ``data``, most significant first, into ``crc``."""
    crc &= 0xFF
    for bit in range(length - 1, -1, -1):
        carry = bool(crc & 0x80)
        crc = (crc << 1) & 0xFF
        if carry != bool(data & (1 << bit)):
            crc ^= CRC8_POLYNOMIAL
    return crc


def dab_crc_calc(
    options: EncoderOptions,
    bit_alloc: Sequence[Sequence[int]],
    scfsi: Sequence[Sequence[int]],
    scalar: Sequence[Sequence[Sequence[int]]],
    packed: int,
) -> int:
    """CRC of the scalefactors in subband group ``packed`` (0 to 3)."""
    if not 0 <= packed < len(_SUBBAND_GROUPS) - 1:
        raise ValueError(f"subband group must be 0 to 3, not {packed}")
    first = _SUBBAND_GROUPS[packed]
    last = min(_SUBBAND_GROUPS[packed + 1], options.sblimit)

    crc = 0
    for sb in range(first, last):
        for ch in range(options.num_channels_out):
            if not bit_alloc[ch][sb]:
                continue
            select = scfsi[ch][sb]
            if select == 0:
                groups = (0, 1, 2)
            elif select in (1, 3):
                groups = (0, 2)
            elif select == 2:
                groups = (0,)
            else:
                groups = ()
            for gr in groups:
                crc = dab_crc_update(scalar[ch][gr][sb] >> 3, 3, crc)
    return crc
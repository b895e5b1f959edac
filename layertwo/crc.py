"""CRC-16 protection word for MPEG audio Layer II frames."""

from __future__ import annotations

from collections.abc import MutableSequence

from layertwo.options import CRC16_POLYNOMIAL

_HEADER_BYTES = 4
_CRC_BYTES = 2


def crc_update(value: int, crc: int, nbits: int) -> int:
    """Feed the top ``nbits`` bits of the byte ``value`` into the 16-bit ``crc``."""
    value = (value & 0xFF) << 8
    for _ in range(nbits):
        value <<= 1
        crc <<= 1
        if (crc ^ value) & 0x10000:
            crc ^= CRC16_POLYNOMIAL
    return crc & 0xFFFF


def crc_write_header(frame: MutableSequence[int], bit_count: int) -> int:
    """Compute the frame CRC and store it in bytes 4 and 5 of ``frame``.

    The CRC covers the last two header bytes and then ``bit_count`` bits
    that follow the CRC word. Returns the CRC value.
    """
    if bit_count < 0:
        raise ValueError("bit count must not be negative")
    whole_bytes, rest_bits = divmod(bit_count, 8)
    start = _HEADER_BYTES + _CRC_BYTES
    needed = start + whole_bytes + (1 if rest_bits else 0)
    if len(frame) < needed:
        raise ValueError(
            f"frame holds {len(frame)} bytes, {needed} are needed for {bit_count} bits"
        )

    crc = 0xFFFF
    crc = crc_update(frame[2], crc, 8)
    crc = crc_update(frame[3], crc, 8)
    for byte in frame[start : start + whole_bytes]:
        crc = crc_update(byte, crc, 8)
    if rest_bits:
        crc = crc_update(frame[start + whole_bytes], crc, rest_bits)

    frame[4] = crc >> 8
    frame[5] = crc & 0xFF
    return crc
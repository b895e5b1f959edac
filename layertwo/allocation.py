"""Layer II bit allocation: bits needed for a noise target and greedy allocation."""

from __future__ import annotations

from collections.abc import Sequence

from layertwo.layer2 import BITS, GROUP, SFS_PER_SCFSI, SNR, nbal_for, step_index_for
from layertwo.options import SBLIMIT, SCALE_BLOCK, EncoderOptions

_HEADER_BITS = 32
_CRC_BITS = 16
_NO_MNR_LIMIT = 999999.0

_FREE = 0
_PARTIAL = 1
_FULL = 2

BitAllocation = list[list[int]]


def _error_bits(options: EncoderOptions) -> int:
    return _CRC_BITS if options.header.error_protection else 0


def _sample_bits(step_index: int) -> int:
    return SCALE_BLOCK * GROUP[step_index] * BITS[step_index]


def _scalefactor_bits(
    options: EncoderOptions, scfsi: Sequence[Sequence[int]], ch: int, sb: int
) -> int:
    """Select and scalefactor bits for a subband getting its first allocation."""
    bits = 2 + 6 * SFS_PER_SCFSI[scfsi[ch][sb]]
    if options.num_channels_out == 2 and sb >= options.jsbound:
        bits += 2 + 6 * SFS_PER_SCFSI[scfsi[1 - ch][sb]]
    return bits


def _alloc_table_bits(options: EncoderOptions, joint: bool) -> int:
    """Bits of the allocation table; with ``joint`` only one channel above the bound."""
    nch = options.num_channels_out
    total = 0
    for sb in range(options.sblimit):
        channels = nch if (not joint or sb < options.jsbound) else 1
        total += channels * nbal_for(options.tablenum, sb)
    return total


def bits_for_nonoise(
    options: EncoderOptions,
    smr: Sequence[Sequence[float]],
    scfsi: Sequence[Sequence[int]],
    min_mnr: float,
) -> tuple[int, BitAllocation]:
    """Bits a frame needs so that every subband reaches a mask-to-noise ratio of ``min_mnr``.

    Returns the number of bits and the allocation ``[ch][sb]`` that reaches it.
    Above the joint-stereo bound only channel 0 is allocated, for both channels.
    """
    nch = options.num_channels_out
    jsbound = options.jsbound
    tablenum = options.tablenum
    bit_alloc: BitAllocation = [[0] * SBLIMIT for _ in range(2)]

    req_bits = _HEADER_BITS + _alloc_table_bits(options, joint=True) + _error_bits(options)

    for sb in range(options.sblimit):
        max_alloc = (1 << nbal_for(tablenum, sb)) - 1
        joint = nch == 2 and sb >= jsbound
        for ch in range(1 if sb >= jsbound else nch):

            def reaches(ba: int, channel: int) -> bool:
                snr = SNR[step_index_for(tablenum, sb, ba)]
                return snr - smr[channel][sb] >= min_mnr

            ba = 0
            while ba < max_alloc - 1 and not reaches(ba, ch):
                ba += 1
            if joint:
                while ba < max_alloc - 1 and not reaches(ba, 1 - ch):
                    ba += 1

            if ba > 0:
                req_bits += _sample_bits(step_index_for(tablenum, sb, ba))
                req_bits += _scalefactor_bits(options, scfsi, ch, sb)
            bit_alloc[ch][sb] = ba
    return req_bits, bit_alloc


def _lowest_mnr(mnr: list[list[float]], used: list[list[int]]) -> tuple[int, int] | None:
    """Channel and subband with the smallest MNR that can still take bits."""
    smallest = _NO_MNR_LIMIT
    found = None
    for ch, row in enumerate(mnr):
        for sb, value in enumerate(row):
            if used[ch][sb] != _FULL and smallest > value:
                smallest = value
                found = (ch, sb)
    return found


def _greedy_allocation(
    options: EncoderOptions,
    smr: Sequence[Sequence[float]],
    scfsi: Sequence[Sequence[int]],
    adb: int,
    table_bits: int,
    link_joint: bool,
) -> tuple[BitAllocation, int]:
    nch = options.num_channels_out
    sblimit = options.sblimit
    jsbound = options.jsbound
    tablenum = options.tablenum

    available = adb - (table_bits + _error_bits(options) + _HEADER_BITS)
    bit_alloc: BitAllocation = [[0] * SBLIMIT for _ in range(2)]
    mnr = [[SNR[0] - smr[ch][sb] for sb in range(sblimit)] for ch in range(nch)]
    used = [[_FREE] * sblimit for _ in range(nch)]
    spent = 0

    while (pick := _lowest_mnr(mnr, used)) is not None:
        ch, sb = pick
        current = bit_alloc[ch][sb]
        increment = _sample_bits(step_index_for(tablenum, sb, current + 1))
        if used[ch][sb]:
            increment -= _sample_bits(step_index_for(tablenum, sb, current))
            side_bits = 0
        else:
            side_bits = _scalefactor_bits(options, scfsi, ch, sb)

        if available >= spent + side_bits + increment:
            ba = current + 1
            bit_alloc[ch][sb] = ba
            spent += increment + side_bits
            used[ch][sb] = _PARTIAL
            mnr[ch][sb] = SNR[step_index_for(tablenum, sb, ba)] - smr[ch][sb]
            if ba >= (1 << nbal_for(tablenum, sb)) - 1:
                used[ch][sb] = _FULL
        else:
            used[ch][sb] = _FULL

        if link_joint and nch == 2 and sb >= jsbound:
            other = 1 - ch
            ba = bit_alloc[ch][sb]
            bit_alloc[other][sb] = ba
            used[other][sb] = used[ch][sb]
            mnr[other][sb] = SNR[step_index_for(tablenum, sb, ba)] - smr[other][sb]

    return bit_alloc, available - spent


def a_bit_allocation(
    options: EncoderOptions,
    smr: Sequence[Sequence[float]],
    scfsi: Sequence[Sequence[int]],
    adb: int,
) -> tuple[BitAllocation, int]:
    """Give bits to the subband with the lowest MNR until nothing more fits.

    ``adb`` is the number of bits available for the frame. Returns the
    allocation ``[ch][sb]`` and the number of bits left over. Above the
    joint-stereo bound both channels share one allocation.
    """
    table_bits = _alloc_table_bits(options, joint=True)
    return _greedy_allocation(options, smr, scfsi, adb, table_bits, link_joint=True)


def vbr_bit_allocation(
    options: EncoderOptions,
    smr: Sequence[Sequence[float]],
    scfsi: Sequence[Sequence[int]],
    adb: int,
) -> tuple[BitAllocation, int]:
    """Greedy allocation for a VBR frame whose bitrate was chosen to fit.

    Joint stereo is not used in VBR mode, so every channel carries its own
    allocation. Returns the allocation ``[ch][sb]`` and the bits left over.
    """
    table_bits = _alloc_table_bits(options, joint=False)
    return _greedy_allocation(options, smr, scfsi, adb, table_bits, link_joint=False)
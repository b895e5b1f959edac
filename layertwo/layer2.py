"""Layer II allocation tables, scalefactors and frame side-information writing."""

from __future__ import annotations

from collections.abc import MutableSequence, Sequence

from layertwo.bitstream import BitStream
from layertwo.options import (
    SBLIMIT,
    SCALE_BLOCK,
    EncoderOptions,
    Mode,
    MpegVersion,
)

NUMTABLES = 5

# Each allocation line gives the step index reached by each allocation value.
STEP_INDEX: tuple[tuple[int, ...], ...] = (
    (0, 1, 3, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15, 16, 17),
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 17),
    (0, 1, 2, 3, 4, 5, 6, 17, 0, 0, 0, 0, 0, 0, 0, 0),
    (0, 1, 2, 17, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),
    (0, 1, 2, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15, 16),
    (0, 1, 2, 4, 5, 6, 7, 8, 0, 0, 0, 0, 0, 0, 0, 0),
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15),
    (0, 1, 2, 4, 5, 6, 7, 8, 0, 0, 0, 0, 0, 0, 0, 0),
    (0, 1, 2, 4, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),
)

# Bits used to transmit the allocation value on each line.
NBAL: tuple[int, ...] = (4, 4, 3, 2, 4, 3, 4, 3, 2)

# Per step index: number of quantisation steps.
STEPS: tuple[int, ...] = (
    0, 3, 5, 7, 9, 15, 31, 63, 127, 255, 511, 1023, 2047, 4095, 8191, 16383, 32767, 65535,
)
# Per step index: the power of two just below the number of steps.
STEPS2N: tuple[int, ...] = (
    0, 2, 4, 4, 8, 8, 16, 32, 64, 128, 256, 512, 1024, 2048, 4096, 8192, 16384, 32768,
)
# Per step index: bits per codeword.
BITS: tuple[int, ...] = (0, 5, 7, 3, 10, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15, 16)
# Per step index: 3 when each sample has its own codeword, 1 when three share one.
GROUP: tuple[int, ...] = (0, 1, 1, 3, 1, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3)

TABLE_SBLIMIT: tuple[int, ...] = (27, 30, 8, 12, 30)

_NO_LINE = -1
LINE: tuple[tuple[int, ...], ...] = (
    (0, 0, 0, 1, 1, 1, 1, 1, 1, 1, 1, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 3, 3, 3, 3)
    + (_NO_LINE,) * 5,
    (0, 0, 0, 1, 1, 1, 1, 1, 1, 1, 1, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 3, 3, 3, 3, 3, 3, 3)
    + (_NO_LINE,) * 2,
    (4, 4, 5, 5, 5, 5, 5, 5) + (_NO_LINE,) * 24,
    (4, 4, 5, 5, 5, 5, 5, 5, 5, 5, 5, 5) + (_NO_LINE,) * 20,
    (6, 6, 6, 6, 7, 7, 7, 7, 7, 7, 7) + (8,) * 21,
)

SCALEFACTORS: tuple[float, ...] = (
    2.00000000000000, 1.58740105196820, 1.25992104989487,
    1.00000000000000, 0.79370052598410, 0.62996052494744, 0.50000000000000,
    0.39685026299205, 0.31498026247372, 0.25000000000000, 0.19842513149602,
    0.15749013123686, 0.12500000000000, 0.09921256574801, 0.07874506561843,
    0.06250000000000, 0.04960628287401, 0.03937253280921, 0.03125000000000,
    0.02480314143700, 0.01968626640461, 0.01562500000000, 0.01240157071850,
    0.00984313320230, 0.00781250000000, 0.00620078535925, 0.00492156660115,
    0.00390625000000, 0.00310039267963, 0.00246078330058, 0.00195312500000,
    0.00155019633981, 0.00123039165029, 0.00097656250000, 0.00077509816991,
    0.00061519582514, 0.00048828125000, 0.00038754908495, 0.00030759791257,
    0.00024414062500, 0.00019377454248, 0.00015379895629, 0.00012207031250,
    0.00009688727124, 0.00007689947814, 0.00006103515625, 0.00004844363562,
    0.00003844973907, 0.00003051757813, 0.00002422181781, 0.00001922486954,
    0.00001525878906, 0.00001211090890, 0.00000961243477, 0.00000762939453,
    0.00000605545445, 0.00000480621738, 0.00000381469727, 0.00000302772723,
    0.00000240310869, 0.00000190734863, 0.00000151386361, 0.00000120155435,
    1e-20,
)
MULTIPLE = SCALEFACTORS

# Signal-to-noise ratio in dB reached by each step index.
SNR: tuple[float, ...] = (
    0.00, 7.00, 11.00, 16.00, 20.84, 25.28, 31.59, 37.75, 43.84,
    49.89, 55.93, 61.96, 67.98, 74.01, 80.03, 86.05, 92.01, 98.01,
)

SFS_PER_SCFSI: tuple[int, ...] = (3, 2, 1, 2)

_JS_BOUNDS = (4, 8, 12, 16)
_UNUSED_SF = 1e-20


def _line(tablenum: int, sb: int) -> int:
    if not 0 <= tablenum < NUMTABLES:
        raise ValueError(f"allocation table must be 0 to {NUMTABLES - 1}, not {tablenum}")
    if not 0 <= sb < SBLIMIT:
        raise ValueError(f"subband must be 0 to {SBLIMIT - 1}, not {sb}")
    line = LINE[tablenum][sb]
    if line == _NO_LINE:
        raise ValueError(f"subband {sb} is above the limit of table {tablenum}")
    return line


def nbal_for(tablenum: int, sb: int) -> int:
    """Bits used to transmit the allocation of subband ``sb`` in table ``tablenum``."""
    return NBAL[_line(tablenum, sb)]


def step_index_for(tablenum: int, sb: int, alloc: int) -> int:
    """Step index reached by allocation value ``alloc`` in subband ``sb``."""
    line = _line(tablenum, sb)
    if not 0 <= alloc < (1 << NBAL[line]):
        raise ValueError(f"allocation {alloc} is out of range for subband {sb}")
    return STEP_INDEX[line][alloc]


def js_bound(mode_ext: int) -> int:
    """First joint-stereo subband for a mode extension value of 0 to 3."""
    if not 0 <= mode_ext < len(_JS_BOUNDS):
        raise ValueError(f"bad mode extension {mode_ext}")
    return _JS_BOUNDS[mode_ext]


def encode_init(options: EncoderOptions) -> None:
    """Choose the allocation table, subband limit and joint-stereo bound."""
    header = options.header
    br_per_ch = options.bitrate // options.num_channels_out
    sfrq = int(options.samplerate_out / 1000.0)

    if header.version == MpegVersion.MPEG1:
        if options.freeformat:
            tablenum = 0 if sfrq == 48 else 1
        elif (sfrq == 48 and br_per_ch >= 56) or 56 <= br_per_ch <= 80:
            tablenum = 0
        elif sfrq != 48 and br_per_ch >= 96:
            tablenum = 1
        elif sfrq != 32 and br_per_ch <= 48:
            tablenum = 2
        else:
            tablenum = 3
    else:
        tablenum = 4

    options.tablenum = tablenum
    options.sblimit = TABLE_SBLIMIT[tablenum]
    if options.mode == Mode.JOINT_STEREO:
        options.jsbound = js_bound(header.mode_ext)
    else:
        options.jsbound = options.sblimit


def _scalefactor_index(peak: float) -> int:
    step, index = 16, 32
    while step:
        if peak <= SCALEFACTORS[index]:
            index += step
        else:
            index -= step
        step >>= 1
    if peak > SCALEFACTORS[index]:
        index -= 1
    return index


def scalefactor_calc(
    sb_sample: Sequence[Sequence[Sequence[Sequence[float]]]], nch: int, sblimit: int
) -> list[list[list[int]]]:
    """Scalefactor indices ``[ch][gr][sb]`` for each block of twelve subband samples.

    Subbands at and above ``sblimit`` are left at 0.
    """
    result = [[[0] * SBLIMIT for _ in range(3)] for _ in range(nch)]
    for ch, channel in enumerate(sb_sample[:nch]):
        for gr, granule in enumerate(channel[:3]):
            row = result[ch][gr]
            for sb in range(sblimit):
                peak = max(abs(samples[sb]) for samples in granule[:SCALE_BLOCK])
                row[sb] = _scalefactor_index(peak)
    return result


def combine_lr(
    sb_sample: Sequence[Sequence[Sequence[Sequence[float]]]], sblimit: int
) -> list[list[list[float]]]:
    """Mean of the left and right subband samples, as ``[gr][sample][sb]``."""
    left, right = sb_sample[0], sb_sample[1]
    joint = [[[0.0] * SBLIMIT for _ in range(SCALE_BLOCK)] for _ in range(3)]
    for gr in range(3):
        for sample in range(SCALE_BLOCK):
            lrow, rrow, out = left[gr][sample], right[gr][sample], joint[gr][sample]
            for sb in range(sblimit):
                out[sb] = 0.5 * (lrow[sb] + rrow[sb])
    return joint


def find_sf_max(
    options: EncoderOptions, sf_index: Sequence[Sequence[Sequence[int]]]
) -> list[list[float]]:
    """Largest of the three scalefactors of each subband, as ``[ch][sb]``."""
    sf_max = [[_UNUSED_SF] * SBLIMIT for _ in range(2)]
    for ch in range(options.num_channels_out):
        for sb in range(options.sblimit):
            lowest = min(sf_index[ch][gr][sb] for gr in range(3))
            sf_max[ch][sb] = MULTIPLE[lowest]
    return sf_max


_PATTERN = (
    (0x123, 0x122, 0x122, 0x133, 0x123),
    (0x113, 0x111, 0x111, 0x444, 0x113),
    (0x111, 0x111, 0x111, 0x333, 0x113),
    (0x222, 0x222, 0x222, 0x333, 0x123),
    (0x123, 0x122, 0x122, 0x133, 0x123),
)


def _difference_class(dscf: int) -> int:
    if dscf <= -3:
        return 0
    if dscf < 0:
        return 1
    if dscf == 0:
        return 2
    if dscf < 3:
        return 3
    return 4


def sf_transmission_pattern(
    options: EncoderOptions, sf_index: Sequence[Sequence[MutableSequence[int]]]
) -> list[list[int]]:
    """Pick the scalefactor select information for each subband.

    ``sf_index`` is updated in place so that the scalefactors that are not
    transmitted take the value of the one that replaces them. Returns the
    select information as ``[ch][sb]``.
    """
    select = [[0] * SBLIMIT for _ in range(2)]
    for ch in range(options.num_channels_out):
        s0, s1, s2 = sf_index[ch][0], sf_index[ch][1], sf_index[ch][2]
        for sb in range(options.sblimit):
            class0 = _difference_class(s0[sb] - s1[sb])
            class1 = _difference_class(s1[sb] - s2[sb])
            pattern = _PATTERN[class0][class1]
            if pattern == 0x123:
                select[ch][sb] = 0
            elif pattern == 0x122:
                select[ch][sb] = 3
                s2[sb] = s1[sb]
            elif pattern == 0x133:
                select[ch][sb] = 3
                s1[sb] = s2[sb]
            elif pattern == 0x113:
                select[ch][sb] = 1
                s1[sb] = s0[sb]
            elif pattern == 0x111:
                select[ch][sb] = 2
                s1[sb] = s2[sb] = s0[sb]
            elif pattern == 0x222:
                select[ch][sb] = 2
                s0[sb] = s2[sb] = s1[sb]
            elif pattern == 0x333:
                select[ch][sb] = 2
                s0[sb] = s1[sb] = s2[sb]
            else:
                select[ch][sb] = 2
                s0[sb] = min(s0[sb], s2[sb])
                s1[sb] = s2[sb] = s0[sb]
    return select


def write_header(options: EncoderOptions, stream: BitStream) -> None:
    """Write the 32-bit frame header."""
    header = options.header
    stream.put_bits(0xFFF, 12)
    stream.put_bit(int(header.version))
    stream.put_bits(4 - header.lay, 2)
    stream.put_bit(0 if header.error_protection else 1)
    stream.put_bits(header.bitrate_index, 4)
    stream.put_bits(header.samplerate_idx, 2)
    stream.put_bit(int(header.padding))
    stream.put_bit(int(header.private_extension))
    stream.put_bits(int(header.mode), 2)
    stream.put_bits(header.mode_ext, 2)
    stream.put_bit(int(header.copyright))
    stream.put_bit(int(header.original))
    stream.put_bits(int(header.emphasis), 2)


def write_bit_alloc(
    options: EncoderOptions, bit_alloc: Sequence[Sequence[int]], stream: BitStream
) -> None:
    """Write the allocation of each subband; one channel only above the joint-stereo bound."""
    nch = options.num_channels_out
    for sb in range(options.sblimit):
        width = nbal_for(options.tablenum, sb)
        for ch in range(nch if sb < options.jsbound else 1):
            stream.put_bits(bit_alloc[ch][sb], width)
            options.num_crc_bits += width


def write_scalefactors(
    options: EncoderOptions,
    bit_alloc: Sequence[Sequence[int]],
    sf_selectinfo: Sequence[Sequence[int]],
    sf_index: Sequence[Sequence[Sequence[int]]],
    stream: BitStream,
) -> None:
    """Write the select information, then the transmitted scalefactors."""
    nch = options.num_channels_out
    allocated = [
        (sb, ch)
        for sb in range(options.sblimit)
        for ch in range(nch)
        if bit_alloc[ch][sb]
    ]
    for sb, ch in allocated:
        stream.put_bits(sf_selectinfo[ch][sb], 2)
        options.num_crc_bits += 2

    for sb, ch in allocated:
        selection = sf_selectinfo[ch][sb]
        if selection == 0:
            groups: tuple[int, ...] = (0, 1, 2)
        elif selection in (1, 3):
            groups = (0, 2)
        elif selection == 2:
            groups = (0,)
        else:
            groups = ()
        for gr in groups:
            stream.put_bits(sf_index[ch][gr][sb], 6)
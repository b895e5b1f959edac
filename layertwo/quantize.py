"""Quantisation of Layer II subband samples and writing them to a frame."""

from __future__ import annotations

from collections.abc import Sequence

from layertwo.bitstream import BitStream
from layertwo.layer2 import BITS, GROUP, SCALEFACTORS, STEPS, STEPS2N, step_index_for
from layertwo.options import SBLIMIT, SCALE_BLOCK, EncoderOptions

# Quantisation coefficients per step index: a scaled sample x becomes a*x + b.
A: tuple[float, ...] = (
    0.0,
    0.750000000, 0.625000000, 0.875000000, 0.562500000, 0.937500000,
    0.968750000, 0.984375000, 0.992187500, 0.996093750, 0.998046875,
    0.999023438, 0.999511719, 0.999755859, 0.999877930, 0.999938965,
    0.999969482, 0.999984741,
)

B: tuple[float, ...] = (
    0.0,
    -0.250000000, -0.375000000, -0.125000000, -0.437500000, -0.062500000,
    -0.031250000, -0.015625000, -0.007812500, -0.003906250, -0.001953125,
    -0.000976563, -0.000488281, -0.000244141, -0.000122070, -0.000061035,
    -0.000030518, -0.000015259,
)

SubbandSamples = Sequence[Sequence[Sequence[Sequence[float]]]]


def _quantize(scaled: float, a: float, b: float, half: int) -> int:
    """Quantise one sample already divided by its scalefactor.

    The result carries the inverted sign bit at the position of ``half``.
    """
    d = scaled * a + b
    if d >= 0:
        return int(d * half) | half
    return max(int((d + 1.0) * half), 0)


def subband_quantization(
    options: EncoderOptions,
    sf_index: Sequence[Sequence[Sequence[int]]],
    sb_samples: SubbandSamples,
    j_scale: Sequence[Sequence[int]] | None,
    j_samples: Sequence[Sequence[Sequence[float]]] | None,
    bit_alloc: Sequence[Sequence[int]],
) -> list[list[list[list[int]]]]:
    """Quantise the subband samples of one frame, as ``[ch][gr][sample][sb]``.

    Above the joint-stereo bound of a two-channel frame the joint samples
    ``j_samples`` with scalefactors ``j_scale`` are quantised into channel 0.
    Subbands without allocation, and those at or above the subband limit, are 0.
    """
    nch = options.num_channels_out
    sblimit = options.sblimit
    jsbound = options.jsbound
    sbband = [
        [[[0] * SBLIMIT for _ in range(SCALE_BLOCK)] for _ in range(3)]
        for _ in range(nch)
    ]

    for sb in range(sblimit):
        for ch in range(nch if sb < jsbound else 1):
            alloc = bit_alloc[ch][sb]
            if not alloc:
                continue
            joint = nch == 2 and sb >= jsbound
            if joint and (j_samples is None or j_scale is None):
                raise ValueError(
                    f"subband {sb} is joint stereo but no joint samples were given"
                )
            idx = step_index_for(options.tablenum, sb, alloc)
            a, b, half = A[idx], B[idx], STEPS2N[idx]
            for gr in range(3):
                if joint:
                    scale = SCALEFACTORS[j_scale[gr][sb]]
                    block = j_samples[gr]
                else:
                    scale = SCALEFACTORS[sf_index[ch][gr][sb]]
                    block = sb_samples[ch][gr]
                out = sbband[ch][gr]
                for j, samples in enumerate(block[:SCALE_BLOCK]):
                    out[j][sb] = _quantize(samples[sb] / scale, a, b, half)
    return sbband


def write_samples(
    options: EncoderOptions,
    sbband: Sequence[Sequence[Sequence[Sequence[int]]]],
    bit_alloc: Sequence[Sequence[int]],
    stream: BitStream,
) -> None:
    """Write the quantised samples of one frame.

    Samples with 3, 5 or 9 steps are sent three to a codeword
    ``x + steps*y + steps*steps*z``; all others get a codeword each.
    """
    nch = options.num_channels_out
    jsbound = options.jsbound
    for gr in range(3):
        for j in range(0, SCALE_BLOCK, 3):
            for sb in range(options.sblimit):
                for ch in range(nch if sb < jsbound else 1):
                    alloc = bit_alloc[ch][sb]
                    if not alloc:
                        continue
                    idx = step_index_for(options.tablenum, sb, alloc)
                    width = BITS[idx]
                    triple = [sbband[ch][gr][j + x][sb] for x in range(3)]
                    if GROUP[idx] == 3:
                        for value in triple:
                            stream.put_bits(value, width)
                    else:
                        steps = STEPS[idx]
                        x, y, z = triple
                        stream.put_bits(x + y * steps + z * steps * steps, width)
"""Encoder settings, frame header fields and the constants shared by the encoder."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

SBLIMIT = 32
SSLIMIT = 18
SCALE_BLOCK = 12
SCALE_RANGE = 64
SCALE = 32768
FFT_SIZE = 1024
HAN_SIZE = 512
SAMPLES_PER_FRAME = 1152
CRC16_POLYNOMIAL = 0x8005
CRC8_POLYNOMIAL = 0x1D
FREEFORMAT_MAX_BITRATE = 450
NOISY_MIN_MNR = 0.0
NUM_BITRATE_INDICES = 15


class Mode(IntEnum):
    """Channel mode; the non-negative values are the two header bits."""

    NOT_SET = -2
    AUTO = -1
    STEREO = 0
    JOINT_STEREO = 1
    DUAL_CHANNEL = 2
    MONO = 3


class MpegVersion(IntEnum):
    """MPEG audio version, as written in the header ID bit."""

    MPEG2 = 0
    MPEG1 = 1


class Padding(IntEnum):
    """Frame padding policy."""

    NONE = 0
    ALL = 1


class Emphasis(IntEnum):
    """De-emphasis, as written in the two header bits."""

    NONE = 0
    MS_50_15 = 1
    CCITT_J17 = 3


@dataclass
class FrameHeader:
    """Raw header fields of one MPEG audio frame."""

    version: int = MpegVersion.MPEG1
    lay: int = 2
    error_protection: bool = False
    bitrate_index: int = 0
    samplerate_idx: int = 0
    padding: int = 0
    private_extension: int = 0
    mode: int = Mode.STEREO
    mode_ext: int = 0
    copyright: bool = False
    original: bool = False
    emphasis: int = Emphasis.NONE


def _zeros(n: int) -> list[int]:
    return [0] * n


def _pcm_buffer() -> list[list[int]]:
    return [[0] * SAMPLES_PER_FRAME for _ in range(2)]


@dataclass
class EncoderOptions:
    """All settings and running state of one encoder instance."""

    # Input PCM
    samplerate_in: int = 44100
    samplerate_out: int = 44100
    num_channels_in: int = 2
    num_channels_out: int = 2

    # Output stream
    version: MpegVersion = MpegVersion.MPEG1
    bitrate: int = 192
    mode: Mode = Mode.AUTO
    padding: Padding = Padding.NONE
    do_energy_levels: bool = False
    num_ancillary_bits: int = 0
    freeformat: bool = False

    # Psychoacoustic model
    psymodel: int = 3
    athlevel: float = 0.0
    quickmode: bool = False
    quickcount: int = 10

    # VBR
    vbr: bool = False
    vbr_upper_index: int = 0
    vbr_max_bitrate: int = 0
    vbrlevel: float = 0.0

    # Header flags
    emphasis: Emphasis = Emphasis.NONE
    copyright: bool = False
    original: bool = False
    private_extension: int = 0
    error_protection: bool = False

    # Digital Audio Broadcasting extensions
    do_dab: bool = False
    dab_crc_len: int = 2
    dab_crc: list[int] = field(default_factory=lambda: _zeros(4))
    dab_xpad_len: int = 0

    verbosity: int = 2

    # Scaling
    scale: float = 1.0
    scale_left: float = 1.0
    scale_right: float = 1.0

    # Available bits
    slots_lag: float = 0.0

    # Bit allocation
    lower_index: int = 0
    upper_index: int = 0
    bitrateindextobits: list[int] = field(
        default_factory=lambda: _zeros(NUM_BITRATE_INDICES)
    )
    vbr_frame_count: int = 0

    # Frame encoding state
    buffer: list[list[int]] = field(default_factory=_pcm_buffer)
    samples_in_buffer: int = 0
    psycount: int = 0
    num_crc_bits: int = 0

    # Frame info
    header: FrameHeader = field(default_factory=FrameHeader)
    jsbound: int = SBLIMIT
    sblimit: int = SBLIMIT
    tablenum: int = 0

    vbrstats: list[int] = field(default_factory=lambda: _zeros(NUM_BITRATE_INDICES))
# layertwo

Pure-Python building blocks for an MPEG Audio Layer II (MP2) encoder.
The package provides the pieces that turn subband samples and
signal-to-mask ratios into the fields of a valid Layer II frame.

## Modules

- `layertwo.options`: encoder settings and running state (`EncoderOptions`),
  the frame header fields (`FrameHeader`), the enumerations `Mode`,
  `MpegVersion`, `Padding` and `Emphasis`, and shared constants such as
  `SBLIMIT`, `SCALE_BLOCK` and `SAMPLES_PER_FRAME`.
- `layertwo.bitstream`: `BitStream`, a fixed-size, zero-filled, MSB-first bit
  writer with `put_bit`, `put_bits`, `tell` and `getvalue`. A write that does
  not fit raises `BufferFullError`.
- `layertwo.crc`: the CRC-16 that protects the header and side information.
  `crc_write_header(frame, bit_count)` computes it over header bytes 2 and 3
  plus `bit_count` bits following the CRC word, stores it in bytes 4 and 5
  and returns it.
- `layertwo.dab`: the CRC-8 over scalefactors used for Digital Audio
  Broadcasting (`dab_crc_update`, `dab_crc_calc`).
- `layertwo.ath`: the absolute threshold of hearing in dB (`ath_db`) and in the
  energy domain (`ath_energy`), and `freq_to_bark`.
- `layertwo.availbits`: `available_bits(options)`, the bits available for the
  next frame; with padding enabled it also decides whether the frame is padded
  and records this in `options.header.padding`.
- `layertwo.energy`: `required_energy_bits` and `write_energy_levels`, which
  write the peak PCM levels of the frame into its last bytes.
- `layertwo.layer2`: the allocation tables, `encode_init` (table, subband limit
  and joint-stereo bound), `scalefactor_calc`, `combine_lr`, `find_sf_max`,
  `sf_transmission_pattern`, and the writers `write_header`, `write_bit_alloc`
  and `write_scalefactors`.
- `layertwo.quantize`: `subband_quantization` and `write_samples`.
- `layertwo.allocation`: `bits_for_nonoise`, and the greedy allocators
  `a_bit_allocation` (constant bitrate, joint-stereo aware) and
  `vbr_bit_allocation`. Each returns the allocation and the bits left over.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Example

Write a CRC-protected frame header and an empty allocation table, then fill
in the CRC:

```python
from layertwo.bitstream import BitStream
from layertwo.crc import crc_write_header
from layertwo.layer2 import encode_init, write_bit_alloc, write_header
from layertwo.options import SBLIMIT, EncoderOptions

options = EncoderOptions()
options.header.error_protection = True
encode_init(options)            # picks table 1, sblimit 30 at 44.1 kHz, 192 kbps

stream = BitStream(1024)
write_header(options, stream)   # 32 header bits
stream.put_bits(0, 16)          # room for the CRC word
bit_alloc = [[0] * SBLIMIT for _ in range(2)]
write_bit_alloc(options, bit_alloc, stream)

crc = crc_write_header(stream.buffer, options.num_crc_bits)
frame = stream.getvalue()
```

```python
from layertwo.ath import ath_db, freq_to_bark

print(ath_db(1000.0, 0.0))  # threshold of hearing at 1 kHz, in dB
print(freq_to_bark(1000.0))
```

## What this package does not do

It is a library of encoder parts, not a complete encoder. It has no command
line tool, does not read or write audio files, and has no polyphase
filterbank or psychoacoustic model: the subband samples and signal-to-mask
ratios that the quantiser and the allocators work on must come from
elsewhere. There is also no single call that encodes PCM into finished
frames; the caller strings the steps together.
# hevckit

Read and inspect HEVC (H.265) elementary streams in pure Python, with no
third-party dependencies.

## What it does

- `hevckit.bitreader.BitReader` reads bits, unsigned and signed Exp-Golomb
  codes (`read_ue`, `read_se`) and little-endian fixed-size values from HEVC
  payloads, skipping emulation-prevention bytes (`00 00 03`) as it crosses
  byte boundaries. `BitReader.bits_needed` gives the bit width used for
  slice segment addresses.
- `hevckit.pcc_bitstream.PccBitReader` is a plain bit reader with
  big-endian integer reads and UVLC/SVLC codes (`read_uvlc`, `read_svlc`).
- `hevckit.nal` finds NAL units in Annex B streams (`read_nal_units`),
  reads a NAL unit header (`read_nal_unit_header`), converts a stream to
  4-byte length-prefixed units (`convert_to_length_prefixed`), rewrites
  every start code in its 4-byte form (`expand_start_code_prefixes`),
  locates the NAL unit that ends a frame (`find_frame_end`) and collects
  the last VPS, SPS and PPS of a stream (`parse_decoder_parameters`). It
  also defines `NALUnitType`, `SliceType`, `NALUnit`, `DecoderParameters`,
  `profile_name` and `tier_name`.
- `hevckit.syntax` parses the syntax structures that parameter sets are
  built from: `parse_profile_tier_level`, `parse_hrd_parameters`,
  `parse_sub_layer_hrd_parameters`, `parse_vui_parameters` and
  `parse_scaling_list_data`.
- `hevckit.ref_pic_sets` parses short-term reference picture sets
  (`parse_short_term_ref_pic_set`), including inter-set prediction, and
  raises `ValueError` for sets out of range for the stream.
- `hevckit.decoder` holds the frame-queue bookkeeping for hardware decoder
  back ends: `CachedFrame`, `DecoderConfig` and the abstract
  `HWVideoDecoderBase`, whose subclasses supply the actual decoding and
  texture upload.
- `hevckit.timer` gives `get_time_us` and `get_time_ms`, wall-clock time
  elapsed since the timer was first read.

## Installation

```
pip install .
```

## Example

```python
from hevckit.nal import NALUnitType, convert_to_length_prefixed, read_nal_units

with open("clip.hevc", "rb") as stream:
    data = stream.read()

for unit in read_nal_units(data):
    print(NALUnitType(unit.type).label, unit.offset, unit.length)

length_prefixed = convert_to_length_prefixed(data)
```

Reading Exp-Golomb codes directly:

```python
from hevckit.bitreader import BitReader

reader = BitReader(b"\x5c")   # bits 010 111 00
print(reader.read_ue(), reader.read_se())   # 1 -1
```

## What it does not do

The package does not parse whole VPS, SPS or PPS NAL units into
structures, and it does not read slice segment headers or slice data. It
does not decode pictures: `HWVideoDecoderBase` only manages queues, and a
working decoder has to be provided by a subclass. There is no command-line
tool.

## Tests

```
pip install .[test]
pytest
```
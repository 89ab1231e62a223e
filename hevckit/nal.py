"""NAL unit discovery and Annex B stream conversion for HEVC."""

from __future__ import annotations

import enum
import struct
from collections.abc import Sequence
from dataclasses import dataclass

from hevckit.bitreader import BitReader

START_CODE = b"\x00\x00\x00\x01"


class NALUnitType(enum.IntEnum):
    """HEVC ``nal_unit_type`` values, plus ``INVALID`` for "none found"."""

    CODED_SLICE_TRAIL_N = 0
    CODED_SLICE_TRAIL_R = 1
    CODED_SLICE_TSA_N = 2
    CODED_SLICE_TSA_R = 3
    CODED_SLICE_STSA_N = 4
    CODED_SLICE_STSA_R = 5
    CODED_SLICE_RADL_N = 6
    CODED_SLICE_RADL_R = 7
    CODED_SLICE_RASL_N = 8
    CODED_SLICE_RASL_R = 9
    RESERVED_VCL_N10 = 10
    RESERVED_VCL_R11 = 11
    RESERVED_VCL_N12 = 12
    RESERVED_VCL_R13 = 13
    RESERVED_VCL_N14 = 14
    RESERVED_VCL_R15 = 15
    CODED_SLICE_BLA_W_LP = 16
    CODED_SLICE_BLA_W_RADL = 17
    CODED_SLICE_BLA_N_LP = 18
    CODED_SLICE_IDR_W_RADL = 19
    CODED_SLICE_IDR_N_LP = 20
    CODED_SLICE_CRA = 21
    RESERVED_IRAP_VCL22 = 22
    RESERVED_IRAP_VCL23 = 23
    RESERVED_VCL24 = 24
    RESERVED_VCL25 = 25
    RESERVED_VCL26 = 26
    RESERVED_VCL27 = 27
    RESERVED_VCL28 = 28
    RESERVED_VCL29 = 29
    RESERVED_VCL30 = 30
    RESERVED_VCL31 = 31
    VPS = 32
    SPS = 33
    PPS = 34
    ACCESS_UNIT_DELIMITER = 35
    EOS = 36
    EOB = 37
    FILLER_DATA = 38
    PREFIX_SEI = 39
    SUFFIX_SEI = 40
    RESERVED_NVCL41 = 41
    RESERVED_NVCL42 = 42
    RESERVED_NVCL43 = 43
    RESERVED_NVCL44 = 44
    RESERVED_NVCL45 = 45
    RESERVED_NVCL46 = 46
    RESERVED_NVCL47 = 47
    UNSPECIFIED_48 = 48
    UNSPECIFIED_49 = 49
    UNSPECIFIED_50 = 50
    UNSPECIFIED_51 = 51
    UNSPECIFIED_52 = 52
    UNSPECIFIED_53 = 53
    UNSPECIFIED_54 = 54
    UNSPECIFIED_55 = 55
    UNSPECIFIED_56 = 56
    UNSPECIFIED_57 = 57
    UNSPECIFIED_58 = 58
    UNSPECIFIED_59 = 59
    UNSPECIFIED_60 = 60
    UNSPECIFIED_61 = 61
    UNSPECIFIED_62 = 62
    UNSPECIFIED_63 = 63
    INVALID = 64

    @property
    def label(self) -> str:
        """Display name, e.g. ``NAL_UNIT_SPS``."""
        if self is NALUnitType.INVALID:
            return "INVALID"
        return f"NAL_UNIT_{self.name}"


class SliceType(enum.IntEnum):
    """HEVC ``slice_type`` values."""

    INVALID = -1
    B_SLICE = 0
    P_SLICE = 1
    I_SLICE = 2

    @property
    def label(self) -> str:
        return self.name


@dataclass
class NALUnit:
    """Location of one NAL unit, start code included, within a byte stream."""

    type: NALUnitType = NALUnitType.INVALID
    offset: int = 0
    length: int = 0
    header_length: int = 0

    def payload(self, data: bytes) -> bytes:
        """The unit's bytes from ``data`` without its start code."""
        return bytes(data[self.offset + self.header_length:self.offset + self.length])


@dataclass
class DecoderParameters:
    """VPS, SPS and PPS NAL units, each prefixed with a 4-byte start code."""

    vps: bytes = b""
    sps: bytes = b""
    pps: bytes = b""


_FRAME_END_TYPES = frozenset(
    {
        NALUnitType.CODED_SLICE_IDR_W_RADL,
        NALUnitType.CODED_SLICE_TRAIL_N,
        NALUnitType.CODED_SLICE_TRAIL_R,
        NALUnitType.CODED_SLICE_TSA_N,
        NALUnitType.CODED_SLICE_TSA_R,
        NALUnitType.CODED_SLICE_STSA_N,
        NALUnitType.CODED_SLICE_STSA_R,
        NALUnitType.CODED_SLICE_RADL_N,
        NALUnitType.CODED_SLICE_RADL_R,
        NALUnitType.CODED_SLICE_RASL_N,
        NALUnitType.CODED_SLICE_RASL_R,
    }
)

_PROFILE_NAMES = {1: "Main", 2: "Main 10", 3: "Main Still Picture"}
_TIER_NAMES = {1: "Main", 2: "High"}


def _start_code_length(buf: bytes, i: int) -> int:
    """Length of a start code at ``i`` (3 or 4), or 0 if there is none."""
    if buf[i] == 0 and buf[i + 1] == 0:
        if buf[i + 2] == 1:
            return 3
        if len(buf) - i >= 4 and buf[i + 2] == 0 and buf[i + 3] == 1:
            return 4
    return 0


def read_nal_unit_header(reader: BitReader) -> NALUnitType:
    """Find the first start code, consume it and the 2-byte NAL header.

    Returns ``NALUnitType.INVALID`` when the data holds no start code.
    """
    buf = reader.data
    for i in range(max(0, len(buf) - 3)):
        start = _start_code_length(buf, i)
        if not start:
            continue
        reader.seek(start)
        if reader.read_bits(1):
            raise ValueError("forbidden_zero_bit is set in NAL unit header")
        nal_type = NALUnitType(reader.read_bits(6))
        reader.read_bits(6)  # nuh_layer_id
        reader.read_bits(3)  # nuh_temporal_id_plus1
        return nal_type
    return NALUnitType.INVALID


def read_nal_units(data: bytes | bytearray | memoryview, start: int = 0) -> list[NALUnit]:
    """Locate every start-code-prefixed NAL unit in ``data`` from ``start`` on."""
    buf = bytes(data[start:])
    size = len(buf)
    units: list[NALUnit] = []

    i = 0
    while i + 3 < size:
        header_length = _start_code_length(buf, i)
        if not header_length:
            i += 1
            continue
        header_pos = i + header_length
        if header_pos < size:
            first = buf[header_pos]
            if first & 0x80:
                raise ValueError(f"forbidden_zero_bit is set in NAL unit at offset {start + i}")
            nal_type = NALUnitType((first >> 1) & 0x3F)
        else:
            nal_type = NALUnitType.INVALID
        units.append(NALUnit(type=nal_type, offset=i, header_length=header_length))
        i += 4

    for current, following in zip(units, units[1:]):
        current.length = following.offset - current.offset
    if units:
        units[-1].length = size - units[-1].offset

    for unit in units:
        unit.offset += start
    return units


def convert_to_length_prefixed(data: bytes | bytearray | memoryview) -> bytes:
    """Convert an Annex B stream into 4-byte big-endian length-prefixed units."""
    data = bytes(data)
    out = bytearray()
    for unit in read_nal_units(data):
        payload = unit.payload(data)
        out += struct.pack(">I", len(payload) & 0xFFFFFFFF)
        out += payload
    return bytes(out)


def expand_start_code_prefixes(data: bytes | bytearray | memoryview) -> bytes:
    """Rewrite every start code in an Annex B stream as the 4-byte form."""
    data = bytes(data)
    return b"".join(START_CODE + unit.payload(data) for unit in read_nal_units(data))


def find_frame_end(start_index: int, nal_units: Sequence[NALUnit]) -> int:
    """Index of the NAL unit that ends the frame beginning at ``start_index``.

    A frame ends at its first non-IRAP coded slice (or IDR_W_RADL), or at the
    suffix SEI that directly follows it. Returns ``start_index`` if none.
    """
    for i in range(start_index, len(nal_units)):
        if nal_units[i].type in _FRAME_END_TYPES:
            if i + 1 < len(nal_units) and nal_units[i + 1].type == NALUnitType.SUFFIX_SEI:
                return i + 1
            return i
    return start_index


def parse_decoder_parameters(data: bytes | bytearray | memoryview) -> DecoderParameters:
    """Collect the last VPS, SPS and PPS of a stream, each start-code prefixed."""
    data = bytes(data)
    params = DecoderParameters()
    for unit in read_nal_units(data):
        if unit.type == NALUnitType.VPS:
            params.vps = START_CODE + unit.payload(data)
        elif unit.type == NALUnitType.SPS:
            params.sps = START_CODE + unit.payload(data)
        elif unit.type == NALUnitType.PPS:
            params.pps = START_CODE + unit.payload(data)
    return params


def profile_name(profile: int) -> str:
    """Human-readable name of a general profile idc."""
    return _PROFILE_NAMES.get(profile, "Unknown")


def tier_name(tier: int) -> str:
    """Human-readable name of a tier value."""
    return _TIER_NAMES.get(tier, "Unknown")
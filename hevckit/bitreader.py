"""MSB-first bit reader for HEVC elementary streams."""

from __future__ import annotations

import struct

INITIAL_BITMASK = 0x80
_UINT32_MASK = 0xFFFFFFFF


class BitReader:
    """Reads bits, bytes and Exp-Golomb codes from an HEVC byte stream.

    Emulation prevention bytes (``00 00 03``) are skipped transparently
    whenever the reader crosses a byte boundary bit by bit.
    """

    def __init__(self, data: bytes | bytearray | memoryview = b"") -> None:
        self._data = bytes(data)
        self.position = 0
        self.bitmask = INITIAL_BITMASK

    @property
    def data(self) -> bytes:
        return self._data

    @property
    def length(self) -> int:
        return len(self._data)

    def _clamp(self) -> None:
        self.position = max(0, min(self.position, len(self._data)))

    def _handle_epb(self) -> None:
        pos = self.position
        data = self._data
        if 2 <= pos < len(data) and data[pos - 2] == 0 and data[pos - 1] == 0 and data[pos] == 0x03:
            self.position += 1

    def align(self) -> None:
        """Move to the start of the next byte unless already byte aligned."""
        if self.bitmask != INITIAL_BITMASK:
            self.bitmask = INITIAL_BITMASK
            self.position += 1
            self._clamp()

    def reset(self) -> None:
        """Rewind to the first bit of the data."""
        self.position = 0
        self.bitmask = INITIAL_BITMASK

    def shift_bitmask(self) -> None:
        """Advance by one bit."""
        self.bitmask >>= 1
        if self.bitmask == 0:
            self.bitmask = INITIAL_BITMASK
            self.position += 1
            self._handle_epb()
            self._clamp()

    def read_bits(self, count: int = 1) -> int:
        """Read ``count`` bits (at most 32) as an unsigned integer."""
        if not 0 <= count <= 32:
            raise ValueError(f"cannot read {count} bits; the limit is 32")
        result = 0
        for _ in range(count):
            if self.position >= len(self._data):
                raise EOFError("read past the end of the bitstream")
            bit = 1 if self._data[self.position] & self.bitmask else 0
            result = (result << 1) | bit
            self.shift_bitmask()
        return result

    def seek(self, count: int) -> None:
        """Move ``count`` bytes relative to the current byte and realign."""
        self.bitmask = INITIAL_BITMASK
        self.position += count
        self._clamp()

    def skip_bytes(self, count: int) -> None:
        """Align, then skip ``count`` whole bytes."""
        self.align()
        self.position += count
        self._clamp()

    def skip_bits(self, count: int) -> None:
        """Skip ``count`` bits, honouring emulation prevention bytes."""
        self._handle_epb()
        for _ in range(count // 8):
            self.position += 1
            self._handle_epb()
        self._clamp()
        for _ in range(count % 8):
            self.shift_bitmask()

    def read_bytes(self, size: int) -> bytes:
        """Align, then return up to ``size`` bytes."""
        self.align()
        count = min(self.bytes_available(), size)
        chunk = self._data[self.position:self.position + count]
        self.position += count
        return chunk

    def bytes_available(self) -> int:
        return len(self._data) - self.position

    def _read_value(self, fmt: str, default: int | float = 0) -> int | float:
        self.align()
        size = struct.calcsize(fmt)
        if self.position + size < len(self._data):
            (value,) = struct.unpack_from(fmt, self._data, self.position)
            self.position += size
            return value
        return default

    def read_int8(self) -> int:
        return self._read_value("<b")

    def read_uint8(self) -> int:
        return self._read_value("<B")

    def read_int16(self) -> int:
        return self._read_value("<h")

    def read_uint16(self) -> int:
        return self._read_value("<H")

    def read_int32(self) -> int:
        return self._read_value("<i")

    def read_uint32(self) -> int:
        return self._read_value("<I")

    def read_int64(self) -> int:
        return self._read_value("<q")

    def read_uint64(self) -> int:
        return self._read_value("<Q")

    def read_float(self) -> float:
        return self._read_value("<f", 0.0)

    def read_double(self) -> float:
        return self._read_value("<d", 0.0)

    def read_ue(self) -> int:
        """Read an unsigned Exp-Golomb code; prefixes of 32+ zeros yield 0."""
        zeros = 0
        while not self.read_bits(1):
            zeros += 1
        if zeros >= 32:
            return 0
        return ((1 << zeros) - 1 + self.read_bits(zeros)) & _UINT32_MASK

    def read_se(self) -> int:
        """Read a signed Exp-Golomb code."""
        value = self.read_ue()
        if value & 0x80000000:
            value -= 1 << 32
        if value & 1:
            return (value + 1) >> 1
        return -(value >> 1)

    @staticmethod
    def bits_needed(value: int) -> int:
        """Smallest bit count ``n`` (at least 1) with ``value <= 2**n``."""
        needed = 1
        while value > (1 << needed):
            needed += 1
        return needed
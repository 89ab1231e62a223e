"""MSB-first bit reader for point cloud compression bitstreams."""

from __future__ import annotations

import struct

INITIAL_BITMASK = 0x80
_UINT32_MASK = 0xFFFFFFFF


class PccBitReader:
    """Reads bits, big-endian integers and VLC codes from a byte buffer."""

    def __init__(self, data: bytes | bytearray | memoryview = b"") -> None:
        self.data = bytes(data)
        self.position = 0
        self.bitmask = INITIAL_BITMASK

    @property
    def length(self) -> int:
        return len(self.data)

    def _clamp(self) -> None:
        self.position = max(0, min(self.position, len(self.data)))

    def is_aligned(self) -> bool:
        return self.bitmask == INITIAL_BITMASK

    def align(self) -> None:
        """Move to the start of the next byte unless already byte aligned."""
        if self.bitmask != INITIAL_BITMASK:
            self.bitmask = INITIAL_BITMASK
            self.position += 1
            self._clamp()

    def shift_bitmask(self) -> None:
        """Advance by one bit."""
        self.bitmask >>= 1
        if self.bitmask == 0:
            self.bitmask = INITIAL_BITMASK
            self.position += 1
            self._clamp()

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
        """Skip ``count`` bits."""
        self.position += count // 8
        for _ in range(count % 8):
            self.shift_bitmask()

    def read_bits(self, count: int = 1) -> int:
        """Read ``count`` bits (at most 32) as an unsigned integer."""
        if not 0 <= count <= 32:
            raise ValueError(f"cannot read {count} bits; the limit is 32")
        result = 0
        for _ in range(count):
            if self.position >= len(self.data):
                raise EOFError("read past the end of the bitstream")
            bit = 1 if self.data[self.position] & self.bitmask else 0
            result = (result << 1) | bit
            self.shift_bitmask()
        return result

    def read_bytes(self, size: int) -> bytes:
        """Align, then return up to ``size`` bytes."""
        self.align()
        count = max(0, min(self.bytes_available(), size))
        chunk = self.data[self.position:self.position + count]
        self.position += count
        return chunk

    def bytes_available(self) -> int:
        return len(self.data) - self.position

    def _read_value(self, fmt: str) -> int:
        self.align()
        size = struct.calcsize(fmt)
        if self.position + size < len(self.data):
            (value,) = struct.unpack_from(fmt, self.data, self.position)
            self.position += size
            return value
        return 0

    def read_int8(self) -> int:
        return self._read_value(">b")

    def read_uint8(self) -> int:
        return self._read_value(">B")

    def read_int16(self) -> int:
        return self._read_value(">h")

    def read_uint16(self) -> int:
        return self._read_value(">H")

    def read_int32(self) -> int:
        return self._read_value(">i")

    def read_uint32(self) -> int:
        return self._read_value(">I")

    def read_int64(self) -> int:
        return self._read_value(">q")

    def read_uint64(self) -> int:
        return self._read_value(">Q")

    def read_uvlc(self) -> int:
        """Read an unsigned variable length (Exp-Golomb) code."""
        if self.read_bits(1):
            return 0
        length = 1
        while not self.read_bits(1):
            length += 1
        return (self.read_bits(length) + (1 << length) - 1) & _UINT32_MASK

    def read_svlc(self) -> int:
        """Read a signed variable length code."""
        bits = self.read_uvlc()
        if bits & 1:
            return (bits >> 1) + 1
        return -(bits >> 1)
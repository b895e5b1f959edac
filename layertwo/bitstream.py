"""Fixed-size big-endian bit writer for building MPEG audio frames."""

from __future__ import annotations


class BufferFullError(Exception):
    """Raised when a write does not fit in the remaining space of a BitStream."""


class BitStream:
    """Writes bits most-significant first into a fixed-size, zero-filled buffer."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError("buffer size must not be negative")
        self.buffer = bytearray(size)
        self._totbit = 0

    @property
    def capacity(self) -> int:
        """Total number of bits the buffer can hold."""
        return len(self.buffer) * 8

    @property
    def remaining(self) -> int:
        """Number of bits still free."""
        return self.capacity - self._totbit

    def put_bit(self, bit: int) -> None:
        """Append the lowest bit of ``bit``."""
        if self.remaining < 1:
            raise BufferFullError("bit stream buffer needs to be bigger")
        byte_idx, used = divmod(self._totbit, 8)
        self.buffer[byte_idx] |= (bit & 1) << (7 - used)
        self._totbit += 1

    def put_bits(self, value: int, nbits: int) -> None:
        """Append the lowest ``nbits`` bits of ``value``, most significant first."""
        if nbits < 0:
            raise ValueError("number of bits must not be negative")
        if nbits > self.remaining:
            raise BufferFullError(
                f"cannot write {nbits} bits, only {self.remaining} bits left"
            )
        value &= (1 << nbits) - 1
        left = nbits
        while left > 0:
            byte_idx, used = divmod(self._totbit, 8)
            free = 8 - used
            k = min(left, free)
            chunk = (value >> (left - k)) & ((1 << k) - 1)
            self.buffer[byte_idx] |= chunk << (free - k)
            self._totbit += k
            left -= k

    def tell(self) -> int:
        """Number of bits written so far."""
        return self._totbit

    def getvalue(self) -> bytes:
        """The bytes written so far, the last one zero-padded."""
        return bytes(self.buffer[: (self._totbit + 7) // 8])
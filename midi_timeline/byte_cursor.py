"""midi_timeline.byte_cursor

Positional reader over an immutable byte buffer.

Provides the primitive reads every other decoder builds on: raw byte runs,
big-endian unsigned integers and MIDI variable-length quantities.
"""
from typing import Union

from .exceptions import InvalidInputError, TruncatedError

VLQ_MASK = 0xFFFFFFFF


class ByteCursor:
    """Sequential big-endian reader.

    Example:
        >>> cur = ByteCursor(b'\\x00\\x60\\x81\\x00')
        >>> cur.read_uint16()
        96
        >>> cur.read_vlq()
        128
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview], position: int = 0):
        self.data = bytes(data)
        self.position = position

    @property
    def remaining(self) -> int:
        return len(self.data) - self.position

    @property
    def at_end(self) -> bool:
        return self.position >= len(self.data)

    def read_bytes(self, n: int) -> bytes:
        """Read exactly ``n`` raw bytes.

        Raises:
            TruncatedError: If fewer than ``n`` bytes are left.
        """
        if n < 0:
            raise InvalidInputError(f"cannot read a negative number of bytes: {n}", parameter_name="n", expected=">= 0")
        end = self.position + n
        if end > len(self.data):
            raise TruncatedError(
                f"needed {n} bytes at offset {self.position}, only {self.remaining} left",
                position=self.position, needed=n)
        chunk = self.data[self.position:end]
        self.position = end
        return chunk

    def read_uint(self, size: int) -> int:
        """Read an unsigned big-endian integer of 1, 2 or 4 bytes."""
        if size not in (1, 2, 4):
            raise InvalidInputError(f"unsupported integer size: {size}", parameter_name="size", expected="1, 2 or 4")
        return int.from_bytes(self.read_bytes(size), byteorder='big')

    def read_uint8(self) -> int:
        return self.read_uint(1)

    def read_uint16(self) -> int:
        return self.read_uint(2)

    def read_uint32(self) -> int:
        return self.read_uint(4)

    def read_vlq(self) -> int:
        """Read a MIDI variable-length quantity.

        Each byte contributes its low 7 bits, most significant group first;
        a set high bit means another byte follows. The result is kept within
        a 32-bit accumulator.

        Raises:
            TruncatedError: If the buffer ends in the middle of the quantity.
        """
        start = self.position
        result = 0
        while True:
            if self.at_end:
                raise TruncatedError(
                    f"variable-length quantity starting at offset {start} is unterminated",
                    position=self.position, needed=1)
            byte = self.data[self.position]
            self.position += 1
            result = ((result << 7) | (byte & 0x7F)) & VLQ_MASK
            if not byte & 0x80:
                return result


def encode_vlq(value: int) -> bytes:
    """Encode a non-negative integer as a MIDI variable-length quantity."""
    if value < 0:
        raise InvalidInputError(f"variable-length quantity must be non-negative, got {value}", parameter_name="value", expected=">= 0")
    groups = [value & 0x7F]
    value >>= 7
    while value:
        groups.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(groups))

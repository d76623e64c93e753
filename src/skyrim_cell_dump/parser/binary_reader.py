"""Low-level binary reader with typed read methods and a moving cursor."""

import struct

from skyrim_cell_dump.errors import UnexpectedEofError


_U16 = struct.Struct("<H")
_I16 = struct.Struct("<h")
_U32 = struct.Struct("<I")
_I32 = struct.Struct("<i")
_U64 = struct.Struct("<Q")
_I64 = struct.Struct("<q")
_F32 = struct.Struct("<f")


class BinaryReader:
    """Wraps a bytes buffer with typed little-endian reads and a moving cursor.

    Key design: slice(size) returns a new BinaryReader bounded to the next
    `size` bytes. This lets record parsers read freely without overrunning
    into the next record. The underlying buffer is never copied; reads past
    the boundary raise UnexpectedEofError and leave the cursor where it was.
    """

    __slots__ = ("_data", "_pos", "_end")

    def __init__(self, data: bytes, offset: int = 0, end: int | None = None) -> None:
        self._data = data
        self._pos = offset
        self._end = end if end is not None else len(data)

    @property
    def position(self) -> int:
        return self._pos

    @property
    def end(self) -> int:
        return self._end

    @property
    def remaining(self) -> int:
        return self._end - self._pos

    def _check(self, size: int, what: str) -> None:
        if size < 0 or self._pos + size > self._end:
            raise UnexpectedEofError(
                f"{what} of {size} bytes at offset {self._pos} "
                f"would exceed boundary at {self._end}"
            )

    def _unpack(self, fmt: struct.Struct):
        self._check(fmt.size, "Read")
        value = fmt.unpack_from(self._data, self._pos)[0]
        self._pos += fmt.size
        return value

    def uint8(self) -> int:
        self._check(1, "Read")
        value = self._data[self._pos]
        self._pos += 1
        return value

    def int8(self) -> int:
        value = self.uint8()
        return value - 0x100 if value & 0x80 else value

    def uint16(self) -> int:
        return self._unpack(_U16)

    def int16(self) -> int:
        return self._unpack(_I16)

    def uint32(self) -> int:
        return self._unpack(_U32)

    def int32(self) -> int:
        return self._unpack(_I32)

    def uint64(self) -> int:
        return self._unpack(_U64)

    def int64(self) -> int:
        return self._unpack(_I64)

    def float32(self) -> float:
        return self._unpack(_F32)

    def bytes(self, size: int) -> bytes:
        self._check(size, "Read")
        chunk = bytes(self._data[self._pos : self._pos + size])
        self._pos += size
        return chunk

    def signature(self) -> str:
        """Read a 4-byte ASCII record type signature (e.g. 'CELL', 'GRUP')."""
        return self.bytes(4).decode("latin-1")

    def peek_signature(self) -> str:
        """Return the next 4-byte signature without advancing."""
        self._check(4, "Peek")
        return bytes(self._data[self._pos : self._pos + 4]).decode("latin-1")

    def skip(self, size: int) -> None:
        self._check(size, "Skip")
        self._pos += size

    def slice(self, size: int) -> "BinaryReader":
        """Return a new BinaryReader bounded to the next `size` bytes.

        Advances this reader's cursor past the sliced region.
        """
        self._check(size, "Slice")
        sub = BinaryReader(self._data, self._pos, self._pos + size)
        self._pos += size
        return sub

    def seek(self, offset: int) -> None:
        """Seek to an absolute position within the bounded region."""
        if offset < 0 or offset > self._end:
            raise UnexpectedEofError(f"Seek to {offset} is outside bounds [0, {self._end}]")
        self._pos = offset

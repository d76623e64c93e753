"""Split a record payload into (signature, data) subrecords.

Each subrecord is a 6-byte header (4-char type + uint16 size) followed by
its data. Payloads over 65535 bytes are written as an XXXX subrecord whose
uint32 data is the real size of the subrecord that follows; the following
subrecord's own size field is then meaningless.
"""

from collections.abc import Iterator

from skyrim_cell_dump.errors import TruncatedSubrecordError
from skyrim_cell_dump.models.constants import SUBRECORD_HEADER_SIZE, XXXX
from skyrim_cell_dump.models.records import Subrecord
from skyrim_cell_dump.parser.binary_reader import BinaryReader


def _read_header(reader: BinaryReader) -> tuple[str, int]:
    if reader.remaining < SUBRECORD_HEADER_SIZE:
        raise TruncatedSubrecordError(
            f"Subrecord header at offset {reader.position} needs "
            f"{SUBRECORD_HEADER_SIZE} bytes, only {reader.remaining} left"
        )
    return reader.signature(), reader.uint16()


def _read_data(reader: BinaryReader, sig: str, size: int) -> bytes:
    if size > reader.remaining:
        raise TruncatedSubrecordError(
            f"Subrecord {sig!r} at offset {reader.position} declares {size} bytes, "
            f"only {reader.remaining} left in record"
        )
    return reader.bytes(size)


def iter_subrecords(reader: BinaryReader) -> Iterator[Subrecord]:
    """Yield subrecords from a bounded reader covering one record's data.

    An XXXX entry is consumed together with the subrecord it resizes, so
    callers only ever see real subrecords.
    """
    while reader.remaining > 0:
        sig, size = _read_header(reader)
        if sig == XXXX:
            payload = _read_data(reader, sig, size)
            if len(payload) < 4:
                raise TruncatedSubrecordError(
                    f"XXXX subrecord at offset {reader.position - len(payload)} holds "
                    f"{len(payload)} bytes, needs 4 for the size override"
                )
            big_size = BinaryReader(payload).uint32()
            sig, _ = _read_header(reader)
            size = big_size
        yield Subrecord(type=sig, data=_read_data(reader, sig, size))

"""Record-level decoding: headers, compressed payloads, TES4/WRLD/CELL fields.

Record layout (24-byte header, then data_size bytes of data):
  type(4) data_size(4) flags(4) form_id(4) revision(4) version(2) unknown(2)

When the compressed flag is set, the data is a uint32 decompressed size
followed by a zlib stream. Everything past this module sees the same
BinaryReader over plain subrecord bytes regardless of compression.
"""

import logging
import zlib

from skyrim_cell_dump.errors import DecompressionError, MissingHeaderError
from skyrim_cell_dump.models.constants import TES4
from skyrim_cell_dump.models.plugin import PluginHeader, World
from skyrim_cell_dump.models.records import RecordHeader
from skyrim_cell_dump.parser.binary_reader import BinaryReader
from skyrim_cell_dump.parser.options import DEFAULT_OPTIONS, ParseOptions
from skyrim_cell_dump.parser.subrecords import iter_subrecords
from skyrim_cell_dump.parser.text import decode_zstring


logger = logging.getLogger(__name__)


def read_record_header(reader: BinaryReader) -> RecordHeader:
    return RecordHeader(
        type=reader.signature(),
        data_size=reader.uint32(),
        flags=reader.uint32(),
        form_id=reader.uint32(),
        revision=reader.uint32(),
        version=reader.uint16(),
        unknown=reader.uint16(),
    )


def skip_record_data(reader: BinaryReader, header: RecordHeader) -> None:
    """Jump past a record's data without looking at it."""
    reader.skip(header.data_size)


def _inflate(compressed: bytes, expected_size: int, header: RecordHeader) -> bytes:
    decompressor = zlib.decompressobj()
    try:
        if expected_size:
            raw = decompressor.decompress(compressed, expected_size)
        else:
            raw = decompressor.decompress(compressed)
    except zlib.error as exc:
        raise DecompressionError(
            f"{header.type} record {header.form_id:#010x}: corrupt zlib stream ({exc})"
        ) from exc

    if decompressor.unconsumed_tail or len(raw) != expected_size:
        raise DecompressionError(
            f"{header.type} record {header.form_id:#010x}: declared {expected_size} "
            f"decompressed bytes, stream holds "
            f"{'more' if decompressor.unconsumed_tail else len(raw)}"
        )
    if not decompressor.eof:
        raise DecompressionError(
            f"{header.type} record {header.form_id:#010x}: zlib stream is truncated"
        )
    return raw


def read_record_data(reader: BinaryReader, header: RecordHeader) -> BinaryReader:
    """Return a reader over the record's (decompressed) subrecord bytes.

    Advances `reader` past the record data either way.
    """
    data_reader = reader.slice(header.data_size)
    if not header.is_compressed:
        return data_reader

    # First 4 bytes of data = decompressed size, rest is zlib-compressed
    if data_reader.remaining < 4:
        raise DecompressionError(
            f"{header.type} record {header.form_id:#010x}: compressed data is "
            f"{data_reader.remaining} bytes, too short for its size prefix"
        )
    decompressed_size = data_reader.uint32()
    compressed = data_reader.bytes(data_reader.remaining)
    logger.debug(
        "Inflating %s %#010x: %d -> %d bytes",
        header.type, header.form_id, len(compressed), decompressed_size,
    )
    return BinaryReader(_inflate(compressed, decompressed_size, header))


def read_plugin_header(
    reader: BinaryReader,
    options: ParseOptions = DEFAULT_OPTIONS,
) -> tuple[RecordHeader, PluginHeader]:
    """Read the TES4 record that must open every plugin.

    HEDR holds version (float32), number of records and groups (uint32)
    and next object id (uint32). CNAM is the author, SNAM the optional
    description, and each MAST names one master in load order.
    """
    found = reader.peek_signature() if reader.remaining >= 4 else "<eof>"
    if found != TES4:
        raise MissingHeaderError(f"Expected TES4 header at offset {reader.position}, got {found!r}")

    header = read_record_header(reader)
    data = read_record_data(reader, header)

    hedr: tuple[float, int, int] | None = None
    author: str | None = None
    description: str | None = None
    masters: list[str] = []

    for sub in iter_subrecords(data):
        if sub.type == "HEDR":
            hedr_reader = BinaryReader(sub.data)
            hedr = (hedr_reader.float32(), hedr_reader.uint32(), hedr_reader.uint32())
        elif sub.type == "CNAM":
            author = decode_zstring(sub.data, options.text_errors)
        elif sub.type == "SNAM":
            description = decode_zstring(sub.data, options.text_errors)
        elif sub.type == "MAST":
            name = decode_zstring(sub.data, options.text_errors)
            if name in masters:
                logger.warning("Master %r listed twice in TES4; keeping first", name)
                continue
            masters.append(name)
        # DATA (master size), INTV, INCC, ONAM... are not needed

    if hedr is None:
        raise MissingHeaderError("TES4 record has no HEDR subrecord")
    if author is None:
        raise MissingHeaderError("TES4 record has no CNAM (author) subrecord")

    version, num_records_and_groups, next_object_id = hedr
    return header, PluginHeader(
        version=version,
        num_records_and_groups=num_records_and_groups,
        next_object_id=next_object_id,
        author=author,
        description=description,
        masters=tuple(masters),
    )


def decode_world(
    header: RecordHeader,
    data: BinaryReader,
    options: ParseOptions = DEFAULT_OPTIONS,
) -> World:
    editor_id = None
    for sub in iter_subrecords(data):
        if sub.type == "EDID":
            editor_id = decode_zstring(sub.data, options.text_errors)
    return World(form_id=header.form_id, editor_id=editor_id)


def decode_cell_fields(
    data: BinaryReader,
    options: ParseOptions = DEFAULT_OPTIONS,
) -> tuple[str | None, tuple[int, int] | None]:
    """Return (editor_id, (x, y) or None) from a CELL record's subrecords.

    XCLC is x(int32), y(int32), then a uint32 land-hide flag word that
    0.94-era files omit; only the first 8 bytes are read.
    """
    editor_id = None
    grid = None
    for sub in iter_subrecords(data):
        if sub.type == "EDID":
            editor_id = decode_zstring(sub.data, options.text_errors)
        elif sub.type == "XCLC":
            xclc = BinaryReader(sub.data)
            grid = (xclc.int32(), xclc.int32())
    return editor_id, grid

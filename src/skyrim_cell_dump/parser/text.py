"""Decode zero-terminated strings stored in plugin subrecords.

Skyrim writes EDID, CNAM, SNAM and MAST text as Windows-1252 with a trailing
NUL. Python's cp1252 codec leaves 0x81, 0x8D, 0x8F, 0x90 and 0x9D unmapped,
so those bytes are reported instead of guessed at.
"""

from skyrim_cell_dump.errors import InvalidTextError


ENCODING = "cp1252"


def decode_zstring(data: bytes, errors: str = "strict") -> str:
    """Strip one trailing NUL and decode the rest as Windows-1252.

    Args:
        data: Raw subrecord payload.
        errors: "strict" raises InvalidTextError on an unmapped byte,
            "replace" substitutes U+FFFD.
    """
    if data.endswith(b"\x00"):
        data = data[:-1]
    try:
        return data.decode(ENCODING, errors=errors)
    except UnicodeDecodeError as exc:
        raise InvalidTextError(
            f"Byte 0x{data[exc.start]:02X} at index {exc.start} "
            f"has no {ENCODING} mapping in {bytes(data)!r}"
        ) from exc

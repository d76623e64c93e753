"""Exceptions raised while parsing a plugin file.

Every error is fatal to the current parse: plugin offsets are chained, so
once one size is wrong there is no point to resume from.
"""


class PluginParseError(ValueError):
    """Base class for malformed or unsupported plugin data."""


class UnexpectedEofError(PluginParseError):
    """A read ran past the end of the buffer (truncated input)."""


class InvalidTextError(PluginParseError):
    """A string subrecord holds bytes that are not valid Windows-1252."""


class TruncatedSubrecordError(PluginParseError):
    """A subrecord declares more data than its record has left."""


class DecompressionError(PluginParseError):
    """A compressed record payload is corrupt or has the wrong size."""


class GroupSizeMismatchError(PluginParseError):
    """A GRUP's contents did not end exactly at its declared size."""


class MissingHeaderError(PluginParseError):
    """The plugin does not start with a complete TES4 header record."""

"""Raw record, subrecord and group header data classes."""

from dataclasses import dataclass

from skyrim_cell_dump.models.constants import GroupType, RecordFlags


@dataclass(frozen=True, slots=True)
class Subrecord:
    """A single subrecord within a record (e.g. EDID, XCLC, MAST)."""
    type: str        # 4-char ASCII signature
    data: bytes      # raw payload (size is len(data), XXXX already applied)


@dataclass(frozen=True, slots=True)
class RecordHeader:
    """24-byte record header preceding the record data."""
    type: str        # 4-char signature (e.g. "CELL", "WRLD")
    data_size: int   # size of the record data (after header)
    flags: int       # record flags (bit 18 = compressed)
    form_id: int
    revision: int
    version: int
    unknown: int = 0

    @property
    def is_compressed(self) -> bool:
        return bool(self.flags & RecordFlags.COMPRESSED)

    @property
    def record_flags(self) -> RecordFlags:
        # Unknown bits are preserved in `flags`; IntFlag keeps them too.
        return RecordFlags(self.flags)


@dataclass(frozen=True, slots=True)
class GroupHeader:
    """24-byte GRUP header. size includes the header itself."""
    size: int        # total group size (including this 24-byte header)
    label: bytes     # raw 4-byte label; meaning depends on group_type
    group_type: int
    timestamp: int
    version_control: int
    unknown: int = 0

    @property
    def label_signature(self) -> str:
        """Label as a record type tag (meaningful for top groups only)."""
        return self.label.decode("ascii", errors="replace")

    @property
    def label_form_id(self) -> int:
        """Label as a parent form id (world/cell/topic children groups)."""
        return int.from_bytes(self.label, "little")

    @property
    def kind(self) -> GroupType | None:
        try:
            return GroupType(self.group_type)
        except ValueError:
            return None

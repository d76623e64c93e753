"""Skyrim plugin format constants: header sizes, type tags, group types, flags.

Values follow the UESP "Mod File Format" pages for TES5.
"""

from enum import IntEnum, IntFlag


# Sizes in bytes
RECORD_HEADER_SIZE = 24
GROUP_HEADER_SIZE = 24
SUBRECORD_HEADER_SIZE = 6

# Record / group signatures
GRUP = "GRUP"
TES4 = "TES4"
WRLD = "WRLD"
CELL = "CELL"

# Subrecord that overrides the 16-bit size of the subrecord after it
XXXX = "XXXX"


class GroupType(IntEnum):
    """Numeric GRUP type; decides how the 4-byte label is interpreted."""
    TOP = 0                          # label: record type, e.g. "WRLD"
    WORLD_CHILDREN = 1               # label: parent WRLD form id
    INTERIOR_CELL_BLOCK = 2          # label: block number
    INTERIOR_CELL_SUB_BLOCK = 3      # label: sub-block number
    EXTERIOR_CELL_BLOCK = 4          # label: grid y, x (int16 each)
    EXTERIOR_CELL_SUB_BLOCK = 5      # label: grid y, x (int16 each)
    CELL_CHILDREN = 6                # label: parent CELL form id
    TOPIC_CHILDREN = 7               # label: parent DIAL form id
    CELL_PERSISTENT_CHILDREN = 8     # label: parent CELL form id
    CELL_TEMPORARY_CHILDREN = 9      # label: parent CELL form id
    CELL_VISIBLE_DISTANT_CHILDREN = 10


class RecordFlags(IntFlag):
    """Record header flag bits. Meaning of some bits depends on record type."""
    MASTER_FILE = 0x0000_0001        # TES4 only
    DELETED_GROUP = 0x0000_0010
    DELETED_RECORD = 0x0000_0020
    CONSTANT = 0x0000_0040
    LOCALIZED = 0x0000_0080          # TES4 only
    INACCESSIBLE = 0x0000_0100
    LIGHT_MASTER_FILE = 0x0000_0200  # TES4 only
    PERSISTENT = 0x0000_0400
    INITIALLY_DISABLED = 0x0000_0800
    IGNORED = 0x0000_1000
    VISIBLE_WHEN_DISTANT = 0x0000_8000
    RANDOM_ANIM_START = 0x0001_0000
    OFF_LIMITS = 0x0002_0000
    COMPRESSED = 0x0004_0000
    CANT_WAIT = 0x0008_0000
    IGNORE_OBJECT_INTERACTION = 0x0010_0000
    IS_MARKER = 0x0080_0000
    NO_AI_ACQUIRE = 0x0200_0000
    NAVMESH_FILTER = 0x0400_0000
    NAVMESH_BOUNDING_BOX = 0x0800_0000
    REFLECTED_BY_AUTO_WATER = 0x1000_0000
    DONT_HAVOK_SETTLE = 0x2000_0000
    NO_RESPAWN = 0x4000_0000
    MULTI_BOUND = 0x8000_0000

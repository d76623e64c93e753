"""Selective depth-first walk over GRUP trees, yielding WRLD and CELL entities.

Plugin structure relevant to cells:

  GRUP(top, "WRLD")
    WRLD
    GRUP(world children, label=WRLD form id)
      CELL                                  <- persistent world cell
      GRUP(cell children)
        GRUP(persistent children) REFR...
      GRUP(exterior block)
        GRUP(exterior sub-block)
          CELL
          GRUP(cell children) ...
  GRUP(top, "CELL")
    GRUP(interior block)
      GRUP(interior sub-block)
        CELL
        GRUP(cell children) ...

Every other top-level group is jumped over by its declared size without
reading a byte of it. Whether to enter a group is decided by group_action()
from (group type, label) alone; the recursion only carries a
TraversalContext value down and drops it on the way back up.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, replace
from enum import Enum

from skyrim_cell_dump.errors import GroupSizeMismatchError
from skyrim_cell_dump.models.constants import (
    CELL,
    GROUP_HEADER_SIZE,
    GRUP,
    WRLD,
    GroupType,
)
from skyrim_cell_dump.models.plugin import Cell, World
from skyrim_cell_dump.models.records import GroupHeader, RecordHeader
from skyrim_cell_dump.parser.binary_reader import BinaryReader
from skyrim_cell_dump.parser.options import DEFAULT_OPTIONS, ParseOptions
from skyrim_cell_dump.parser.record_reader import (
    decode_cell_fields,
    decode_world,
    read_record_data,
    read_record_header,
    skip_record_data,
)


logger = logging.getLogger(__name__)


class GroupAction(Enum):
    ENTER = "enter"
    SKIP = "skip"


# Top-level groups worth entering, by label
_WANTED_TOP_LABELS = frozenset({WRLD.encode("ascii"), CELL.encode("ascii")})

# Nested groups, by type. Anything not listed (topic children, unknown
# types) is skipped.
_NESTED_ACTIONS: dict[GroupType, GroupAction] = {
    GroupType.WORLD_CHILDREN: GroupAction.ENTER,
    GroupType.INTERIOR_CELL_BLOCK: GroupAction.ENTER,
    GroupType.INTERIOR_CELL_SUB_BLOCK: GroupAction.ENTER,
    GroupType.EXTERIOR_CELL_BLOCK: GroupAction.ENTER,
    GroupType.EXTERIOR_CELL_SUB_BLOCK: GroupAction.ENTER,
    GroupType.CELL_CHILDREN: GroupAction.ENTER,
    GroupType.TOPIC_CHILDREN: GroupAction.SKIP,
    GroupType.CELL_PERSISTENT_CHILDREN: GroupAction.ENTER,
    GroupType.CELL_TEMPORARY_CHILDREN: GroupAction.ENTER,
    GroupType.CELL_VISIBLE_DISTANT_CHILDREN: GroupAction.ENTER,
}

_PERSISTENCE_BY_TYPE: dict[GroupType, bool] = {
    GroupType.CELL_PERSISTENT_CHILDREN: True,
    GroupType.CELL_TEMPORARY_CHILDREN: False,
    GroupType.CELL_VISIBLE_DISTANT_CHILDREN: False,
}


@dataclass(frozen=True, slots=True)
class TraversalContext:
    """Where in the group tree the walk currently is."""
    world_form_id: int | None = None
    is_persistent: bool = False


def group_action(group_type: int, label: bytes) -> GroupAction:
    """Decide whether a group is entered or skipped whole."""
    try:
        kind = GroupType(group_type)
    except ValueError:
        return GroupAction.SKIP
    if kind is GroupType.TOP:
        return GroupAction.ENTER if label in _WANTED_TOP_LABELS else GroupAction.SKIP
    return _NESTED_ACTIONS.get(kind, GroupAction.SKIP)


def child_context(
    context: TraversalContext,
    header: GroupHeader,
    last_world_id: int | None = None,
) -> TraversalContext:
    """Context for the contents of `header`'s group, entered from `context`.

    A world children group belongs to the WRLD record just before it at the
    same level. Without one the cells inside have no known world.
    """
    kind = header.kind
    if kind is GroupType.TOP:
        return TraversalContext()
    if kind is GroupType.WORLD_CHILDREN:
        if last_world_id is None:
            logger.debug(
                "World children group for %#010x has no WRLD before it", header.label_form_id
            )
        return replace(context, world_form_id=last_world_id)
    if kind in _PERSISTENCE_BY_TYPE:
        return replace(context, is_persistent=_PERSISTENCE_BY_TYPE[kind])
    return context


def read_group_header(reader: BinaryReader) -> GroupHeader:
    """Read a GRUP header. Assumes the 'GRUP' signature has already been consumed."""
    return GroupHeader(
        size=reader.uint32(),
        label=reader.bytes(4),
        group_type=reader.int32(),
        timestamp=reader.uint16(),
        version_control=reader.uint16(),
        unknown=reader.uint32(),
    )


def build_cell(
    header: RecordHeader,
    editor_id: str | None,
    grid: tuple[int, int] | None,
    context: TraversalContext,
) -> Cell:
    """Combine a CELL record's fields with where it was found.

    Coordinates are only kept for cells under a world; the persistent world
    cell may lack XCLC and sits at grid origin.
    """
    if context.world_form_id is None:
        if grid is not None:
            logger.debug("Ignoring XCLC on interior cell %#010x", header.form_id)
        x = y = None
    else:
        x, y = grid if grid is not None else (0, 0)
    return Cell(
        form_id=header.form_id,
        editor_id=editor_id,
        x=x,
        y=y,
        world_form_id=context.world_form_id,
        is_persistent=context.is_persistent,
    )


def walk_group(
    reader: BinaryReader,
    context: TraversalContext = TraversalContext(),
    options: ParseOptions = DEFAULT_OPTIONS,
    last_world_id: int | None = None,
) -> Iterator[World | Cell]:
    """Walk the group starting at the reader's position.

    Header read, then either one skip over the contents or a descent that
    reads records and nested groups until the declared size is used up.
    Either way the reader ends at group start + size.
    """
    start = reader.position
    sig = reader.signature()
    if sig != GRUP:
        raise GroupSizeMismatchError(f"Expected GRUP at offset {start}, got {sig!r}")
    header = read_group_header(reader)
    if header.size < GROUP_HEADER_SIZE:
        raise GroupSizeMismatchError(
            f"GRUP at offset {start} declares size {header.size}, "
            f"smaller than its {GROUP_HEADER_SIZE}-byte header"
        )
    end = start + header.size

    if group_action(header.group_type, header.label) is GroupAction.SKIP:
        logger.debug(
            "Skipping GRUP type %d label %r at offset %d (%d bytes)",
            header.group_type, header.label, start, header.size,
        )
        reader.skip(header.size - GROUP_HEADER_SIZE)
    else:
        logger.debug(
            "Entering GRUP type %d label %r at offset %d",
            header.group_type, header.label, start,
        )
        yield from walk_items(reader, end, child_context(context, header, last_world_id), options)

    if reader.position != end:
        raise GroupSizeMismatchError(
            f"GRUP type {header.group_type} at offset {start} declares size "
            f"{header.size} but its contents end at offset {reader.position}, not {end}"
        )


def walk_items(
    reader: BinaryReader,
    end: int,
    context: TraversalContext = TraversalContext(),
    options: ParseOptions = DEFAULT_OPTIONS,
) -> Iterator[World | Cell]:
    """Read records and nested groups from the reader's position up to `end`."""
    last_world_id: int | None = None
    while reader.position < end:
        if reader.peek_signature() == GRUP:
            yield from walk_group(reader, context, options, last_world_id)
            continue

        header = read_record_header(reader)
        if header.type == WRLD:
            world = decode_world(header, read_record_data(reader, header), options)
            last_world_id = world.form_id
            yield world
        elif header.type == CELL:
            editor_id, grid = decode_cell_fields(read_record_data(reader, header), options)
            yield build_cell(header, editor_id, grid, context)
        else:
            # Fast-skip everything else (REFR, ACHR, NAVM, LAND, ...)
            skip_record_data(reader, header)
